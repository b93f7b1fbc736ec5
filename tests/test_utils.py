"""Tests for logging setup."""

from loguru import logger

from querysearch.utils import LOG_FILE_NAME, setup_logging


def test_setup_logging_writes_log_file(tmp_path):
    setup_logging(log_level="DEBUG", log_to_file=True, log_dir=tmp_path)

    logger.info("search executed")
    logger.complete()

    log_file = tmp_path / LOG_FILE_NAME
    assert log_file.exists()
    assert "search executed" in log_file.read_text()

    setup_logging()


def test_setup_logging_defaults_to_config_dir(config_home):
    setup_logging(log_to_file=True)
    logger.complete()

    assert (config_home / ".querysearch" / LOG_FILE_NAME).exists()

    setup_logging()
