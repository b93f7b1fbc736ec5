"""Utility functions for querysearch."""

import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

LOG_FILE_NAME = "querysearch.log"


def setup_logging(
    log_level: str = "INFO",
    log_to_stdout: bool = False,
    log_to_file: bool = False,
    log_dir: Optional[Path] = None,
) -> None:
    """Configure loguru sinks for querysearch.

    Args:
        log_level: Minimum level for every sink
        log_to_stdout: Log to stdout instead of stderr
        log_to_file: Also write a rotating log file
        log_dir: Directory for the log file, defaults to ~/.querysearch
    """
    logger.remove()

    stream = sys.stdout if log_to_stdout else sys.stderr
    logger.add(stream, level=log_level, backtrace=False, diagnose=False)

    if log_to_file:
        if log_dir is None:
            log_dir = Path(os.getenv("QUERYSEARCH_CONFIG_DIR", Path.home() / ".querysearch"))
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_dir / LOG_FILE_NAME,
            level=log_level,
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )

    logger.debug(f"Logging configured: level={log_level} file={log_to_file}")
