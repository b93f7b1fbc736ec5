"""Configuration management for querysearch."""

import json
import os
from enum import Enum
from pathlib import Path
from typing import Literal, Optional

from loguru import logger
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from querysearch.utils import setup_logging

DATA_DIR_NAME = ".querysearch"
CONFIG_FILE_NAME = "config.json"

Environment = Literal["test", "dev", "user"]


class PaginationMode(str, Enum):
    """How page windows are computed from a page form."""

    SKIP_AND_TAKE = "skip_and_take"
    PAGE_AND_PAGE_SIZE = "page_and_page_size"


class QuerySearchConfig(BaseSettings):
    """Pydantic model for querysearch configuration."""

    env: Environment = Field(default="dev", description="Environment name")

    log_level: str = "INFO"

    pagination_mode: PaginationMode = Field(
        default=PaginationMode.PAGE_AND_PAGE_SIZE,
        description="Pagination mode shared by the default and full-text providers",
    )
    default_page_size: int = Field(
        default=20,
        description="Page size used when a form does not request one",
        gt=0,
    )
    max_page_size: int = Field(
        default=100,
        description="Upper bound for a requested page size",
        gt=0,
    )
    max_take: int = Field(
        default=1000,
        description="Upper bound for rows fetched in skip/take mode",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="QUERYSEARCH_",
        extra="ignore",
    )

    @model_validator(mode="after")
    def check_page_sizes(self) -> "QuerySearchConfig":
        if self.default_page_size > self.max_page_size:
            raise ValueError(
                f"default_page_size ({self.default_page_size}) "
                f"exceeds max_page_size ({self.max_page_size})"
            )
        return self


# Module-level cache for configuration
_CONFIG_CACHE: Optional[QuerySearchConfig] = None


class ConfigManager:
    """Manages querysearch configuration."""

    def __init__(self) -> None:
        home = os.getenv("HOME", Path.home())
        if isinstance(home, str):
            home = Path(home)

        if config_dir := os.getenv("QUERYSEARCH_CONFIG_DIR"):
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = home / DATA_DIR_NAME

        self.config_file = self.config_dir / CONFIG_FILE_NAME

    @property
    def config(self) -> QuerySearchConfig:
        """Get configuration, loading it lazily if needed."""
        return self.load_config()

    def load_config(self) -> QuerySearchConfig:
        """Load configuration from file, falling back to defaults.

        Environment variables take precedence over file values.
        """
        global _CONFIG_CACHE

        if _CONFIG_CACHE is not None:
            return _CONFIG_CACHE

        if not self.config_file.exists():
            _CONFIG_CACHE = QuerySearchConfig()
            return _CONFIG_CACHE

        try:
            file_data = json.loads(self.config_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in config file {self.config_file}: {e}")
            raise

        env_dict = QuerySearchConfig().model_dump()
        merged_data = file_data.copy()
        for field_name in QuerySearchConfig.model_fields.keys():
            if f"QUERYSEARCH_{field_name.upper()}" in os.environ:
                merged_data[field_name] = env_dict[field_name]

        _CONFIG_CACHE = QuerySearchConfig(**merged_data)
        return _CONFIG_CACHE

    def save_config(self, config: QuerySearchConfig) -> None:
        """Save configuration to file and refresh the cache."""
        global _CONFIG_CACHE
        self.config_dir.mkdir(parents=True, exist_ok=True)
        save_querysearch_config(self.config_file, config)
        _CONFIG_CACHE = config


def save_querysearch_config(file_path: Path, config: QuerySearchConfig) -> None:
    """Save configuration to file."""
    config_dict = config.model_dump(mode="json")
    file_path.write_text(json.dumps(config_dict, indent=2))


def reset_config_cache() -> None:
    """Drop the cached configuration so the next load rereads file and environment."""
    global _CONFIG_CACHE
    _CONFIG_CACHE = None


def init_logging(config: Optional[QuerySearchConfig] = None) -> None:  # pragma: no cover
    """Initialize logging from configuration; environment wins over the config file."""
    config = config or ConfigManager().config
    log_level = os.getenv("QUERYSEARCH_LOG_LEVEL", config.log_level)
    setup_logging(log_level=log_level)
