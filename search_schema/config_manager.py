"""
Configuration Management for Search Schema Sync

This module provides centralized configuration management with validation
and environment variable handling.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import colorlog
from dotenv import load_dotenv

from search_schema.exceptions import InvalidConfigurationError
from search_schema.logging_config import configure_logging

# Load environment variables
load_dotenv(override=True)


def _set_http_log_level(log_level: str) -> None:
    """Set log levels for HTTP-related loggers to reduce noise."""
    http_loggers = [
        "urllib3",
        "urllib3.connectionpool",
        "http.client",
        "requests",
        "requests.packages.urllib3",
    ]
    # HTTP logging should only appear at DEBUG level
    target_level = logging.DEBUG if log_level == "DEBUG" else logging.WARNING
    for name in http_loggers:
        logging.getLogger(name).setLevel(target_level)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


logger = logging.getLogger(__name__)


@dataclass
class StoreConfig:
    """Configuration for the metadata store connection."""

    url: str = field(default_factory=lambda: os.getenv("SCHEMA_STORE_URL", "memory://"))
    api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("SCHEMA_STORE_API_KEY")
    )
    timeout: float = field(
        default_factory=lambda: float(os.getenv("SCHEMA_STORE_TIMEOUT", "30"))
    )
    search_application: str = field(
        default_factory=lambda: os.getenv(
            "SCHEMA_SEARCH_APPLICATION", "Search Service Application"
        )
    )

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.url or not self.url.strip():
            raise InvalidConfigurationError(
                "Metadata store URL is required", config_section="store"
            )
        if self.timeout <= 0:
            raise InvalidConfigurationError(
                "Store timeout must be positive", config_section="store"
            )
        if not self.search_application:
            raise InvalidConfigurationError(
                "Search application name is required", config_section="store"
            )

    @property
    def is_remote(self) -> bool:
        return self.url.startswith(("http://", "https://"))

    def get_safe_url(self) -> str:
        """Get store URL for logging (without credentials)."""
        if "@" in self.url:
            scheme, _, rest = self.url.partition("://")
            return f"{scheme}://{rest.split('@')[-1]}"
        return self.url


@dataclass
class LoggingConfig:
    """Configuration for logging behavior."""

    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    format: str = field(
        default_factory=lambda: os.getenv(
            "LOG_FORMAT", "%(log_color)s%(levelname)s:%(name)s:%(message)s"
        )
    )
    file_output: Optional[str] = field(default_factory=lambda: os.getenv("LOG_FILE"))
    json_output: bool = field(default_factory=lambda: _env_flag("LOG_JSON"))

    def __post_init__(self) -> None:
        """Validate logging configuration."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.level.upper() not in valid_levels:
            raise InvalidConfigurationError(
                f"Log level must be one of: {valid_levels}", config_section="logging"
            )
        self.level = self.level.upper()

    def get_log_level(self) -> int:
        """Convert string log level to logging constant."""
        return int(getattr(logging, self.level))


@dataclass
class SchemaSyncConfig:
    """Main configuration class that aggregates all configuration sections."""

    store: StoreConfig = field(default_factory=StoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_environment(
        cls,
        store_url: Optional[str] = None,
        log_level: Optional[str] = None,
    ) -> "SchemaSyncConfig":
        """
        Create configuration from environment variables.

        Args:
            store_url: Optional override for SCHEMA_STORE_URL
            log_level: Optional override for LOG_LEVEL

        Returns:
            SchemaSyncConfig: Configured instance
        """
        config = cls()
        if store_url:
            config.store.url = store_url
        if log_level:
            config.logging.level = log_level
        return config

    def validate_all(self) -> None:
        """Validate all configuration sections."""
        try:
            self.store.__post_init__()
            self.logging.__post_init__()
            logger.debug("Configuration validation successful")
        except InvalidConfigurationError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

    def log_configuration_summary(self) -> None:
        """Log a summary of the current configuration (without sensitive data)."""
        logger.info("=" * 60)
        logger.info("SEARCH SCHEMA SYNC CONFIGURATION")
        logger.info("=" * 60)
        logger.info(f"Metadata store: {self.store.get_safe_url()}")
        logger.info(f"   - Search application: {self.store.search_application}")
        logger.info(f"   - Timeout: {self.store.timeout}s")
        logger.info(f"   - API key: {'configured' if self.store.api_key else 'none'}")
        logger.info(f"Logging Level: {self.logging.level}")
        if self.logging.file_output:
            logger.info(f"Log File: {self.logging.file_output}")
        logger.info("=" * 60)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for serialization."""
        return {
            "store": {
                "url": self.store.get_safe_url(),
                "search_application": self.store.search_application,
                "timeout": self.store.timeout,
                # Don't include API key in serialization for security
            },
            "logging": {
                "level": self.logging.level,
                "file_output": self.logging.file_output,
                "json_output": self.logging.json_output,
            },
        }


def setup_logging(config: LoggingConfig) -> None:
    """
    Setup logging configuration based on config.
    """
    _set_http_log_level(config.level.upper())

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()  # Remove any existing handlers
    root_logger.setLevel(config.get_log_level())

    console_handler = colorlog.StreamHandler()
    console_handler.setFormatter(colorlog.ColoredFormatter(config.format))
    root_logger.addHandler(console_handler)

    # Add file handler if file output is configured
    if config.file_output:
        file_handler = logging.FileHandler(config.file_output)
        file_formatter = logging.Formatter(
            "%(asctime)s - %(levelname)s:%(name)s:%(message)s"
        )
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    configure_logging(json_output=config.json_output)

    logger.debug(
        f"Logging configured: level={config.level}, file={config.file_output or 'console'}"
    )


def create_config_from_env(
    store_url: Optional[str] = None,
    log_level: Optional[str] = None,
) -> SchemaSyncConfig:
    """
    Factory function to create and validate configuration from environment.

    Raises:
        InvalidConfigurationError: If configuration is invalid
    """
    try:
        config = SchemaSyncConfig.from_environment(store_url, log_level)
    except ValueError as e:
        # float() on a malformed SCHEMA_STORE_TIMEOUT
        raise InvalidConfigurationError(
            f"Invalid configuration value: {e}", cause=e
        ) from e
    config.validate_all()
    return config
