"""
Configuration management for the folder sentry.

Handles environment variables and ``.env`` loading, and provides defaults
with validation for the watchers, the escalation timer and logging.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from folder_sentry.models.exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Logging level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class SentryConfig(BaseSettings):
    """
    Central configuration class for the folder sentry.

    Every option can be set through a ``FOLDER_SENTRY_`` prefixed environment
    variable or a ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="FOLDER_SENTRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # === Watch Configuration ===
    watched_paths: Annotated[list[Path], NoDecode] = Field(
        default_factory=list, description="Directories to watch when none are given"
    )
    use_polling: bool = Field(
        default=False, description="Use the polling observer (network shares without native notifications)"
    )
    polling_interval_seconds: float = Field(default=1.0, ge=0.05, le=60.0, description="Polling observer interval")
    observer_join_timeout: float = Field(
        default=5.0, ge=0.0, le=60.0, description="How long to wait for the observer thread on stop"
    )

    # === Acknowledgment Configuration ===
    tick_interval_seconds: float = Field(
        default=1.0, ge=0.05, le=60.0, description="Elapsed-time telemetry cadence for open sessions"
    )
    overdue_threshold_seconds: float | None = Field(
        default=None, gt=0.0, description="Escalate once a session stays unanswered this long (disabled if None)"
    )
    flash_count: int = Field(default=3, ge=1, le=20, description="Flashes requested per attention escalation")

    # === Logging Configuration ===
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_file: Path | None = Field(default=None, description="Log file path (stderr if None)")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log message format"
    )

    @field_validator('watched_paths', mode='before')
    @classmethod
    def split_watched_paths(cls, v):
        """Accept an ``os.pathsep`` separated string as well as a list."""
        if isinstance(v, str):
            return [part for part in v.split(os.pathsep) if part.strip()]
        return v

    @field_validator('watched_paths')
    @classmethod
    def expand_watched_paths(cls, v):
        """Expand ``~`` in configured directories."""
        return [Path(p).expanduser() for p in v]

    @model_validator(mode='after')
    def validate_overdue_threshold(self):
        """An overdue threshold shorter than one tick could never be observed."""
        if self.overdue_threshold_seconds is not None and self.overdue_threshold_seconds < self.tick_interval_seconds:
            raise ConfigurationError(
                "overdue_threshold_seconds must not be shorter than tick_interval_seconds",
                config_key="overdue_threshold_seconds",
                expected_type="float >= tick_interval_seconds",
                actual_value=self.overdue_threshold_seconds,
            )
        return self

    def get_log_config(self) -> dict[str, Any]:
        """Get logging configuration dictionary."""
        config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"standard": {"format": self.log_format}},
            "handlers": {
                "default": {
                    "level": self.log_level.value,
                    "formatter": "standard",
                    "class": "logging.StreamHandler" if not self.log_file else "logging.FileHandler",
                }
            },
            "loggers": {"folder_sentry": {"handlers": ["default"], "level": self.log_level.value, "propagate": False}},
        }

        if self.log_file:
            config["handlers"]["default"]["filename"] = str(self.log_file)

        return config


# Global configuration instance
_config: SentryConfig | None = None


def get_config() -> SentryConfig:
    """
    Get the global configuration instance.

    Creates a new instance on first call and reuses it for subsequent calls.
    """
    global _config
    if _config is None:
        _config = SentryConfig()
    return _config


def reload_config() -> SentryConfig:
    """Force reload the configuration from environment/files."""
    global _config
    _config = SentryConfig()
    return _config


def set_config(config: SentryConfig) -> None:
    """
    Set a custom configuration instance.

    Primarily used for testing or embedding scenarios.
    """
    global _config
    _config = config
