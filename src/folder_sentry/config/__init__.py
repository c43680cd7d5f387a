"""Configuration management and settings."""

from folder_sentry.config.settings import LogLevel, SentryConfig, get_config, reload_config, set_config

__all__ = ["SentryConfig", "LogLevel", "get_config", "reload_config", "set_config"]
