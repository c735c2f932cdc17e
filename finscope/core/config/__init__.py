"""Configuration management module."""

from finscope.core.config.settings import (
    ConfigManager,
    FinscopeConfig,
    LoggingConfig,
    SourcesConfig,
    StorageConfig,
    get_default_config,
    load_config_from_env,
)

__all__ = [
    "ConfigManager",
    "FinscopeConfig",
    "SourcesConfig",
    "StorageConfig",
    "LoggingConfig",
    "get_default_config",
    "load_config_from_env",
]
