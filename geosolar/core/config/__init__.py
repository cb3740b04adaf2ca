"""Configuration management module."""

from geosolar.core.config.settings import (
    ConfigManager,
    GeoSolarConfig,
    LoggingConfig,
    SourceConfig,
    get_config,
    load_config_from_env,
)

__all__ = [
    "ConfigManager",
    "GeoSolarConfig",
    "LoggingConfig",
    "SourceConfig",
    "get_config",
    "load_config_from_env",
]
