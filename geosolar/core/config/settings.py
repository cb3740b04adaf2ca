"""Configuration management for geosolar data sources and logging."""

from __future__ import annotations

import os
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from geosolar.core.exceptions.base import ConfigurationError
from geosolar.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".geosolar" / "config.toml"

SILSO_ARCHIVED_URL = "https://www.sidc.be/silso/INFO/sndtotcsv.php"
SILSO_CURRENT_URL = "https://www.sidc.be/silso/DATA/EISN/EISN_current.csv"
GFZ_BASE_URL = "ftp://ftp.gfz-potsdam.de/pub/home/obs/Kp_ap_Ap_SN_F107/"


@dataclass
class SourceConfig:
    """Remote endpoints and transport settings."""

    silso_archived_url: str = SILSO_ARCHIVED_URL
    silso_current_url: str = SILSO_CURRENT_URL
    gfz_base_url: str = GFZ_BASE_URL
    timeout: float = 30.0
    user_agent: str = "geosolar/0.1.0"
    max_workers: int = 2

    def __post_init__(self) -> None:
        for name in ("timeout", "max_workers"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{name} must be a number, got {value!r}", setting=name)
        for name in ("silso_archived_url", "silso_current_url", "gfz_base_url", "user_agent"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ConfigurationError(f"{name} must be a string, got {value!r}", setting=name)
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive", setting="timeout")
        if self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1", setting="max_workers")
        if not self.gfz_base_url.endswith("/"):
            self.gfz_base_url = f"{self.gfz_base_url}/"


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "INFO"
    file: str | None = None


@dataclass
class GeoSolarConfig:
    """geosolar root configuration."""

    sources: SourceConfig = field(default_factory=SourceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> GeoSolarConfig:
        """Build a configuration from a nested dictionary."""
        sources = _build_section(SourceConfig, "sources", config_dict.get("sources", {}))
        logging_config = _build_section(LoggingConfig, "logging", config_dict.get("logging", {}))
        return cls(sources=sources, logging=logging_config)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a nested dictionary."""
        return {
            "sources": asdict(self.sources),
            "logging": asdict(self.logging),
        }


def _build_section(section_cls: type[Any], section: str, values: dict[str, Any]) -> Any:
    known = {section_field.name for section_field in fields(section_cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration key(s) in [{section}]: {', '.join(unknown)}",
            setting=f"{section}.{unknown[0]}",
        )
    return section_cls(**values)


class ConfigManager:
    """Loads the TOML configuration file."""

    def __init__(self, config_path: Path | None = None):
        """Initialise the manager.

        Args:
            config_path: Configuration file path; defaults to ``~/.geosolar/config.toml``.
        """
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self.config = self._load_config()

    def _load_config(self) -> GeoSolarConfig:
        if not self.config_path.exists():
            return GeoSolarConfig()

        try:
            with open(self.config_path, "rb") as f:
                config_dict = tomllib.load(f)
            return GeoSolarConfig.from_dict(config_dict)
        except (OSError, tomllib.TOMLDecodeError, ConfigurationError) as exc:
            logger.warning(f"Failed to load config from {self.config_path}, using defaults: {exc}")
            return GeoSolarConfig()

    def get_config(self) -> GeoSolarConfig:
        """Return the current configuration."""
        return self.config

    def update_config(self, **updates: Any) -> None:
        """Deep-merge ``updates`` into the current configuration."""
        config_dict = self.config.to_dict()

        def deep_update(d: dict[str, Any], u: dict[str, Any]) -> dict[str, Any]:
            for k, v in u.items():
                if isinstance(v, dict):
                    d[k] = deep_update(d.get(k, {}), v)
                else:
                    d[k] = v
            return d

        deep_update(config_dict, updates)
        self.config = GeoSolarConfig.from_dict(config_dict)


def _parse_float(name: str, raw_value: str) -> float:
    try:
        return float(raw_value)
    except ValueError as error:
        raise ConfigurationError(
            f"Invalid {name} value: expected a number, got '{raw_value}'.",
            setting=name,
        ) from error


def load_config_from_env() -> dict[str, Any]:
    """Read configuration overrides from ``GEOSOLAR_*`` environment variables."""
    config: dict[str, Any] = {}

    source_config: dict[str, Any] = {}
    env_to_key = {
        "GEOSOLAR_SILSO_ARCHIVED_URL": "silso_archived_url",
        "GEOSOLAR_SILSO_CURRENT_URL": "silso_current_url",
        "GEOSOLAR_GFZ_BASE_URL": "gfz_base_url",
        "GEOSOLAR_USER_AGENT": "user_agent",
    }
    for env_name, key in env_to_key.items():
        value = os.getenv(env_name)
        if value:
            source_config[key] = value
    timeout = os.getenv("GEOSOLAR_TIMEOUT")
    if timeout is not None:
        source_config["timeout"] = _parse_float("GEOSOLAR_TIMEOUT", timeout)

    if source_config:
        config["sources"] = source_config

    logging_config: dict[str, Any] = {}
    level = os.getenv("GEOSOLAR_LOG_LEVEL")
    if level is not None:
        logging_config["level"] = level
    log_file = os.getenv("GEOSOLAR_LOG_FILE")
    if log_file is not None:
        logging_config["file"] = log_file

    if logging_config:
        config["logging"] = logging_config

    return config


def get_config(config_path: Path | None = None) -> GeoSolarConfig:
    """Return file configuration with environment overrides applied."""
    manager = ConfigManager(config_path)
    overrides = load_config_from_env()
    if overrides:
        manager.update_config(**overrides)
    return manager.get_config()
