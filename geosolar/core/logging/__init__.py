"""Logging utilities for monitoring and debugging."""

from geosolar.core.logging.config import LogConfig
from geosolar.core.logging.logger import configure_logging, get_logger, log_context, logger

__all__ = [
    "LogConfig",
    "configure_logging",
    "get_logger",
    "log_context",
    "logger",
]
