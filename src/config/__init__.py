"""Configuration module."""

from src.config.logging import configure_logging, get_logger, redact_credentials
from src.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "configure_logging",
    "get_logger",
    "get_settings",
    "redact_credentials",
]
