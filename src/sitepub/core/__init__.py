"""
Core building blocks shared by every sitepub module: settings, structured
logging and the error hierarchy.
"""

from sitepub.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    LinkRewriteError,
    SitepubError,
)
from sitepub.core.logging import LogContext, configure_logging, get_logger
from sitepub.core.settings import SitepubSettings, get_settings

__all__ = [
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "LinkRewriteError",
    "LogContext",
    "SitepubError",
    "SitepubSettings",
    "configure_logging",
    "get_logger",
    "get_settings",
]
