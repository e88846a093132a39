"""
Logging system for Fetch Client.

Example:
    >>> from fetch_client.core.logging import LoggingConfig
    >>> config = LoggingConfig.create(level="DEBUG", format="colored")
    >>> client = FetchClient(logging=config)
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .logger import FetchClientLogger
from .formatters import JSONFormatter, TextFormatter, ColoredFormatter, get_formatter
from .filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    set_correlation_id,
    get_correlation_id,
    reset_correlation_id,
)
from .handlers import create_console_handler, create_file_handler

__all__ = [
    # Config
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    # Logger
    "FetchClientLogger",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "ColoredFormatter",
    "get_formatter",
    # Filters
    "CorrelationIdFilter",
    "ExtraFieldsFilter",
    "set_correlation_id",
    "get_correlation_id",
    "reset_correlation_id",
    # Handlers
    "create_console_handler",
    "create_file_handler",
]
