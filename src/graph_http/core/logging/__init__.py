"""
Logging system for the send pipeline.

Example:
    >>> from graph_http.core.logging import LoggingConfig, ProviderLogger
    >>>
    >>> config = LoggingConfig.create(level="DEBUG", format="json")
    >>> logger = ProviderLogger(config)
    >>> logger.info("Request started", method="GET", url="https://graph.example.com/me")
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .logger import ProviderLogger, get_logger, configure_logging
from .formatters import JSONFormatter, TextFormatter, get_formatter
from .filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    set_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    clear_correlation_id,
)
from .handlers import create_console_handler, create_file_handler

__all__ = [
    # Config
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    # Logger
    "ProviderLogger",
    "get_logger",
    "configure_logging",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "get_formatter",
    # Filters
    "CorrelationIdFilter",
    "ExtraFieldsFilter",
    "set_correlation_id",
    "get_correlation_id",
    "reset_correlation_id",
    "clear_correlation_id",
    # Handlers
    "create_console_handler",
    "create_file_handler",
]
