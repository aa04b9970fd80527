"""Bluejay Core -- errors and structured logging shared by every layer.

Architecture::

    errors.py      Structured error hierarchy (BluejayError, NetworkError, ...)
    logging.py     structlog configuration and context helpers
"""

from bluejay.core.errors import (
    BluejayError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigError,
    MissingConfigError,
    MissingFieldError,
    NetworkError,
    OrchestrationError,
    ParseError,
    SourceError,
    StorageError,
    ToolNotFoundError,
    TransientError,
    ValidationError,
)
from bluejay.core.logging import LogContext, configure_logging, get_logger

__all__ = [
    "BluejayError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidConfigError",
    "LogContext",
    "MissingConfigError",
    "MissingFieldError",
    "NetworkError",
    "OrchestrationError",
    "ParseError",
    "SourceError",
    "StorageError",
    "ToolNotFoundError",
    "TransientError",
    "ValidationError",
    "configure_logging",
    "get_logger",
]
