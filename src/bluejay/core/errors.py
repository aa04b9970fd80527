"""
Structured error types for bluejay-infra.

Every failure the lifecycle sequencer lets escape is a ``BluejayError``
subclass carrying a category, a retryable flag and structured context, so
the CLI can render it and the retrying HTTP client can decide whether
another attempt makes sense.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       BluejayError                               │
        │  (category, retryable, retry_after, context, cause)             │
        ├─────────────────────────────────────────────────────────────────┤
        │  TransientError     SourceError       ValidationError           │
        │  (retryable=True)   (SOURCE)          (VALIDATION)              │
        │       │                 │                   │                    │
        │  NetworkError       ParseError        MissingFieldError         │
        │                                        (also a KeyError)         │
        │                                                                  │
        │  ConfigError        OrchestrationError   StorageError           │
        │  (CONFIG)           (ORCHESTRATION)      (STORAGE)              │
        │       │                 │                                        │
        │  MissingConfig      ToolNotFoundError                            │
        │  InvalidConfig                                                   │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = NetworkError("restore endpoint unreachable")
    >>> error.retryable
    True
    >>> error.with_context(url="http://127.0.0.1:5200").context.url
    'http://127.0.0.1:5200'

Guardrails:
    ❌ DON'T: raise bare Exception from sequencer code
    ✅ DO: pick the subclass whose category matches the failure

    ❌ DON'T: swallow the underlying exception
    ✅ DO: pass it as cause= for error chaining
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    # Infrastructure errors (usually transient)
    NETWORK = "NETWORK"           # Connection, timeout, DNS, HTTP 5xx
    STORAGE = "STORAGE"           # Disk, file system

    # Source/data errors
    SOURCE = "SOURCE"             # Upstream endpoint rejected the request
    PARSE = "PARSE"               # Agreement / JSON format errors
    VALIDATION = "VALIDATION"     # Missing or invalid fields

    # Configuration errors (never retryable)
    CONFIG = "CONFIG"             # Missing config, invalid settings

    # Application errors
    ORCHESTRATION = "ORCHESTRATION"  # docker / git invocation problems

    # Internal errors
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only the fields that are set end up in ``to_dict()``; anything without a
    dedicated field goes into ``metadata``.

    Example:
        >>> ctx = ErrorContext(operation="configure", path="agreements/acme.json")
        >>> ctx.to_dict()
        {'operation': 'configure', 'path': 'agreements/acme.json'}
    """

    # Execution context
    operation: str | None = None
    step: str | None = None
    run_id: str | None = None

    # Resource context
    path: str | None = None
    command: str | None = None

    # Request context
    url: str | None = None
    http_status: int | None = None

    # Additional metadata
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "step", "run_id", "path", "command", "url", "http_status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class BluejayError(Exception):
    """
    Base exception for all bluejay-infra errors.

    Subclasses set ``default_category`` and ``default_retryable``; callers
    may override either per instance.
    """

    default_category: ErrorCategory = ErrorCategory.UNKNOWN
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        retry_after: int | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.retry_after = retry_after
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> BluejayError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ParseError("Bad agreement").with_context(path=str(path))
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.retry_after is not None:
            result["retry_after"] = self.retry_after
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TRANSIENT ERRORS (Usually Retryable)
# =============================================================================


class TransientError(BluejayError):
    """Temporary error that may succeed on retry."""

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class NetworkError(TransientError):
    """Connection failure, timeout or 5xx response from an HTTP endpoint."""

    default_category = ErrorCategory.NETWORK


# =============================================================================
# SOURCE ERRORS
# =============================================================================


class SourceError(BluejayError):
    """An upstream endpoint or input document could not be used."""

    default_category = ErrorCategory.SOURCE
    default_retryable = False


class ParseError(SourceError):
    """Input could not be parsed (malformed JSON, wrong shape)."""

    default_category = ErrorCategory.PARSE
    default_retryable = False


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(BluejayError):
    """Input parsed but does not carry what the operation needs."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False


class MissingFieldError(ValidationError, KeyError):
    """A required document field is absent.

    Also a ``KeyError`` so callers treating the agreement as a plain mapping
    keep working.
    """

    def __init__(self, field_name: str, message: str | None = None):
        self.field_name = field_name
        super().__init__(message or f"Missing required field: {field_name}")


# =============================================================================
# CONFIG ERRORS (Never Retryable)
# =============================================================================


class ConfigError(BluejayError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class MissingConfigError(ConfigError):
    """Required configuration source is missing."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}")


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# ORCHESTRATION / STORAGE ERRORS
# =============================================================================


class OrchestrationError(BluejayError):
    """An external orchestration tool could not be invoked."""

    default_category = ErrorCategory.ORCHESTRATION
    default_retryable = False


class ToolNotFoundError(OrchestrationError):
    """An external CLI (docker, git) is not on PATH."""

    def __init__(self, tool: str, message: str | None = None):
        self.tool = tool
        super().__init__(
            message or f"{tool} CLI not found on PATH. Install {tool} or add it to PATH."
        )


class StorageError(BluejayError):
    """Filesystem operation failed."""

    default_category = ErrorCategory.STORAGE
    default_retryable = False


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, BluejayError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, BluejayError):
        return error.category
    if isinstance(error, ConnectionError):
        return ErrorCategory.NETWORK
    if isinstance(error, OSError):
        return ErrorCategory.STORAGE
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    if isinstance(error, KeyError):
        return ErrorCategory.CONFIG
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "BluejayError",
    "TransientError",
    "NetworkError",
    "SourceError",
    "ParseError",
    "ValidationError",
    "MissingFieldError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "OrchestrationError",
    "ToolNotFoundError",
    "StorageError",
    "is_retryable",
    "categorize_error",
]
