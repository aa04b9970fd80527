"""Bluejay Execution -- resilience helpers for calls to external services."""

from bluejay.execution.retry import (
    ExponentialBackoff,
    RetryContext,
    RetryStrategy,
)

__all__ = [
    "ExponentialBackoff",
    "RetryContext",
    "RetryStrategy",
]
