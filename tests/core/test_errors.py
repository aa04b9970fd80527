"""Tests for the bluejay error hierarchy."""

import pytest

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
    categorize_error,
    is_retryable,
)


class TestErrorContext:
    """Test ErrorContext serialization."""

    def test_to_dict_excludes_none(self):
        ctx = ErrorContext(operation="configure", path="a.json")
        assert ctx.to_dict() == {"operation": "configure", "path": "a.json"}

    def test_metadata_merged(self):
        ctx = ErrorContext(url="http://x")
        ctx.metadata["attempt"] = 3
        assert ctx.to_dict() == {"url": "http://x", "attempt": 3}


class TestHierarchy:
    """Test default categories and retry flags."""

    @pytest.mark.parametrize(
        ("error_cls", "category", "retryable"),
        [
            (NetworkError, ErrorCategory.NETWORK, True),
            (TransientError, ErrorCategory.NETWORK, True),
            (SourceError, ErrorCategory.SOURCE, False),
            (ParseError, ErrorCategory.PARSE, False),
            (ValidationError, ErrorCategory.VALIDATION, False),
            (ConfigError, ErrorCategory.CONFIG, False),
            (OrchestrationError, ErrorCategory.ORCHESTRATION, False),
            (StorageError, ErrorCategory.STORAGE, False),
        ],
    )
    def test_defaults(self, error_cls, category, retryable):
        error = error_cls("boom")
        assert error.category == category
        assert error.retryable is retryable
        assert isinstance(error, BluejayError)

    def test_retryable_override(self):
        assert NetworkError("x", retryable=False).retryable is False

    def test_parse_error_is_source_error(self):
        assert issubclass(ParseError, SourceError)

    def test_missing_field_is_key_error(self):
        error = MissingFieldError("id")
        assert isinstance(error, KeyError)
        assert isinstance(error, ValidationError)
        assert error.message == "Missing required field: id"

    def test_config_errors(self):
        assert MissingConfigError("path").key == "path"
        invalid = InvalidConfigError("http.max_retries", "lots")
        assert invalid.value == "lots"
        assert "http.max_retries" in invalid.message

    def test_tool_not_found(self):
        error = ToolNotFoundError("git")
        assert error.tool == "git"
        assert "git CLI not found" in error.message


class TestWithContext:
    """Test the fluent context API and serialization."""

    def test_known_and_extra_keys(self):
        error = SourceError("rejected").with_context(url="http://x", http_status=404, body="nope")
        assert error.context.url == "http://x"
        assert error.context.http_status == 404
        assert error.context.metadata == {"body": "nope"}

    def test_to_dict(self):
        cause = ConnectionError("refused")
        error = NetworkError("down", cause=cause).with_context(url="http://x")
        data = error.to_dict()
        assert data["error_type"] == "NetworkError"
        assert data["category"] == "NETWORK"
        assert data["retryable"] is True
        assert data["context"] == {"url": "http://x"}
        assert data["cause"] == "refused"
        assert error.__cause__ is cause

    def test_repr(self):
        assert repr(ParseError("bad")) == "ParseError('bad', category=PARSE)"


class TestUtilities:
    """Test is_retryable and categorize_error."""

    def test_is_retryable(self):
        assert is_retryable(NetworkError("x"))
        assert not is_retryable(SourceError("x"))
        assert is_retryable(ConnectionRefusedError())
        assert not is_retryable(ValueError())

    def test_categorize(self):
        assert categorize_error(ParseError("x")) == ErrorCategory.PARSE
        assert categorize_error(ConnectionResetError()) == ErrorCategory.NETWORK
        assert categorize_error(FileNotFoundError()) == ErrorCategory.STORAGE
        assert categorize_error(ValueError()) == ErrorCategory.VALIDATION
        assert categorize_error(RuntimeError()) == ErrorCategory.UNKNOWN
