"""
Tests for the error type.

Tests kinds, codes, retryability defaults and HTTP status classification.
"""

import pytest

from web_digest.core.exceptions import (
    ErrorCode,
    ErrorKind,
    WebDigestError,
    classify_http_status,
    get_retry_delay,
    is_retryable,
    validation_error,
)


class TestWebDigestError:
    """Tests for WebDigestError."""

    def test_basic_error(self):
        """Error should carry message, kind and a code defaulting to the kind name."""
        exc = WebDigestError("Bad input", ErrorKind.VALIDATION)

        assert isinstance(exc, Exception)
        assert exc.message == "Bad input"
        assert exc.kind == ErrorKind.VALIDATION
        assert exc.code == "VALIDATION"
        assert str(exc) == "Bad input"

    def test_details_in_str(self):
        """Details should be rendered by str()."""
        exc = WebDigestError(
            "Navigation failed",
            ErrorKind.TRANSIENT_NETWORK,
            details={"url": "https://example.com"},
        )

        assert "url='https://example.com'" in str(exc)

    @pytest.mark.parametrize(
        "kind,expected",
        [
            (ErrorKind.TRANSIENT_NETWORK, True),
            (ErrorKind.MODEL, True),
            (ErrorKind.VALIDATION, False),
            (ErrorKind.PERMANENT_REQUEST, False),
            (ErrorKind.CONTENT, False),
            (ErrorKind.RESOURCE, False),
            (ErrorKind.CONFIGURATION, False),
        ],
    )
    def test_default_retryability(self, kind, expected):
        """Retryability should default from the kind."""
        assert WebDigestError("x", kind).retryable is expected

    def test_explicit_retryable_overrides_kind(self):
        """An explicit retryable flag should win over the kind default."""
        exc = WebDigestError("x", ErrorKind.MODEL, retryable=False)

        assert exc.retryable is False
        assert not is_retryable(exc)

    def test_to_dict(self):
        """to_dict should expose kind, code, message, details and retryable."""
        exc = WebDigestError(
            "Server error 503",
            ErrorKind.TRANSIENT_NETWORK,
            code=ErrorCode.SERVER_ERROR,
            details={"status_code": 503},
        )

        data = exc.to_dict()

        assert data["kind"] == "transient_network"
        assert data["code"] == "SERVER_ERROR"
        assert data["message"] == "Server error 503"
        assert data["details"] == {"status_code": 503}
        assert data["retryable"] is True

    def test_validation_error_helper(self):
        """validation_error should build a fatal VALIDATION error."""
        exc = validation_error("Invalid URL", code=ErrorCode.INVALID_URL, url="nope")

        assert exc.kind == ErrorKind.VALIDATION
        assert exc.code == ErrorCode.INVALID_URL
        assert exc.details == {"url": "nope"}
        assert not exc.retryable


class TestHelpers:
    """Tests for classification helpers."""

    def test_generic_exceptions_are_retryable(self):
        """Errors outside the taxonomy should be treated as retryable."""
        assert is_retryable(RuntimeError("boom"))
        assert is_retryable(ConnectionError("reset"))

    def test_get_retry_delay(self):
        """get_retry_delay should prefer the error's hint."""
        hinted = WebDigestError("x", ErrorKind.TRANSIENT_NETWORK, retry_after=7.5)
        plain = WebDigestError("x", ErrorKind.TRANSIENT_NETWORK)

        assert get_retry_delay(hinted) == 7.5
        assert get_retry_delay(plain, default=2.0) == 2.0
        assert get_retry_delay(ValueError("x"), default=1.0) == 1.0


class TestClassifyHttpStatus:
    """Tests for navigation status classification."""

    def test_success_is_not_an_error(self):
        """Statuses below 400 should not produce an error."""
        assert classify_http_status(200) is None
        assert classify_http_status(304) is None

    def test_rate_limited(self):
        """429 should be a retryable rate-limit error with a delay hint."""
        error = classify_http_status(429, "https://example.com")

        assert error.kind == ErrorKind.TRANSIENT_NETWORK
        assert error.code == ErrorCode.RATE_LIMITED
        assert error.retry_after == 5.0
        assert error.retryable

    def test_server_error(self):
        """5xx should be a retryable server error."""
        error = classify_http_status(503)

        assert error.code == ErrorCode.SERVER_ERROR
        assert error.retryable

    def test_client_error_is_permanent(self):
        """Other 4xx should be permanent."""
        error = classify_http_status(404, "https://example.com/missing")

        assert error.kind == ErrorKind.PERMANENT_REQUEST
        assert error.code == ErrorCode.HTTP_ERROR
        assert not error.retryable
        assert error.details["url"] == "https://example.com/missing"
