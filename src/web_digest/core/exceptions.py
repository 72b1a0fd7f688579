"""
Error type for Web Digest.

A single exception class carries a `kind` tag, a stable `code` and a
structured `details` payload. Callers dispatch on `kind` (and `code` for
finer distinctions) instead of on subclass identity.

Kinds:
    VALIDATION          bad input (malformed URL, invalid option); fatal
    TRANSIENT_NETWORK   timeout, 429, 5xx, connection failure; retryable
    PERMANENT_REQUEST   4xx other than 429; fatal
    CONTENT             empty or too-short extracted content; fatal
    MODEL               empty or failed generation; retryable
    RESOURCE            browser launch/recycle failure; fatal
    CONFIGURATION       invalid settings or missing credentials; fatal
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Category of a WebDigestError."""

    VALIDATION = "validation"
    TRANSIENT_NETWORK = "transient_network"
    PERMANENT_REQUEST = "permanent_request"
    CONTENT = "content"
    MODEL = "model"
    RESOURCE = "resource"
    CONFIGURATION = "configuration"


class ErrorCode:
    """Stable error codes surfaced to users and in JSON output."""

    INVALID_URL = "INVALID_URL"
    INVALID_OPTION = "INVALID_OPTION"
    UNKNOWN_PLUGIN = "UNKNOWN_PLUGIN"
    INSUFFICIENT_RESULTS = "INSUFFICIENT_RESULTS"

    TIMEOUT = "TIMEOUT"
    RATE_LIMITED = "RATE_LIMITED"
    SERVER_ERROR = "SERVER_ERROR"
    NO_RESPONSE = "NO_RESPONSE"
    NAVIGATION_FAILED = "NAVIGATION_FAILED"
    HTTP_ERROR = "HTTP_ERROR"

    NO_CONTENT = "NO_CONTENT"
    TEXT_EXTRACTION_FAILED = "TEXT_EXTRACTION_FAILED"

    EMPTY_SUMMARY = "EMPTY_SUMMARY"
    MODEL_RATE_LIMITED = "MODEL_RATE_LIMITED"
    MODEL_UNAVAILABLE = "MODEL_UNAVAILABLE"
    MODEL_AUTH_FAILED = "MODEL_AUTH_FAILED"
    MODEL_REQUEST_REJECTED = "MODEL_REQUEST_REJECTED"

    BROWSER_LAUNCH_FAILED = "BROWSER_LAUNCH_FAILED"
    BROWSER_RECYCLE_FAILED = "BROWSER_RECYCLE_FAILED"
    BROWSER_NOT_STARTED = "BROWSER_NOT_STARTED"

    INVALID_CONFIG = "INVALID_CONFIG"

    RETRIES_EXHAUSTED = "RETRIES_EXHAUSTED"


_RETRYABLE_KINDS = frozenset({ErrorKind.TRANSIENT_NETWORK, ErrorKind.MODEL})


class WebDigestError(Exception):
    """
    Categorized error raised anywhere in the pipeline.

    Attributes:
        message: Human-readable error description
        kind: ErrorKind tag used for dispatch
        code: Stable upper-case identifier (defaults to the kind name)
        details: Additional structured context
        retryable: Whether a retry may succeed (defaults from kind)
        retry_after: Suggested delay in seconds before retry (optional)
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool | None = None,
        retry_after: float | None = None,
    ) -> None:
        self.message = message
        self.kind = kind
        self.code = code or kind.name
        self.details = details or {}
        self.retryable = kind in _RETRYABLE_KINDS if retryable is None else retryable
        self.retry_after = retry_after
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({self.message!r}, kind={self.kind.value}, "
            f"code={self.code!r}, details={self.details!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
        }


def validation_error(
    message: str,
    code: str = ErrorCode.INVALID_OPTION,
    **details: Any,
) -> WebDigestError:
    """Build a (fatal) VALIDATION error."""
    return WebDigestError(message, ErrorKind.VALIDATION, code=code, details=details)


def classify_http_status(status: int, url: str | None = None) -> WebDigestError | None:
    """
    Map an HTTP status from page navigation to an error.

    Returns None for statuses below 400.
    """
    details = {"url": url, "status_code": status} if url else {"status_code": status}

    if status == 429:
        return WebDigestError(
            "Rate limited by server",
            ErrorKind.TRANSIENT_NETWORK,
            code=ErrorCode.RATE_LIMITED,
            details=details,
            retry_after=5.0,
        )
    if status >= 500:
        return WebDigestError(
            f"Server error {status}",
            ErrorKind.TRANSIENT_NETWORK,
            code=ErrorCode.SERVER_ERROR,
            details=details,
        )
    if status >= 400:
        return WebDigestError(
            f"HTTP error {status}",
            ErrorKind.PERMANENT_REQUEST,
            code=ErrorCode.HTTP_ERROR,
            details=details,
        )
    return None


def is_retryable(error: BaseException) -> bool:
    """
    Check if an error may succeed on retry.

    Errors outside the WebDigestError taxonomy are treated as retryable.
    """
    if isinstance(error, WebDigestError):
        return error.retryable
    return isinstance(error, Exception)


def get_retry_delay(error: BaseException, default: float = 5.0) -> float:
    """Get the error's retry_after hint, or `default` when it has none."""
    if isinstance(error, WebDigestError) and error.retry_after is not None:
        return error.retry_after
    return default
