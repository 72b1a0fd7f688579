"""
Core module for Web Digest.

Contains the error type, the run data model, and the retry and
rate-limiting primitives shared by every network-dependent operation.
"""

from web_digest.core.exceptions import (
    ErrorCode,
    ErrorKind,
    WebDigestError,
    classify_http_status,
    get_retry_delay,
    is_retryable,
    validation_error,
)
from web_digest.core.models import (
    BatchReport,
    BatchResult,
    PageMetadata,
    SummaryOptions,
)
from web_digest.core.rate_limiter import RateLimiter, RateLimitStats
from web_digest.core.retry import BackoffStrategy, RetryPolicy

__all__ = [
    # Errors
    "ErrorCode",
    "ErrorKind",
    "WebDigestError",
    "classify_http_status",
    "get_retry_delay",
    "is_retryable",
    "validation_error",
    # Models
    "BatchReport",
    "BatchResult",
    "PageMetadata",
    "SummaryOptions",
    # Rate limiting
    "RateLimiter",
    "RateLimitStats",
    # Retry
    "BackoffStrategy",
    "RetryPolicy",
]
