"""
Utilities module for Web Digest.

Provides logging setup and in-memory metrics.
"""

from web_digest.utils.logging import (
    setup_logging,
    get_logger,
    get_logger_with_context,
    reset_logging,
)
from web_digest.utils.metrics import (
    Metrics,
    TimingStats,
    increment_retries,
    record_url_outcome,
    time_llm_call,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "get_logger_with_context",
    "reset_logging",
    # Metrics
    "Metrics",
    "TimingStats",
    "increment_retries",
    "record_url_outcome",
    "time_llm_call",
]
