"""
Web Digest - Summarize web pages with a language model.

This package loads pages in a headless browser, extracts their readable
text, and summarizes it through a hosted model, splitting long content
into chunks and processing batches of URLs with retries and rate limiting.
"""

from web_digest.config import Settings, load_config
from web_digest.core.exceptions import ErrorKind, WebDigestError
from web_digest.core.models import BatchReport, BatchResult, SummaryOptions
from web_digest.utils.logging import get_logger, setup_logging

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "load_config",
    "setup_logging",
    "get_logger",
    "ErrorKind",
    "WebDigestError",
    "BatchReport",
    "BatchResult",
    "SummaryOptions",
]
