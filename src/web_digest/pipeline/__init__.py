"""
Pipeline module for Web Digest.

Per-URL processing, batch orchestration and the facade wiring them
together.
"""

from web_digest.pipeline.facade import PipelineFacade
from web_digest.pipeline.orchestrator import BatchOrchestrator, BatchProgress, BatchStatus
from web_digest.pipeline.processor import UrlProcessor
from web_digest.pipeline.urls import is_valid_url, validate_url

__all__ = [
    "PipelineFacade",
    "BatchOrchestrator",
    "BatchProgress",
    "BatchStatus",
    "UrlProcessor",
    "is_valid_url",
    "validate_url",
]
