"""
Summarization module for Web Digest.

Direct, chunked and comparative summarization through the model client.
"""

from web_digest.summarization.summarizer import Summarizer

__all__ = ["Summarizer"]
