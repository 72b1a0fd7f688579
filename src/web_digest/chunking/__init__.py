"""
Chunking module for Web Digest.

Splits long page text into bounded, contiguous chunks.
"""

from web_digest.chunking.chunker import (
    ContentChunk,
    ContentChunker,
    DEFAULT_MAX_CHUNK_CHARS,
)

__all__ = [
    "ContentChunk",
    "ContentChunker",
    "DEFAULT_MAX_CHUNK_CHARS",
]
