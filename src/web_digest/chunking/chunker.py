"""
Content chunking for model consumption.

Splits extracted page text into bounded, ordered chunks aligned to
paragraph and sentence boundaries. Chunks are exact slices of the source
text, so consecutive chunks meet end-to-start and joining their contents
reproduces the input.
"""

import re
from dataclasses import dataclass

from web_digest.utils.logging import get_logger

logger = get_logger(__name__)

CHARS_PER_TOKEN = 4
MAX_CHUNK_TOKENS = 8000
DEFAULT_MAX_CHUNK_CHARS = MAX_CHUNK_TOKENS * CHARS_PER_TOKEN

Span = tuple[int, int]


@dataclass
class ContentChunk:
    """
    A contiguous slice of source text prepared for one model call.

    `total` is the number of chunks in the split this chunk belongs to.
    """

    content: str
    index: int  # 0-based position in the split
    total: int
    start_char: int  # Offset of the first character in the source text
    end_char: int  # Offset one past the last character

    @property
    def char_count(self) -> int:
        """Number of characters in chunk."""
        return len(self.content)

    @property
    def position_label(self) -> str:
        """Human-readable position, e.g. '2/5'."""
        return f"{self.index + 1}/{self.total}"

    def __repr__(self) -> str:
        preview = self.content[:40] + "..." if len(self.content) > 40 else self.content
        return (
            f"ContentChunk(index={self.index}, total={self.total}, "
            f"span=({self.start_char}, {self.end_char}), text={preview!r})"
        )


class ContentChunker:
    """
    Splits text into chunks of at most `max_chunk_chars` characters.

    Paragraphs are packed greedily first. A packed span that is still too
    large (one giant paragraph) is re-packed from its sentences, and a single
    sentence that is still too large is cut into fixed-size slices.

    Example:
        >>> chunker = ContentChunker(max_chunk_chars=4000)
        >>> chunks = chunker.split(page_text)
        >>> [c.position_label for c in chunks]
        ['1/3', '2/3', '3/3']
    """

    # A newline, optional blank-line whitespace, and another newline
    PARAGRAPH_SEP = re.compile(r"\n\s*\n")

    # Whitespace following sentence-ending punctuation
    SENTENCE_SEP = re.compile(r"(?<=[.!?])\s+")

    def __init__(self, max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS) -> None:
        """
        Initialize content chunker.

        Args:
            max_chunk_chars: Maximum characters per chunk
        """
        if max_chunk_chars < 1:
            raise ValueError("max_chunk_chars must be positive")
        self.max_chunk_chars = max_chunk_chars

    def split(self, text: str) -> list[ContentChunk]:
        """
        Split text into ordered chunks.

        Args:
            text: Text to split

        Returns:
            List of ContentChunk covering the whole text in order
        """
        if len(text) <= self.max_chunk_chars:
            return [ContentChunk(content=text, index=0, total=1, start_char=0, end_char=len(text))]

        spans: list[Span] = []
        for start, end in self._pack(self._segments(text, 0, len(text), self.PARAGRAPH_SEP)):
            if end - start <= self.max_chunk_chars:
                spans.append((start, end))
                continue

            for s_start, s_end in self._pack(self._segments(text, start, end, self.SENTENCE_SEP)):
                if s_end - s_start <= self.max_chunk_chars:
                    spans.append((s_start, s_end))
                else:
                    spans.extend(self._fixed_slices(s_start, s_end))

        chunks = [
            ContentChunk(content=text[start:end], index=i, total=0, start_char=start, end_char=end)
            for i, (start, end) in enumerate(spans)
        ]

        total = len(chunks)
        for chunk in chunks:
            chunk.total = total

        logger.debug(f"Split {len(text)} chars into {total} chunks (max {self.max_chunk_chars})")
        return chunks

    def _segments(self, text: str, start: int, end: int, separator: re.Pattern) -> list[Span]:
        """
        Cut text[start:end] after each separator match.

        Separators stay attached to the segment that precedes them.
        """
        segments: list[Span] = []
        seg_start = start

        for match in separator.finditer(text, start, end):
            cut = match.end()
            if cut > seg_start:
                segments.append((seg_start, cut))
                seg_start = cut

        if seg_start < end:
            segments.append((seg_start, end))

        return segments

    def _pack(self, segments: list[Span]) -> list[Span]:
        """Greedily merge contiguous segments while they fit the limit."""
        packed: list[Span] = []
        current: Span | None = None

        for start, end in segments:
            if current is None:
                current = (start, end)
            elif end - current[0] > self.max_chunk_chars:
                packed.append(current)
                current = (start, end)
            else:
                current = (current[0], end)

        if current is not None:
            packed.append(current)

        return packed

    def _fixed_slices(self, start: int, end: int) -> list[Span]:
        """Cut an unsplittable span into max-size slices."""
        return [
            (pos, min(pos + self.max_chunk_chars, end))
            for pos in range(start, end, self.max_chunk_chars)
        ]

    def estimate_chunk_count(self, text: str) -> int:
        """Estimate number of chunks without actually splitting."""
        if len(text) <= self.max_chunk_chars:
            return 1
        return (len(text) + self.max_chunk_chars - 1) // self.max_chunk_chars
