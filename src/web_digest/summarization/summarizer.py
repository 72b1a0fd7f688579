"""
Summarization through the language model.

Short content is summarized with one model call. Long content is split
into chunks that are summarized one at a time in index order, and the
chunk summaries are then merged by a single synthesis call. Comparative
analysis merges the summaries of several pages.

Every model call goes through the retry policy, and every attempt through
the shared rate limiter.
"""

from typing import Callable, Sequence

from web_digest.chunking.chunker import ContentChunk, ContentChunker
from web_digest.core.exceptions import ErrorCode, ErrorKind, WebDigestError, validation_error
from web_digest.core.models import BatchResult, SummaryOptions
from web_digest.core.rate_limiter import RateLimiter
from web_digest.core.retry import RetryCounter, RetryPolicy
from web_digest.llm.client import LanguageModelClient
from web_digest.llm.prompts import (
    build_chunk_prompt,
    build_comparative_prompt,
    build_direct_prompt,
    build_synthesis_prompt,
)
from web_digest.utils.logging import get_logger
from web_digest.utils.metrics import CHUNKS_SUMMARIZED, Metrics

logger = get_logger(__name__)

RetryFactory = Callable[[SummaryOptions], RetryPolicy]


class Summarizer:
    """
    Turns page text into summaries via a LanguageModelClient.

    Example:
        >>> summarizer = Summarizer(client, RateLimiter(2, 1.0))
        >>> summary = await summarizer.summarize_content(text, SummaryOptions(length="short"))
    """

    def __init__(
        self,
        client: LanguageModelClient,
        rate_limiter: RateLimiter,
        chunker: ContentChunker | None = None,
        retry_factory: RetryFactory | None = None,
    ) -> None:
        """
        Initialize summarizer.

        Args:
            client: Model client
            rate_limiter: Limiter shared by every model call in the process
            chunker: Content chunker (default chunk size if None)
            retry_factory: Builds the retry policy for a run's options
        """
        self.client = client
        self.rate_limiter = rate_limiter
        self.chunker = chunker or ContentChunker()
        self.retry_factory = retry_factory or RetryPolicy.from_options

    async def _generate(
        self,
        prompt: str,
        options: SummaryOptions,
        label: str,
        retry_counter: RetryCounter | None = None,
    ) -> str:
        """Retried, rate-limited model call rejecting blank output."""

        async def attempt() -> str:
            text = await self.rate_limiter.execute(lambda: self.client.generate(prompt))
            if not text or not text.strip():
                raise WebDigestError(
                    f"Model returned an empty response ({label})",
                    ErrorKind.MODEL,
                    code=ErrorCode.EMPTY_SUMMARY,
                    details={"operation": label},
                )
            return text

        policy = self.retry_factory(options)
        if retry_counter is not None:
            retry_counter.attach(policy)
        return await policy.execute(attempt, label=label)

    async def summarize_content(
        self,
        text: str,
        options: SummaryOptions,
        retry_counter: RetryCounter | None = None,
    ) -> str:
        """
        Summarize page text.

        Args:
            text: Extracted page text
            options: Length, format and retry options
            retry_counter: Collects the retries of every model call made

        Returns:
            The model's summary text

        Raises:
            WebDigestError: If a model call fails after its retries
        """
        chunks = self.chunker.split(text)

        if len(chunks) == 1:
            return await self._generate(
                build_direct_prompt(text, options),
                options,
                label="Summarization",
                retry_counter=retry_counter,
            )

        logger.info(f"Content is large ({len(text)} chars), processing in {len(chunks)} chunks")

        chunk_summaries: list[str] = []
        for chunk in chunks:
            chunk_summaries.append(await self.summarize_chunk(chunk, options, retry_counter))

        return await self.synthesize(chunk_summaries, options, retry_counter)

    async def summarize_chunk(
        self,
        chunk: ContentChunk,
        options: SummaryOptions,
        retry_counter: RetryCounter | None = None,
    ) -> str:
        """Summarize one chunk of a longer document."""
        logger.info(f"Processing chunk {chunk.position_label}")
        summary = await self._generate(
            build_chunk_prompt(chunk.content, chunk.index, chunk.total, options),
            options,
            label=f"Summarizing chunk {chunk.position_label}",
            retry_counter=retry_counter,
        )
        Metrics.get().increment(CHUNKS_SUMMARIZED)
        return summary

    async def synthesize(
        self,
        chunk_summaries: Sequence[str],
        options: SummaryOptions,
        retry_counter: RetryCounter | None = None,
    ) -> str:
        """Merge chunk summaries, in order, into one summary."""
        logger.info(f"Synthesizing final summary from {len(chunk_summaries)} chunks")
        return await self._generate(
            build_synthesis_prompt(chunk_summaries, options),
            options,
            label="Synthesizing chunk summaries",
            retry_counter=retry_counter,
        )

    async def generate_comparative_summary(
        self,
        results: Sequence[BatchResult],
        options: SummaryOptions,
    ) -> str:
        """
        Compare the successful results of a batch.

        Error results are skipped.

        Raises:
            WebDigestError: VALIDATION error with fewer than two successes,
                or the model error after retries
        """
        successful = [r for r in results if r.succeeded]
        if len(successful) < 2:
            raise validation_error(
                "Comparative analysis needs at least two successful results",
                code=ErrorCode.INSUFFICIENT_RESULTS,
                successful=len(successful),
            )

        logger.info(f"Generating comparative analysis of {len(successful)} pages")
        return await self._generate(
            build_comparative_prompt(successful), options, label="Comparative summary"
        )
