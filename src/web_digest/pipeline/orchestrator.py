"""
Batch orchestration over a list of URLs.

URLs are processed sequentially in input order. Each URL is isolated: its
failure becomes an error result and the batch moves on. Between URLs the
orchestrator paces requests and periodically recycles the browser. A batch
ends with an optional comparative analysis of the successful pages.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Sequence

from web_digest.config.settings import BatchSettings
from web_digest.core.exceptions import ErrorCode, WebDigestError
from web_digest.core.models import BatchReport, BatchResult, SummaryOptions
from web_digest.pipeline.processor import UrlProcessor
from web_digest.pipeline.urls import validate_url
from web_digest.summarization.summarizer import Summarizer
from web_digest.utils.logging import get_logger
from web_digest.utils.metrics import record_url_outcome

logger = get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class BatchStatus(str, Enum):
    """Status of a batch run."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"


@dataclass
class BatchProgress:
    """
    Current progress of a batch run.

    Updated as each URL finishes.
    """

    status: BatchStatus = BatchStatus.PENDING
    total: int = 0
    current_index: int | None = None
    current_url: str | None = None
    succeeded: int = 0
    failed: int = 0
    recycles: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def completed(self) -> int:
        return self.succeeded + self.failed

    @property
    def elapsed_seconds(self) -> float:
        """Seconds elapsed since the batch started."""
        if self.started_at is None:
            return 0.0
        end = self.completed_at or datetime.now(timezone.utc)
        return (end - self.started_at).total_seconds()


class BatchOrchestrator:
    """
    Runs a batch of URLs through a UrlProcessor.

    Example:
        >>> orchestrator = BatchOrchestrator(processor, summarizer, settings.batch)
        >>> report = await orchestrator.summarize_batch(urls, SummaryOptions(comparative=True))
        >>> print(f"{report.succeeded}/{len(report.results)} summarized")
    """

    def __init__(
        self,
        processor: UrlProcessor,
        summarizer: Summarizer,
        settings: BatchSettings | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            processor: Per-URL processing chain
            summarizer: Used for the comparative analysis
            settings: Pacing and recycling configuration
            sleep: Awaitable sleep function (injectable for tests)
        """
        self.processor = processor
        self.summarizer = summarizer
        self.settings = settings or BatchSettings()
        self._sleep = sleep
        self._progress = BatchProgress()

    @property
    def progress(self) -> BatchProgress:
        return self._progress

    @property
    def status(self) -> BatchStatus:
        return self._progress.status

    async def summarize_batch(
        self,
        urls: Sequence[str],
        options: SummaryOptions,
    ) -> BatchReport:
        """
        Summarize every URL and return one result per URL, in input order.

        Args:
            urls: URLs to summarize; invalid entries become error results
            options: Options shared by every URL of the run

        Returns:
            BatchReport with results, optional comparative text and warnings

        Raises:
            WebDigestError: For failures of shared infrastructure (unknown
                plugin name, browser launch failure before any URL
                reached the browser)
        """
        self.processor.plugins.resolve(options.plugins)

        self._progress = BatchProgress(
            status=BatchStatus.PROCESSING,
            total=len(urls),
            started_at=datetime.now(timezone.utc),
        )
        start_time = time.perf_counter()
        report = BatchReport()
        since_recycle = 0
        browser_used = False

        logger.info(f"Starting batch of {len(urls)} URLs")

        for index, url in enumerate(urls):
            self._progress.current_index = index
            self._progress.current_url = url
            logger.info(f"[{index + 1}/{len(urls)}] Processing {url}")

            result, reached_browser = await self._process_one(url, options, browser_used)
            browser_used = browser_used or reached_browser
            report.results.append(result)

            if result.succeeded:
                self._progress.succeeded += 1
            else:
                self._progress.failed += 1

            remaining = index < len(urls) - 1
            if not remaining:
                break

            if reached_browser:
                since_recycle += 1
                if since_recycle >= self.settings.recycle_every:
                    await self._recycle()
                    since_recycle = 0

            if self.settings.delay_seconds > 0:
                await self._sleep(self.settings.delay_seconds)

        if options.comparative:
            await self._add_comparative(report, options)

        report.duration_seconds = time.perf_counter() - start_time
        self._progress.completed_at = datetime.now(timezone.utc)
        self._progress.status = BatchStatus.COMPLETED

        logger.info(
            f"Batch finished: {report.succeeded} succeeded, {report.failed} failed, "
            f"{report.duration_seconds:.1f}s"
        )
        return report

    async def _process_one(
        self,
        url: str,
        options: SummaryOptions,
        browser_used: bool,
    ) -> tuple[BatchResult, bool]:
        """
        Result for one URL, and whether the browser was used.

        A browser launch failure aborts the batch only while no earlier URL
        has reached the browser; later it is an error result like any other.
        """
        try:
            url = validate_url(url)
        except WebDigestError as e:
            logger.warning(f"Skipping invalid URL: {url!r}")
            record_url_outcome(succeeded=False)
            return BatchResult.from_error(url, e), False

        start_time = time.perf_counter()
        try:
            return await self.processor.process(url, options), True
        except WebDigestError as e:
            if e.code == ErrorCode.BROWSER_LAUNCH_FAILED and not browser_used:
                raise
            return BatchResult.from_error(url, e, time.perf_counter() - start_time), True
        except Exception as e:
            logger.error(f"Unexpected error for {url}: {e}")
            record_url_outcome(succeeded=False)
            return BatchResult.from_error(url, e, time.perf_counter() - start_time), True

    async def _recycle(self) -> None:
        try:
            await self.processor.driver.recycle()
            self._progress.recycles += 1
        except Exception as e:
            logger.warning(f"Browser recycle failed, continuing with current session: {e}")

    async def _add_comparative(self, report: BatchReport, options: SummaryOptions) -> None:
        if report.succeeded < 2:
            logger.info("Skipping comparative analysis: fewer than two successful results")
            return

        try:
            report.comparative = await self.summarizer.generate_comparative_summary(
                report.results, options
            )
        except Exception as e:
            message = e.message if isinstance(e, WebDigestError) else str(e)
            logger.warning(f"Comparative analysis failed: {message}")
            report.warnings.append(f"Comparative analysis failed: {message}")
