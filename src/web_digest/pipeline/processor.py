"""
Per-URL processing chain.

navigate → extract → summarize runs as one unit inside the retry policy,
so a transient navigation failure re-runs the whole chain for that URL.
Plugins run once on the successful outcome. Retries of the chain and of
the model calls inside it are counted together on the result.
"""

import time
from typing import Callable

from web_digest.browser.protocol import BrowserDriver, PageHandle
from web_digest.core.exceptions import WebDigestError
from web_digest.core.models import BatchResult, PageMetadata, SummaryOptions
from web_digest.core.retry import RetryCounter, RetryPolicy
from web_digest.plugins.base import PluginRegistry, run_plugins
from web_digest.summarization.summarizer import Summarizer
from web_digest.utils.logging import get_logger_with_context
from web_digest.utils.metrics import record_url_outcome

RetryFactory = Callable[[SummaryOptions], RetryPolicy]


class UrlProcessor:
    """
    Summarizes one URL through the browser, the summarizer and plugins.

    Example:
        >>> processor = UrlProcessor(driver, summarizer, default_registry())
        >>> result = await processor.process("https://example.com", SummaryOptions())
    """

    def __init__(
        self,
        driver: BrowserDriver,
        summarizer: Summarizer,
        plugins: PluginRegistry,
        retry_factory: RetryFactory | None = None,
        navigation_timeout_ms: int | None = None,
    ) -> None:
        """
        Initialize processor.

        Args:
            driver: Browser used for navigation and extraction
            summarizer: Summarizer for the extracted text
            plugins: Registry the run's plugin names are resolved against
            retry_factory: Builds the per-URL retry policy from the options
            navigation_timeout_ms: Passed to every navigate() call
        """
        self.driver = driver
        self.summarizer = summarizer
        self.plugins = plugins
        self.retry_factory = retry_factory or RetryPolicy.from_options
        self.navigation_timeout_ms = navigation_timeout_ms

    async def process(self, url: str, options: SummaryOptions) -> BatchResult:
        """
        Summarize `url`.

        Raises:
            WebDigestError: Categorized failure after retries
        """
        result, _ = await self.process_page(url, options)
        return result

    async def process_page(
        self,
        url: str,
        options: SummaryOptions,
    ) -> tuple[BatchResult, PageHandle]:
        """Like process(), also returning the loaded page for link discovery."""
        logger = get_logger_with_context(__name__, url=url)
        plugins = self.plugins.resolve(options.plugins)
        start_time = time.perf_counter()
        retries = RetryCounter()

        async def chain() -> tuple[PageHandle, PageMetadata, str, str]:
            page = await self.driver.navigate(url, self.navigation_timeout_ms)
            text = await self.driver.extract_text(page)
            metadata = await self.driver.extract_metadata(page)
            summary = await self.summarizer.summarize_content(text, options, retries)
            return page, metadata, text, summary

        try:
            page, metadata, text, summary = await retries.attach(
                self.retry_factory(options)
            ).execute(chain, label=f"Processing {url}")
        except WebDigestError as e:
            e.details["retries"] = retries.count
            record_url_outcome(succeeded=False)
            logger.error(f"Failed: {e.message} ({e.code})")
            raise

        report = await run_plugins(plugins, text, metadata)
        elapsed = time.perf_counter() - start_time

        record_url_outcome(succeeded=True)
        logger.info(f"Summarized in {elapsed:.2f}s")

        result = BatchResult(
            url=url,
            summary=summary,
            metadata=metadata,
            analysis=report.analysis or None,
            tags=report.tags or None,
            retries=retries.count or None,
            processing_time=elapsed,
        )
        return result, page
