"""
Single entry point composing the whole pipeline.

Wires browser, model client, rate limiter, summarizer and plugins together
from Settings, and exposes single-URL summarization (with link following)
and batch runs.
"""

import asyncio
from typing import Awaitable, Callable, Sequence

from web_digest.browser.driver import PlaywrightDriver
from web_digest.browser.html import normalize_link
from web_digest.browser.protocol import BrowserDriver
from web_digest.chunking.chunker import ContentChunker
from web_digest.config.settings import Settings
from web_digest.core.models import BatchReport, BatchResult, SummaryOptions
from web_digest.core.rate_limiter import RateLimiter
from web_digest.core.retry import RetryPolicy
from web_digest.llm.client import LanguageModelClient, create_client
from web_digest.pipeline.orchestrator import BatchOrchestrator
from web_digest.pipeline.processor import RetryFactory, UrlProcessor
from web_digest.pipeline.urls import validate_url
from web_digest.plugins import PluginRegistry, default_registry
from web_digest.summarization.summarizer import Summarizer
from web_digest.utils.logging import get_logger

logger = get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class PipelineFacade:
    """
    Summarizes web pages end to end.

    Example:
        >>> async with PipelineFacade.from_settings(get_settings()) as pipeline:
        ...     result = await pipeline.summarize_url("https://example.com", SummaryOptions())
        ...     print(result.summary)
    """

    def __init__(
        self,
        driver: BrowserDriver,
        summarizer: Summarizer,
        plugins: PluginRegistry | None = None,
        settings: Settings | None = None,
        retry_factory: RetryFactory | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """
        Initialize facade.

        Args:
            driver: Browser driver (owned: disposed by close())
            summarizer: Summarizer sharing the process-wide rate limiter
            plugins: Plugin registry (built-in plugins if None)
            settings: Application settings (defaults if None)
            retry_factory: Builds per-URL retry policies from options
            sleep: Awaitable sleep function (injectable for tests)
        """
        self.settings = settings or Settings()
        self.driver = driver
        self.summarizer = summarizer
        self.plugins = plugins or default_registry()
        self._sleep = sleep

        if retry_factory is None:
            retry_factory = _settings_retry_factory(self.settings)

        self.processor = UrlProcessor(
            driver,
            summarizer,
            self.plugins,
            retry_factory=retry_factory,
            navigation_timeout_ms=self.settings.browser.navigation_timeout_ms,
        )
        self.orchestrator = BatchOrchestrator(
            self.processor,
            summarizer,
            self.settings.batch,
            sleep=sleep,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: LanguageModelClient | None = None,
        driver: BrowserDriver | None = None,
    ) -> "PipelineFacade":
        """
        Build the production pipeline.

        Args:
            settings: Application settings
            client: Model client (Anthropic client from settings if None)
            driver: Browser driver (Playwright from settings if None)

        Raises:
            WebDigestError: CONFIGURATION error if the API key is missing
        """
        client = client or create_client(settings.llm)
        rate_limiter = RateLimiter(
            max_requests=settings.rate_limit.max_requests,
            window_seconds=settings.rate_limit.window_seconds,
        )
        summarizer = Summarizer(
            client,
            rate_limiter,
            chunker=ContentChunker(settings.chunking.max_chunk_chars),
            retry_factory=_settings_retry_factory(settings),
        )
        return cls(
            driver or PlaywrightDriver(settings.browser),
            summarizer,
            settings=settings,
        )

    async def summarize_url(self, url: str, options: SummaryOptions) -> BatchResult:
        """
        Summarize one page, optionally following its same-host links.

        Args:
            url: Page to summarize
            options: Run options; `follow_links` > 0 also summarizes up to
                that many linked pages into `result.followed`

        Returns:
            The page's result

        Raises:
            WebDigestError: VALIDATION error for a malformed URL, or the
                categorized failure of the primary page
        """
        url = validate_url(url)
        result, page = await self.processor.process_page(url, options)

        if options.follow_links > 0:
            links = await self.driver.extract_links(page, page.final_url or url)
            own = {normalize_link(u) for u in (url, page.final_url) if u}
            links = [link for link in links if normalize_link(link) not in own]
            links = links[: options.follow_links]
            if links:
                logger.info(f"Following {len(links)} links from {url}")
            result.followed = await self._follow(links, options)

        return result

    async def _follow(self, links: Sequence[str], options: SummaryOptions) -> list[BatchResult]:
        """Summarize linked pages; their failures become error results."""
        followed: list[BatchResult] = []

        for link in links:
            await self._sleep(self.settings.batch.link_delay_seconds)
            try:
                followed.append(await self.processor.process(link, options))
            except Exception as e:
                logger.warning(f"Failed to summarize linked page {link}: {e}")
                followed.append(BatchResult.from_error(link, e))

        return followed

    async def summarize_batch(self, urls: Sequence[str], options: SummaryOptions) -> BatchReport:
        """Summarize several URLs; see BatchOrchestrator.summarize_batch."""
        return await self.orchestrator.summarize_batch(urls, options)

    async def close(self) -> None:
        """Dispose the browser and close the model client."""
        await self.driver.dispose()
        close_client = getattr(self.summarizer.client, "close", None)
        if close_client is not None:
            await close_client()

    async def __aenter__(self) -> "PipelineFacade":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def _settings_retry_factory(settings: Settings) -> RetryFactory:
    """Retry policies taking counts from the options and shape from the settings."""

    def factory(options: SummaryOptions) -> RetryPolicy:
        return RetryPolicy.from_options(
            options,
            backoff=settings.retry.backoff,
            max_delay=settings.retry.max_delay_seconds,
            attempt_timeout=settings.retry.attempt_timeout_seconds,
        )

    return factory
