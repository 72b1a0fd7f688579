"""
Playwright implementation of BrowserDriver.

Handles browser launch, navigation with error classification, and
periodic recycling. Supports chromium, firefox, and webkit engines.
Extraction runs over the HTML captured at navigation time.
"""

import time
from typing import Any, Callable

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from web_digest.browser.html import clean_text, parse_links, parse_metadata
from web_digest.browser.protocol import PageHandle
from web_digest.config.settings import BrowserSettings
from web_digest.core.exceptions import ErrorCode, ErrorKind, WebDigestError, classify_http_status
from web_digest.core.models import PageMetadata
from web_digest.utils.logging import get_logger
from web_digest.utils.metrics import BROWSER_RECYCLES, Metrics

logger = get_logger(__name__)

NETWORK_ERROR_MARKERS = ("net::", "dns", "connection", "ns_error", "ssl")


class PlaywrightDriver:
    """
    Manages one Playwright browser and navigates pages in it.

    The browser launches lazily on the first navigation and stays up for
    the whole run until recycle() or dispose().

    Example:
        >>> async with PlaywrightDriver(settings) as driver:
        ...     page = await driver.navigate("https://example.com")
        ...     text = await driver.extract_text(page)
    """

    def __init__(
        self,
        settings: BrowserSettings,
        playwright_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        """
        Initialize driver with configuration.

        Args:
            settings: Browser configuration from app settings
            playwright_factory: Returns an object whose start() yields a
                Playwright instance
        """
        self.settings = settings
        self._playwright_factory = playwright_factory
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None

    @property
    def is_running(self) -> bool:
        """Check if browser is currently running."""
        return self._browser is not None and self._browser.is_connected()

    async def start(self) -> None:
        """
        Start Playwright, launch the browser and open a context.

        Raises:
            WebDigestError: RESOURCE error (BROWSER_LAUNCH_FAILED)
        """
        if self._browser is not None:
            return

        self._playwright, self._browser, self._context = await self._launch()

    async def _launch(self) -> tuple[Playwright, Browser, BrowserContext]:
        """
        Fresh Playwright, browser and context, leaving the current ones alone.

        Anything started before a failure is closed again.
        """
        logger.info(
            f"Starting {self.settings.browser_type} browser (headless={self.settings.headless})"
        )
        playwright: Playwright | None = None
        browser: Browser | None = None

        try:
            playwright = await self._playwright_factory().start()
            browser_type = getattr(playwright, self.settings.browser_type)
            browser = await browser_type.launch(headless=self.settings.headless)
            context = await self._new_context(browser)
        except Exception as e:
            await self._close_handles(None, browser, playwright)
            raise WebDigestError(
                f"Failed to launch browser: {e}",
                ErrorKind.RESOURCE,
                code=ErrorCode.BROWSER_LAUNCH_FAILED,
                details={"browser_type": self.settings.browser_type},
            ) from e

        logger.info("Browser started successfully")
        return playwright, browser, context

    async def _new_context(self, browser: Browser) -> BrowserContext:
        context_options: dict = {
            "viewport": {
                "width": self.settings.viewport_width,
                "height": self.settings.viewport_height,
            },
            "ignore_https_errors": self.settings.ignore_https_errors,
        }
        if self.settings.user_agent:
            context_options["user_agent"] = self.settings.user_agent

        context = await browser.new_context(**context_options)
        context.set_default_timeout(self.settings.timeout_ms)
        context.set_default_navigation_timeout(self.settings.navigation_timeout_ms)
        return context

    async def navigate(self, url: str, timeout_ms: int | None = None) -> PageHandle:
        """
        Open `url` in a fresh page and capture its rendered HTML.

        Args:
            url: Target URL
            timeout_ms: Navigation timeout (settings default if None)

        Returns:
            PageHandle with the final URL, status and HTML

        Raises:
            WebDigestError: Classified navigation failure, or
                BROWSER_LAUNCH_FAILED if the browser cannot start
        """
        await self.start()
        if self._context is None:
            raise WebDigestError(
                "Browser has no open context",
                ErrorKind.RESOURCE,
                code=ErrorCode.BROWSER_NOT_STARTED,
                details={"url": url},
            )

        timeout = timeout_ms or self.settings.navigation_timeout_ms
        page = await self._context.new_page()
        start_time = time.perf_counter()

        try:
            logger.debug(f"Navigating to: {url}")
            try:
                response = await page.goto(url, wait_until=self.settings.wait_until, timeout=timeout)
            except PlaywrightTimeoutError as e:
                raise WebDigestError(
                    f"Navigation timeout after {timeout}ms",
                    ErrorKind.TRANSIENT_NETWORK,
                    code=ErrorCode.TIMEOUT,
                    details={"url": url},
                ) from e
            except PlaywrightError as e:
                raise self._classify_navigation_error(e, url) from e

            if response is None:
                raise WebDigestError(
                    "No response received",
                    ErrorKind.TRANSIENT_NETWORK,
                    code=ErrorCode.NO_RESPONSE,
                    details={"url": url},
                )

            status_error = classify_http_status(response.status, url)
            if status_error is not None:
                raise status_error

            html = await page.content()
            elapsed = (time.perf_counter() - start_time) * 1000
            logger.debug(f"Navigation complete in {elapsed:.0f}ms")

            return PageHandle(url=url, final_url=page.url, html=html, status_code=response.status)

        finally:
            try:
                await page.close()
            except PlaywrightError as e:
                logger.warning(f"Error closing page: {e}")

    @staticmethod
    def _classify_navigation_error(error: PlaywrightError, url: str) -> WebDigestError:
        message = str(error)
        lowered = message.lower()

        if "timeout" in lowered:
            code, prefix = ErrorCode.TIMEOUT, "Navigation timeout"
        elif any(marker in lowered for marker in NETWORK_ERROR_MARKERS):
            code, prefix = ErrorCode.NAVIGATION_FAILED, "Network error"
        else:
            code, prefix = ErrorCode.NAVIGATION_FAILED, "Navigation failed"

        return WebDigestError(
            f"{prefix}: {message}",
            ErrorKind.TRANSIENT_NETWORK,
            code=code,
            details={"url": url},
        )

    async def extract_text(self, page: PageHandle) -> str:
        """
        Readable text of the page.

        Raises:
            WebDigestError: CONTENT error (NO_CONTENT) when shorter than
                min_content_chars
        """
        text = clean_text(page.html)
        if len(text) < self.settings.min_content_chars:
            raise WebDigestError(
                "No meaningful content found on page",
                ErrorKind.CONTENT,
                code=ErrorCode.NO_CONTENT,
                details={"url": page.final_url, "chars": len(text)},
            )
        return text

    async def extract_metadata(self, page: PageHandle) -> PageMetadata:
        return parse_metadata(page.html, page.final_url)

    async def extract_links(self, page: PageHandle, base_url: str) -> list[str]:
        return parse_links(page.html, base_url, limit=self.settings.max_links)

    async def recycle(self) -> None:
        """
        Replace the browser with a freshly launched one.

        The new browser is launched before the old one is closed, so a
        failed recycle leaves the current session open and usable.

        Raises:
            WebDigestError: RESOURCE error (BROWSER_RECYCLE_FAILED)
        """
        logger.info("Recycling browser")
        try:
            fresh = await self._launch()
        except WebDigestError as e:
            raise WebDigestError(
                f"Failed to recycle browser: {e.message}",
                ErrorKind.RESOURCE,
                code=ErrorCode.BROWSER_RECYCLE_FAILED,
                details=e.details,
            ) from e

        old = (self._context, self._browser, self._playwright)
        self._playwright, self._browser, self._context = fresh
        await self._close_handles(*old)
        Metrics.get().increment(BROWSER_RECYCLES)

    async def dispose(self) -> None:
        """
        Stop browser and cleanup Playwright resources.

        Safe to call multiple times.
        """
        was_running = self._browser is not None
        await self._cleanup()
        if was_running:
            logger.info("Browser stopped")

    async def _cleanup(self) -> None:
        """Internal cleanup of browser resources."""
        context, browser, playwright = self._context, self._browser, self._playwright
        self._context = self._browser = self._playwright = None
        await self._close_handles(context, browser, playwright)

    @staticmethod
    async def _close_handles(
        context: BrowserContext | None,
        browser: Browser | None,
        playwright: Playwright | None,
    ) -> None:
        if context is not None:
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"Error closing browser context: {e}")

        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")

        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping Playwright: {e}")

    async def __aenter__(self) -> "PlaywrightDriver":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.dispose()
