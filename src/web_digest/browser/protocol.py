"""
Browser capability consumed by the pipeline.

The pipeline never talks to Playwright directly: it goes through
BrowserDriver so tests and alternative engines can stand in for it.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from web_digest.core.models import PageMetadata


@dataclass
class PageHandle:
    """
    A page after successful navigation.

    Holds the rendered HTML captured right after the load state was reached,
    so extraction does not depend on the live page staying open.
    """

    url: str
    final_url: str  # After redirects
    html: str
    status_code: int | None = None


@runtime_checkable
class BrowserDriver(Protocol):
    """Navigation and content extraction over a long-lived browser session."""

    async def navigate(self, url: str, timeout_ms: int | None = None) -> PageHandle:
        """
        Load `url` and wait for the configured load state.

        Raises:
            WebDigestError: TRANSIENT_NETWORK (TIMEOUT, RATE_LIMITED,
                SERVER_ERROR, NAVIGATION_FAILED, NO_RESPONSE) or
                PERMANENT_REQUEST (HTTP_ERROR)
        """
        ...

    async def extract_text(self, page: PageHandle) -> str:
        """
        Main readable text of the page.

        Raises:
            WebDigestError: CONTENT error (NO_CONTENT) for near-empty pages
        """
        ...

    async def extract_metadata(self, page: PageHandle) -> PageMetadata:
        ...

    async def extract_links(self, page: PageHandle, base_url: str) -> list[str]:
        """Same-host links, deduplicated and capped."""
        ...

    async def recycle(self) -> None:
        """Replace the browser session with a fresh one."""
        ...

    async def dispose(self) -> None:
        ...
