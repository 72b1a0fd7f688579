"""
Shared pytest fixtures for Web Digest tests.

Provides reusable fakes for:
- The language model client (scripted replies, recorded prompts)
- The browser driver (in-memory pages, recorded navigations)
- Sleeping (recorded delays, no real waiting)
"""

import tempfile
from pathlib import Path
from typing import Any, Callable, Generator

import pytest

from web_digest.browser.protocol import PageHandle
from web_digest.config import Settings, reset_settings
from web_digest.core.exceptions import ErrorCode, ErrorKind, WebDigestError
from web_digest.core.models import PageMetadata, SummaryOptions
from web_digest.core.rate_limiter import RateLimiter
from web_digest.core.retry import RetryPolicy
from web_digest.summarization.summarizer import Summarizer
from web_digest.utils.logging import reset_logging
from web_digest.utils.metrics import Metrics


@pytest.fixture(autouse=True)
def reset_global_state():
    """Reset metrics, logging and cached settings around every test."""
    Metrics.reset()
    reset_settings()
    reset_logging()
    yield
    Metrics.reset()
    reset_settings()
    reset_logging()


class SleepRecorder:
    """Awaitable stand-in for asyncio.sleep that records delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class ScriptedClient:
    """
    Fake LanguageModelClient.

    Replies are taken from `script` in order (a string is returned, an
    exception is raised). When the script is exhausted, `default` builds
    the reply from the prompt.
    """

    def __init__(
        self,
        script: list[str | BaseException] | None = None,
        default: Callable[[str], str] | None = None,
    ) -> None:
        self.script = list(script or [])
        self.default = default or (lambda prompt: f"summary of {len(prompt)} chars")
        self.prompts: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.script:
            reply = self.script.pop(0)
            if isinstance(reply, BaseException):
                raise reply
            return reply
        return self.default(prompt)


def page_text(words: int = 40, topic: str = "content") -> str:
    """Readable filler text long enough to pass the content check."""
    return " ".join(f"{topic}{i % 7}" for i in range(words)) + "."


class FakeDriver:
    """
    In-memory BrowserDriver.

    `pages` maps a URL to its text. A URL mapped to an exception raises it
    on navigation; a URL mapped to a list consumes one outcome per
    navigation. Unknown URLs raise a permanent HTTP 404 error.
    """

    def __init__(
        self,
        pages: dict[str, Any] | None = None,
        links: dict[str, list[str]] | None = None,
        recycle_error: BaseException | None = None,
    ) -> None:
        self.pages = dict(pages or {})
        self.links = dict(links or {})
        self.recycle_error = recycle_error
        self.navigations: list[str] = []
        self.recycles = 0
        self.disposed = False

    async def navigate(self, url: str, timeout_ms: int | None = None) -> PageHandle:
        self.navigations.append(url)
        outcome = self.pages.get(url)

        if isinstance(outcome, list):
            outcome = outcome.pop(0) if len(outcome) > 1 else outcome[0]
        if outcome is None:
            raise WebDigestError(
                "HTTP error 404",
                ErrorKind.PERMANENT_REQUEST,
                code=ErrorCode.HTTP_ERROR,
                details={"url": url, "status_code": 404},
            )
        if isinstance(outcome, BaseException):
            raise outcome
        return PageHandle(url=url, final_url=url, html=outcome, status_code=200)

    async def extract_text(self, page: PageHandle) -> str:
        return page.html

    async def extract_metadata(self, page: PageHandle) -> PageMetadata:
        return PageMetadata(title=f"Title of {page.url}", description="", url=page.url)

    async def extract_links(self, page: PageHandle, base_url: str) -> list[str]:
        return list(self.links.get(page.url, []))

    async def recycle(self) -> None:
        if self.recycle_error is not None:
            raise self.recycle_error
        self.recycles += 1

    async def dispose(self) -> None:
        self.disposed = True


def transient_error(message: str = "Server error 503") -> WebDigestError:
    return WebDigestError(message, ErrorKind.TRANSIENT_NETWORK, code=ErrorCode.SERVER_ERROR)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def retry_factory(sleep_recorder: SleepRecorder) -> Callable[[SummaryOptions], RetryPolicy]:
    """Retry policies built from options that record instead of sleeping."""
    return lambda options: RetryPolicy.from_options(options, sleep=sleep_recorder)


@pytest.fixture
def make_summarizer(retry_factory) -> Callable[..., Summarizer]:
    """Build a Summarizer around a client with a roomy limiter and no real sleeps."""

    def factory(client: ScriptedClient, max_chunk_chars: int | None = None) -> Summarizer:
        from web_digest.chunking.chunker import ContentChunker

        chunker = ContentChunker(max_chunk_chars) if max_chunk_chars else None
        return Summarizer(
            client,
            RateLimiter(max_requests=1000, window_seconds=1.0),
            chunker=chunker,
            retry_factory=retry_factory,
        )

    return factory


@pytest.fixture
def fast_settings() -> Settings:
    """Settings with pacing delays kept small."""
    return Settings(batch={"delay_seconds": 0.5, "link_delay_seconds": 0.25, "recycle_every": 10})


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that's cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_html() -> str:
    """Provide sample HTML for extraction tests."""
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="description" content="Test page description">
        <title>Test Page Title</title>
    </head>
    <body>
        <header>
            <nav>
                <a href="/home">Home</a>
                <a href="/products">Products</a>
                <a href="https://other.example.org/about">Elsewhere</a>
            </nav>
        </header>
        <div class="cookie">We use cookies to improve your experience.</div>
        <main>
            <article>
                <h1>Welcome to Our Website</h1>
                <p>This is the main content of our test page. It contains
                important information about our products and services.</p>
                <p>We offer a wide range of products including software,
                hardware, and consulting services.</p>
                <p>Read the <a href="/products#top">product list</a> or the
                <a href="https://example.com/blog/">blog</a>.</p>
            </article>
        </main>
        <footer>
            <p>&copy; 2024 Test Company</p>
            <a href="mailto:contact@example.com">Mail us</a>
        </footer>
        <script>var tracking = "ignore me";</script>
    </body>
    </html>
    """
