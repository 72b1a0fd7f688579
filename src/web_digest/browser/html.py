"""
HTML helpers built on BeautifulSoup.

Pure functions over rendered HTML: readable-text extraction with page
chrome stripped, metadata, and same-host link discovery.
"""

import re
from urllib.parse import urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup, Tag

from web_digest.core.models import PageMetadata

# Page chrome and non-content elements removed before text extraction
NOISE_SELECTORS = (
    "script",
    "style",
    "noscript",
    "iframe",
    "svg",
    "nav",
    "header",
    "footer",
    "aside",
    "form",
    "[role=navigation]",
    "[role=banner]",
    "[aria-hidden=true]",
    ".cookie",
    ".cookies",
    ".consent",
    ".ads",
    ".advertisement",
    ".popup",
    ".modal",
)

# Containers likely to hold the main content, in preference order
CONTENT_SELECTORS = (
    "article",
    "main",
    "[role=main]",
    ".content",
    ".post",
    ".entry-content",
)

BLOCK_TAGS = (
    "p",
    "div",
    "section",
    "article",
    "main",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "li",
    "blockquote",
    "pre",
    "table",
    "tr",
    "figcaption",
    "br",
)

SKIPPED_LINK_PREFIXES = ("#", "javascript:", "mailto:", "tel:", "data:")

_INLINE_SPACE = re.compile(r"[ \t\r\f\v\u00a0]+")
_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _pick_content_root(soup: BeautifulSoup) -> Tag:
    """Largest candidate content container, else the body."""
    best: Tag | None = None
    best_len = 0
    for selector in CONTENT_SELECTORS:
        for candidate in soup.select(selector):
            length = len(candidate.get_text(strip=True))
            if length > best_len:
                best, best_len = candidate, length

    if best is not None:
        return best
    return soup.body or soup


def remove_duplicate_lines(text: str) -> str:
    """
    Drop repeated non-empty lines, keeping the first occurrence.

    Blank lines are kept so paragraph breaks survive; runs of them are
    collapsed to a single empty line.
    """
    seen: set[str] = set()
    lines: list[str] = []
    for line in text.split("\n"):
        key = line.strip()
        if key:
            if key in seen:
                continue
            seen.add(key)
        lines.append(line)
    return _EXTRA_BLANK_LINES.sub("\n\n", "\n".join(lines)).strip()


def clean_text(html: str) -> str:
    """
    Extract the readable text of a page.

    Paragraph-level elements are separated by blank lines so the chunker
    can split on paragraph boundaries.
    """
    soup = _soup(html)

    for selector in NOISE_SELECTORS:
        for tag in soup.select(selector):
            tag.decompose()

    root = _pick_content_root(soup)

    for tag in root.find_all(BLOCK_TAGS):
        tag.insert_before("\n\n")
        tag.append("\n\n")

    text = root.get_text()
    text = _INLINE_SPACE.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    return remove_duplicate_lines(text)


def _meta_content(soup: BeautifulSoup, *selectors: str) -> str:
    for selector in selectors:
        tag = soup.select_one(selector)
        if tag is not None:
            content = tag.get("content")
            if isinstance(content, str) and content.strip():
                return content.strip()
    return ""


def parse_metadata(html: str, url: str) -> PageMetadata:
    """Title and description from <title> and the description meta tags."""
    soup = _soup(html)

    title = ""
    if soup.title and soup.title.string:
        title = soup.title.string.strip()
    if not title:
        title = _meta_content(soup, 'meta[property="og:title"]', 'meta[name="twitter:title"]')

    description = _meta_content(
        soup,
        'meta[name="description"]',
        'meta[property="og:description"]',
        'meta[name="twitter:description"]',
    )

    return PageMetadata(title=title, description=description, url=url)


def normalize_link(url: str) -> str:
    """URL without its fragment or a trailing slash on the path."""
    parsed = urlparse(url)
    path = parsed.path
    if path != "/" and path.endswith("/"):
        path = path.rstrip("/")
    return urlunparse((parsed.scheme, parsed.netloc, path or "/", parsed.params, parsed.query, ""))


def parse_links(html: str, base_url: str, limit: int = 20) -> list[str]:
    """
    Same-host links of a page.

    Relative links are resolved against `base_url`, fragments are dropped,
    the page itself is excluded, and the first `limit` distinct links are
    returned in document order.
    """
    base_host = urlparse(base_url).hostname
    if not base_host or limit <= 0:
        return []

    own = normalize_link(base_url)
    seen: set[str] = {own}
    links: list[str] = []

    for anchor in _soup(html).find_all("a", href=True):
        href = anchor["href"].strip()
        if not href or href.lower().startswith(SKIPPED_LINK_PREFIXES):
            continue

        absolute = urljoin(base_url, href)
        parsed = urlparse(absolute)
        if parsed.scheme not in ("http", "https") or parsed.hostname != base_host:
            continue

        normalized = normalize_link(absolute)
        if normalized in seen:
            continue
        seen.add(normalized)
        links.append(normalized)

        if len(links) >= limit:
            break

    return links
