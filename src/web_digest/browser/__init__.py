"""
Browser module for Web Digest.

Provides the BrowserDriver capability, its Playwright implementation,
and the HTML helpers used for extraction.
"""

from web_digest.browser.driver import PlaywrightDriver
from web_digest.browser.html import (
    clean_text,
    normalize_link,
    parse_links,
    parse_metadata,
    remove_duplicate_lines,
)
from web_digest.browser.protocol import BrowserDriver, PageHandle

__all__ = [
    "BrowserDriver",
    "PageHandle",
    "PlaywrightDriver",
    "clean_text",
    "normalize_link",
    "parse_links",
    "parse_metadata",
    "remove_duplicate_lines",
]
