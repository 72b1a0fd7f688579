"""URL checks applied before any network call."""

from urllib.parse import urlparse

from web_digest.core.exceptions import ErrorCode, validation_error

ALLOWED_SCHEMES = ("http", "https")


def is_valid_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme.lower() in ALLOWED_SCHEMES and bool(parsed.hostname)


def validate_url(url: str) -> str:
    """
    Return the stripped URL, or raise if it is not an http(s) URL.

    Raises:
        WebDigestError: VALIDATION error (INVALID_URL)
    """
    if not is_valid_url(url):
        raise validation_error(
            f"Invalid URL: {url!r} (expected http:// or https://)",
            code=ErrorCode.INVALID_URL,
            url=url,
        )
    return url.strip()
