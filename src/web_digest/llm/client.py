"""
Language model client.

Defines the LanguageModelClient capability used by the summarizer and an
implementation backed by the Anthropic Messages API over httpx.
"""

import os
from typing import Protocol, runtime_checkable

import httpx

from web_digest.config.settings import LLMSettings
from web_digest.core.exceptions import ErrorCode, ErrorKind, WebDigestError
from web_digest.utils.logging import get_logger
from web_digest.utils.metrics import time_llm_call

logger = get_logger(__name__)


@runtime_checkable
class LanguageModelClient(Protocol):
    """Sends a prompt and returns the generated text."""

    async def generate(self, prompt: str) -> str:
        """
        Generate text for `prompt`.

        Raises:
            WebDigestError: MODEL error on transport, quota or API failure
        """
        ...


def _model_error(
    message: str,
    code: str,
    retryable: bool,
    retry_after: float | None = None,
    **details,
) -> WebDigestError:
    return WebDigestError(
        message,
        ErrorKind.MODEL,
        code=code,
        details=details,
        retryable=retryable,
        retry_after=retry_after,
    )


def _parse_retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class AnthropicClient:
    """
    LanguageModelClient for the Anthropic Messages API.

    The API key is read from the environment variable named in settings.
    An httpx.AsyncClient can be injected (tests pass one built on
    httpx.MockTransport); otherwise one is created and owned here.

    Example:
        >>> async with AnthropicClient(settings.llm) as client:
        ...     text = await client.generate("Summarize: ...")
    """

    MESSAGES_PATH = "/v1/messages"

    def __init__(
        self,
        settings: LLMSettings,
        api_key: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            settings: Model endpoint configuration
            api_key: Explicit API key (defaults to the configured env var)
            http_client: Optional preconfigured httpx client

        Raises:
            WebDigestError: CONFIGURATION error if no API key is available
        """
        self.settings = settings
        self.api_key = api_key or os.environ.get(settings.api_key_env_var)
        if not self.api_key:
            raise WebDigestError(
                f"API key not found. Set the {settings.api_key_env_var} environment variable.",
                ErrorKind.CONFIGURATION,
                code=ErrorCode.MODEL_AUTH_FAILED,
                details={"env_var": settings.api_key_env_var},
            )

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": self.settings.api_version,
            "content-type": "application/json",
        }

    def _payload(self, prompt: str) -> dict:
        return {
            "model": self.settings.model_name,
            "max_tokens": self.settings.max_tokens,
            "temperature": self.settings.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }

    async def generate(self, prompt: str) -> str:
        """
        Send `prompt` as a single user message and return the text reply.

        Raises:
            WebDigestError: MODEL error; rate limits, 5xx and transport
                failures are retryable, auth and request rejections are not
        """
        try:
            with time_llm_call():
                response = await self._client.post(
                    self.MESSAGES_PATH,
                    headers=self._headers(),
                    json=self._payload(prompt),
                )
        except httpx.TimeoutException as e:
            raise _model_error(
                f"Model request timed out: {e}",
                ErrorCode.MODEL_UNAVAILABLE,
                retryable=True,
            ) from e
        except httpx.HTTPError as e:
            raise _model_error(
                f"Model request failed: {e}",
                ErrorCode.MODEL_UNAVAILABLE,
                retryable=True,
            ) from e

        self._raise_for_status(response)

        try:
            data = response.json()
        except ValueError as e:
            raise _model_error(
                "Model returned a non-JSON response",
                ErrorCode.MODEL_UNAVAILABLE,
                retryable=True,
            ) from e

        text = "".join(
            block.get("text", "")
            for block in data.get("content", [])
            if block.get("type") == "text"
        )
        logger.debug(
            f"Model reply: {len(text)} chars, stop_reason={data.get('stop_reason')}"
        )
        return text

    def _raise_for_status(self, response: httpx.Response) -> None:
        status = response.status_code
        if status < 400:
            return

        message = self._error_message(response)

        if status == 429:
            raise _model_error(
                f"Model rate limit exceeded: {message}",
                ErrorCode.MODEL_RATE_LIMITED,
                retryable=True,
                retry_after=_parse_retry_after(response),
                status_code=status,
            )
        if status in (401, 403):
            raise _model_error(
                f"Model authentication failed: {message}",
                ErrorCode.MODEL_AUTH_FAILED,
                retryable=False,
                status_code=status,
            )
        if status >= 500:
            raise _model_error(
                f"Model service unavailable: {message}",
                ErrorCode.MODEL_UNAVAILABLE,
                retryable=True,
                status_code=status,
            )
        raise _model_error(
            f"Model rejected the request: {message}",
            ErrorCode.MODEL_REQUEST_REJECTED,
            retryable=False,
            status_code=status,
        )

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200] or f"HTTP {response.status_code}"
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return f"HTTP {response.status_code}"

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "AnthropicClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def create_client(settings: LLMSettings) -> LanguageModelClient:
    """Create the configured model client."""
    if settings.provider == "anthropic":
        return AnthropicClient(settings)
    raise WebDigestError(
        f"Unsupported model provider: {settings.provider}",
        ErrorKind.CONFIGURATION,
        code=ErrorCode.INVALID_CONFIG,
    )
