"""
Retry with backoff for network-dependent operations.

One policy object wraps navigation, extraction and model calls alike:
bounded attempts, exponential or linear delays, and a retryable/fatal
classification taken from the error itself.
"""

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, TypeVar

from web_digest.core.exceptions import (
    ErrorCode,
    ErrorKind,
    WebDigestError,
    get_retry_delay,
    is_retryable,
)
from web_digest.utils.logging import get_logger
from web_digest.utils.metrics import increment_retries

if TYPE_CHECKING:
    from web_digest.config.settings import RetrySettings
    from web_digest.core.models import SummaryOptions

logger = get_logger(__name__)

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]
RetryCallback = Callable[[int, BaseException, float], None]
SleepFunc = Callable[[float], Awaitable[None]]


class BackoffStrategy(str, Enum):
    """How the delay grows between attempts."""

    EXPONENTIAL = "exponential"  # base * 2^i
    LINEAR = "linear"  # base * (i + 1)


class RetryPolicy:
    """
    Executes an async operation with bounded retries.

    `max_retries` is the attempt budget: 0 means a single attempt and no
    retry, k >= 1 means at most k attempts. Errors whose `retryable` flag is
    False propagate immediately. When the budget is spent, a non-retryable
    WebDigestError naming the operation and the last cause is raised.

    Example:
        >>> policy = RetryPolicy(max_retries=3, base_delay=1.0)
        >>> text = await policy.execute(lambda: client.generate(prompt), label="Summarization")
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        backoff: BackoffStrategy = BackoffStrategy.EXPONENTIAL,
        max_delay: float | None = None,
        attempt_timeout: float | None = None,
        on_retry: RetryCallback | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """
        Initialize retry policy.

        Args:
            max_retries: Attempt budget (>= 0)
            base_delay: Base delay in seconds
            backoff: Delay growth strategy
            max_delay: Upper bound for computed delays (None = unbounded)
            attempt_timeout: Per-attempt timeout in seconds (None = no timeout)
            on_retry: Called with (attempt_number, error, delay) before each retry
            sleep: Awaitable sleep function (injectable for tests)
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if base_delay < 0:
            raise ValueError("base_delay must be >= 0")

        self.max_retries = max_retries
        self.base_delay = base_delay
        self.backoff = BackoffStrategy(backoff)
        self.max_delay = max_delay
        self.attempt_timeout = attempt_timeout
        self.on_retry = on_retry
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: "RetrySettings", **overrides) -> "RetryPolicy":
        """Build a policy from the retry section of the configuration."""
        params = {
            "max_retries": settings.max_retries,
            "base_delay": settings.base_delay_seconds,
            "backoff": settings.backoff,
            "max_delay": settings.max_delay_seconds,
            "attempt_timeout": settings.attempt_timeout_seconds,
        }
        params.update(overrides)
        return cls(**params)

    @classmethod
    def from_options(cls, options: "SummaryOptions", **overrides) -> "RetryPolicy":
        """Build a policy from the per-run summary options."""
        params = {
            "max_retries": options.max_retries,
            "base_delay": options.retry_delay,
        }
        params.update(overrides)
        return cls(**params)

    @property
    def attempts(self) -> int:
        """Maximum number of times the operation is called."""
        return max(1, self.max_retries)

    def compute_delay(self, attempt_index: int) -> float:
        """
        Delay after the failed attempt `attempt_index` (0-indexed).

        Exponential: base * 2^i. Linear: base * (i + 1).
        """
        if self.backoff == BackoffStrategy.LINEAR:
            delay = self.base_delay * (attempt_index + 1)
        else:
            delay = self.base_delay * (2**attempt_index)

        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay

    async def execute(self, operation: Operation[T], label: str = "operation") -> T:
        """
        Run `operation` until it succeeds, fails fatally, or the budget is spent.

        Args:
            operation: Zero-argument callable returning an awaitable
            label: Operation name used in logs and the exhaustion error

        Returns:
            The operation's result

        Raises:
            WebDigestError: Retry budget exhausted (non-retryable)
            Exception: Any fatal error raised by the operation, unchanged
        """
        value, _ = await self.execute_with_attempts(operation, label)
        return value

    async def execute_with_attempts(
        self,
        operation: Operation[T],
        label: str = "operation",
    ) -> tuple[T, int]:
        """Like execute(), also returning the number of attempts used."""
        last_error: Exception | None = None

        for attempt in range(self.attempts):
            try:
                value = await self._run_attempt(operation, label)
                return value, attempt + 1
            except Exception as e:
                if not is_retryable(e):
                    raise

                last_error = e
                if attempt + 1 >= self.attempts:
                    break

                delay = self.compute_delay(attempt)
                hint = get_retry_delay(e, default=0.0)
                if hint > delay:
                    delay = hint

                logger.warning(
                    f"{label} failed (attempt {attempt + 1}/{self.attempts}): {e}. "
                    f"Retrying in {delay:.2f}s"
                )
                increment_retries()
                if self.on_retry is not None:
                    self.on_retry(attempt + 1, e, delay)

                await self._sleep(delay)

        raise self._exhausted(label, last_error)

    async def _run_attempt(self, operation: Operation[T], label: str) -> T:
        if self.attempt_timeout is None:
            return await operation()

        try:
            return await asyncio.wait_for(operation(), timeout=self.attempt_timeout)
        except asyncio.TimeoutError as e:
            raise WebDigestError(
                f"{label} timed out after {self.attempt_timeout:.1f}s",
                ErrorKind.TRANSIENT_NETWORK,
                code=ErrorCode.TIMEOUT,
                details={"operation": label, "timeout": self.attempt_timeout},
            ) from e

    def _exhausted(self, label: str, cause: Exception | None) -> WebDigestError:
        attempts = self.attempts
        if isinstance(cause, WebDigestError):
            kind = cause.kind
            code = cause.code
        else:
            kind = ErrorKind.TRANSIENT_NETWORK
            code = ErrorCode.RETRIES_EXHAUSTED

        noun = "attempt" if attempts == 1 else "attempts"
        message = f"{label} failed after {attempts} {noun}: {cause}"
        logger.error(message)

        error = WebDigestError(
            message,
            kind,
            code=code,
            details={"operation": label, "attempts": attempts, "cause": str(cause)},
            retryable=False,
        )
        error.__cause__ = cause
        return error


class RetryCounter:
    """
    Tally of retries across every policy it is attached to.

    Example:
        >>> counter = RetryCounter()
        >>> policy = counter.attach(RetryPolicy.from_options(options))
        >>> await policy.execute(operation)
        >>> counter.count
        1
    """

    def __init__(self) -> None:
        self.count = 0

    def attach(self, policy: RetryPolicy) -> RetryPolicy:
        """Count the policy's retries here, keeping any existing on_retry hook."""
        previous = policy.on_retry

        def on_retry(attempt: int, error: BaseException, delay: float) -> None:
            self.count += 1
            if previous is not None:
                previous(attempt, error, delay)

        policy.on_retry = on_retry
        return policy
