"""
Rate limiting for the model endpoint.

Admits at most N operations per sliding time window. Callers that exceed
the window capacity wait in FIFO order until capacity frees up.
"""

import asyncio
import time
from collections import deque
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from web_digest.core.exceptions import ErrorCode, ErrorKind, WebDigestError
from web_digest.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class RateLimitStats:
    """
    Counters describing limiter activity.

    Attributes:
        admitted: Operations that have been allowed to start
        waited: Admissions that had to wait for window capacity
        total_wait_seconds: Cumulative time spent waiting
    """

    admitted: int = 0
    waited: int = 0
    total_wait_seconds: float = 0.0


class RateLimiter:
    """
    Sliding-window limiter: at most `max_requests` starts per `window_seconds`.

    Admission is serialized by an asyncio.Lock, whose waiters are woken in
    arrival order, so queued requests are released FIFO and never dropped.
    A failing operation only affects its own caller.

    Example:
        >>> limiter = RateLimiter(max_requests=2, window_seconds=1.0)
        >>> text = await limiter.execute(lambda: client.generate(prompt))
    """

    def __init__(
        self,
        max_requests: int = 2,
        window_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize rate limiter.

        Args:
            max_requests: Operations allowed to start per window
            window_seconds: Window length in seconds
            clock: Monotonic clock (injectable for tests)
            sleep: Awaitable sleep function (injectable for tests)

        Raises:
            WebDigestError: CONFIGURATION error for non-positive limits
        """
        if max_requests < 1 or window_seconds <= 0:
            raise WebDigestError(
                "Rate limiter requires max_requests >= 1 and window_seconds > 0",
                ErrorKind.CONFIGURATION,
                code=ErrorCode.INVALID_CONFIG,
                details={"max_requests": max_requests, "window_seconds": window_seconds},
            )

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._sleep = sleep
        self._starts: deque[float] = deque()
        self._lock = asyncio.Lock()
        self._stats = RateLimitStats()

    def _prune(self, now: float) -> None:
        """Drop start timestamps that have left the window."""
        while self._starts and now - self._starts[0] >= self.window_seconds:
            self._starts.popleft()

    async def acquire(self) -> float:
        """
        Wait until the window has capacity and record a start.

        Returns:
            Time waited in seconds
        """
        async with self._lock:
            waited = 0.0
            now = self._clock()
            self._prune(now)

            while len(self._starts) >= self.max_requests:
                wait_time = self._starts[0] + self.window_seconds - now
                if wait_time > 0:
                    logger.debug(f"Rate window full, waiting {wait_time:.2f}s")
                    await self._sleep(wait_time)
                    waited += wait_time
                now = self._clock()
                self._prune(now)

            self._starts.append(now)
            self._stats.admitted += 1
            if waited > 0:
                self._stats.waited += 1
                self._stats.total_wait_seconds += waited

            return waited

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run `operation` once window capacity allows.

        Args:
            operation: Zero-argument callable returning an awaitable

        Returns:
            The operation's result (its exceptions propagate to the caller)
        """
        await self.acquire()
        return await operation()

    @property
    def in_window(self) -> int:
        """Number of starts inside the current window."""
        self._prune(self._clock())
        return len(self._starts)

    def get_stats(self) -> dict:
        """Get limiter configuration and activity counters."""
        return {
            "max_requests": self.max_requests,
            "window_seconds": self.window_seconds,
            "in_window": self.in_window,
            "admitted": self._stats.admitted,
            "waited": self._stats.waited,
            "total_wait_seconds": round(self._stats.total_wait_seconds, 3),
        }

    def reset(self) -> None:
        """Clear window state and counters."""
        self._starts.clear()
        self._stats = RateLimitStats()
