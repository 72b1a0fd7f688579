"""
In-process counters and latency timings for a summarization run.

Nothing is exported to an external backend; `Metrics.get().summary()` is
logged by the CLI at DEBUG level and tests read counters directly.
"""

import threading
import time
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass
from typing import ClassVar, Iterator

# Counter names
LLM_CALLS = "llm_calls"
RETRIES = "retries"
URLS_PROCESSED = "urls_processed"
URLS_FAILED = "urls_failed"
BROWSER_RECYCLES = "browser_recycles"
CHUNKS_SUMMARIZED = "chunks_summarized"

# Timing names
LLM_LATENCY = "llm_latency_ms"


@dataclass
class TimingStats:
    """Running count, total and bounds of a latency series (milliseconds)."""

    count: int = 0
    total_ms: float = 0.0
    min_ms: float | None = None
    max_ms: float = 0.0

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0

    def record(self, duration_ms: float) -> None:
        self.count += 1
        self.total_ms += duration_ms
        self.min_ms = duration_ms if self.min_ms is None else min(self.min_ms, duration_ms)
        self.max_ms = max(self.max_ms, duration_ms)

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "total_ms": round(self.total_ms, 2),
            "avg_ms": round(self.avg_ms, 2),
            "min_ms": round(self.min_ms or 0.0, 2),
            "max_ms": round(self.max_ms, 2),
        }


class Metrics:
    """
    Process-wide metrics registry.

    Example:
        >>> Metrics.get().increment(URLS_PROCESSED)
        >>> with Metrics.get().timer(LLM_LATENCY):
        ...     text = await client.generate(prompt)
        >>> Metrics.get().get_counter(URLS_PROCESSED)
        1
    """

    _instance: ClassVar["Metrics | None"] = None

    def __init__(self) -> None:
        self._counters: Counter[str] = Counter()
        self._timings: dict[str, TimingStats] = {}
        self._lock = threading.Lock()

    @classmethod
    def get(cls) -> "Metrics":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop all recorded values."""
        if cls._instance is not None:
            with cls._instance._lock:
                cls._instance._counters.clear()
                cls._instance._timings.clear()

    def increment(self, name: str, value: int = 1) -> int:
        """Add `value` to counter `name` and return the new total."""
        with self._lock:
            self._counters[name] += value
            return self._counters[name]

    def get_counter(self, name: str) -> int:
        with self._lock:
            return self._counters[name]

    def observe(self, name: str, duration_ms: float) -> None:
        with self._lock:
            self._timings.setdefault(name, TimingStats()).record(duration_ms)

    def get_timing(self, name: str) -> TimingStats | None:
        """Copy of the series recorded under `name`, or None."""
        with self._lock:
            stats = self._timings.get(name)
            if stats is None:
                return None
            return TimingStats(stats.count, stats.total_ms, stats.min_ms, stats.max_ms)

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        """Record the wall time of the enclosed block under `name`."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.observe(name, (time.perf_counter() - start) * 1000)

    @property
    def success_rate(self) -> float | None:
        """Share of processed URLs that succeeded, None before any URL."""
        with self._lock:
            done = self._counters[URLS_PROCESSED] + self._counters[URLS_FAILED]
            return self._counters[URLS_PROCESSED] / done if done else None

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "counters": {k: v for k, v in self._counters.items() if v},
                "timings": {k: v.to_dict() for k, v in self._timings.items()},
            }

    def summary(self) -> str:
        """Multi-line report of counters, success rate and timings."""
        snap = self.snapshot()
        lines = ["Run metrics:"]

        for name, value in sorted(snap["counters"].items()):
            lines.append(f"  {name:<20} {value:>8,}")

        rate = self.success_rate
        if rate is not None:
            lines.append(f"  {'success_rate':<20} {rate:>8.0%}")

        for name, stats in sorted(snap["timings"].items()):
            lines.append(
                f"  {name:<20} n={stats['count']} avg={stats['avg_ms']:.1f}ms "
                f"max={stats['max_ms']:.1f}ms"
            )

        return "\n".join(lines)


def increment_retries(count: int = 1) -> None:
    Metrics.get().increment(RETRIES, count)


def record_url_outcome(succeeded: bool) -> None:
    """Count one finished URL as processed or failed."""
    Metrics.get().increment(URLS_PROCESSED if succeeded else URLS_FAILED)


@contextmanager
def time_llm_call() -> Iterator[None]:
    """Count a model call and record its latency."""
    Metrics.get().increment(LLM_CALLS)
    with Metrics.get().timer(LLM_LATENCY):
        yield
