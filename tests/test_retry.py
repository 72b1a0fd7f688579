"""
Tests for the retry policy.

Tests attempt counts, delay sequences, fatal errors and exhaustion.
"""

import asyncio

import pytest

from web_digest.config import RetrySettings
from web_digest.core.exceptions import ErrorCode, ErrorKind, WebDigestError
from web_digest.core.models import SummaryOptions
from web_digest.core.retry import BackoffStrategy, RetryCounter, RetryPolicy
from web_digest.utils.metrics import Metrics

from tests.conftest import SleepRecorder, transient_error


class FlakyOperation:
    """Fails `failures` times, then returns "ok"."""

    def __init__(self, failures: int, error: Exception | None = None) -> None:
        self.failures = failures
        self.error = error or transient_error()
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


class TestRetryPolicy:
    """Tests for RetryPolicy.execute."""

    @pytest.fixture
    def sleeper(self) -> SleepRecorder:
        return SleepRecorder()

    @pytest.mark.asyncio
    async def test_success_first_try(self, sleeper):
        """A successful operation should run once without sleeping."""
        op = FlakyOperation(failures=0)
        policy = RetryPolicy(max_retries=3, sleep=sleeper)

        assert await policy.execute(op) == "ok"
        assert op.calls == 1
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_zero_retries_means_one_attempt(self, sleeper):
        """max_retries=0 should call the operation exactly once."""
        op = FlakyOperation(failures=5)
        policy = RetryPolicy(max_retries=0, sleep=sleeper)

        with pytest.raises(WebDigestError):
            await policy.execute(op)

        assert op.calls == 1
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_attempt_budget(self, sleeper):
        """max_retries=k should call a persistently failing operation k times."""
        op = FlakyOperation(failures=10)
        policy = RetryPolicy(max_retries=3, base_delay=1.0, sleep=sleeper)

        with pytest.raises(WebDigestError):
            await policy.execute(op)

        assert op.calls == 3
        assert len(sleeper.delays) == 2

    @pytest.mark.asyncio
    async def test_recovers_after_failures(self, sleeper):
        """An operation that eventually succeeds should return its value."""
        op = FlakyOperation(failures=2)
        policy = RetryPolicy(max_retries=3, base_delay=0.5, sleep=sleeper)

        value, attempts = await policy.execute_with_attempts(op)

        assert value == "ok"
        assert attempts == 3
        assert sleeper.delays == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_exponential_delays(self, sleeper):
        """Exponential backoff should double the delay after each failure."""
        policy = RetryPolicy(max_retries=4, base_delay=1.0, sleep=sleeper)

        with pytest.raises(WebDigestError):
            await policy.execute(FlakyOperation(failures=10))

        assert sleeper.delays == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_linear_delays(self, sleeper):
        """Linear backoff should grow the delay by the base each time."""
        policy = RetryPolicy(
            max_retries=4, base_delay=1.0, backoff=BackoffStrategy.LINEAR, sleep=sleeper
        )

        with pytest.raises(WebDigestError):
            await policy.execute(FlakyOperation(failures=10))

        assert sleeper.delays == [1.0, 2.0, 3.0]

    @pytest.mark.asyncio
    async def test_max_delay_caps(self, sleeper):
        """Delays should not exceed max_delay."""
        policy = RetryPolicy(max_retries=4, base_delay=2.0, max_delay=3.0, sleep=sleeper)

        with pytest.raises(WebDigestError):
            await policy.execute(FlakyOperation(failures=10))

        assert sleeper.delays == [2.0, 3.0, 3.0]

    @pytest.mark.asyncio
    async def test_retry_after_hint_extends_delay(self, sleeper):
        """A larger retry_after hint on the error should be honored."""
        error = WebDigestError(
            "Rate limited", ErrorKind.TRANSIENT_NETWORK, code=ErrorCode.RATE_LIMITED, retry_after=5.0
        )
        policy = RetryPolicy(max_retries=2, base_delay=1.0, sleep=sleeper)

        assert await policy.execute(FlakyOperation(failures=1, error=error)) == "ok"
        assert sleeper.delays == [5.0]

    @pytest.mark.asyncio
    async def test_fatal_error_propagates_immediately(self, sleeper):
        """A non-retryable error should be raised unchanged after one call."""
        error = WebDigestError("Not found", ErrorKind.PERMANENT_REQUEST, code=ErrorCode.HTTP_ERROR)
        op = FlakyOperation(failures=10, error=error)
        policy = RetryPolicy(max_retries=5, sleep=sleeper)

        with pytest.raises(WebDigestError) as exc_info:
            await policy.execute(op)

        assert exc_info.value is error
        assert op.calls == 1
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_exhaustion_error(self, sleeper):
        """Exhaustion should name the label, keep the cause's code and be fatal."""
        cause = transient_error("Server error 502")
        policy = RetryPolicy(max_retries=2, sleep=sleeper)

        with pytest.raises(WebDigestError) as exc_info:
            await policy.execute(FlakyOperation(failures=10, error=cause), label="Fetching page")

        error = exc_info.value
        assert "Fetching page failed after 2 attempts" in error.message
        assert "Server error 502" in error.message
        assert error.code == ErrorCode.SERVER_ERROR
        assert error.kind == ErrorKind.TRANSIENT_NETWORK
        assert error.retryable is False
        assert error.details["attempts"] == 2
        assert error.details["cause"] == str(cause)
        assert error.__cause__ is cause

    @pytest.mark.asyncio
    async def test_generic_exception_exhaustion(self, sleeper):
        """Plain exceptions should be retried and reported as RETRIES_EXHAUSTED."""
        op = FlakyOperation(failures=10, error=RuntimeError("socket closed"))
        policy = RetryPolicy(max_retries=2, sleep=sleeper)

        with pytest.raises(WebDigestError) as exc_info:
            await policy.execute(op)

        assert op.calls == 2
        assert exc_info.value.code == ErrorCode.RETRIES_EXHAUSTED

    @pytest.mark.asyncio
    async def test_attempt_timeout(self, sleeper):
        """An attempt exceeding attempt_timeout should fail as a TIMEOUT."""

        async def slow() -> str:
            await asyncio.sleep(1.0)
            return "late"

        policy = RetryPolicy(max_retries=1, attempt_timeout=0.01, sleep=sleeper)

        with pytest.raises(WebDigestError) as exc_info:
            await policy.execute(slow, label="Slow call")

        assert exc_info.value.code == ErrorCode.TIMEOUT

    @pytest.mark.asyncio
    async def test_retries_are_observable(self, sleeper):
        """Each retry should invoke on_retry and bump the retries counter."""
        seen = []
        policy = RetryPolicy(
            max_retries=3,
            base_delay=1.0,
            on_retry=lambda attempt, error, delay: seen.append((attempt, delay)),
            sleep=sleeper,
        )

        await policy.execute(FlakyOperation(failures=2))

        assert seen == [(1, 1.0), (2, 2.0)]
        assert Metrics.get().get_counter("retries") == 2

    def test_negative_values_rejected(self):
        """Negative budgets or delays should be rejected."""
        with pytest.raises(ValueError):
            RetryPolicy(max_retries=-1)
        with pytest.raises(ValueError):
            RetryPolicy(base_delay=-0.5)


class TestRetryPolicyFactories:
    """Tests for building policies from configuration."""

    def test_from_settings(self):
        """Settings should supply budget, delay, backoff and cap."""
        settings = RetrySettings(
            max_retries=5, base_delay_seconds=0.25, backoff="linear", max_delay_seconds=2.0
        )

        policy = RetryPolicy.from_settings(settings)

        assert policy.max_retries == 5
        assert policy.base_delay == 0.25
        assert policy.backoff == BackoffStrategy.LINEAR
        assert policy.max_delay == 2.0
        assert policy.attempt_timeout is None

    def test_attempt_timeout_from_settings(self):
        """The configured attempt timeout should reach the policy."""
        policy = RetryPolicy.from_settings(RetrySettings(attempt_timeout_seconds=45.0))

        assert policy.attempt_timeout == 45.0

    def test_from_options_with_overrides(self):
        """Options should supply budget and delay; overrides the rest."""
        options = SummaryOptions(max_retries=2, retry_delay=0.1)

        policy = RetryPolicy.from_options(options, backoff=BackoffStrategy.LINEAR)

        assert policy.attempts == 2
        assert policy.base_delay == 0.1
        assert policy.backoff == BackoffStrategy.LINEAR


class TestRetryCounter:
    """Tests for counting retries across policies."""

    @pytest.mark.asyncio
    async def test_counts_across_policies(self, sleep_recorder):
        """One counter should total the retries of every attached policy."""
        counter = RetryCounter()
        first = counter.attach(RetryPolicy(max_retries=3, sleep=sleep_recorder))
        second = counter.attach(RetryPolicy(max_retries=3, sleep=sleep_recorder))

        await first.execute(FlakyOperation(failures=2))
        await second.execute(FlakyOperation(failures=1))

        assert counter.count == 3

    @pytest.mark.asyncio
    async def test_keeps_existing_hook(self, sleep_recorder):
        """An on_retry hook set before attaching should still be called."""
        seen = []
        counter = RetryCounter()
        policy = counter.attach(
            RetryPolicy(
                max_retries=2,
                on_retry=lambda attempt, error, delay: seen.append(attempt),
                sleep=sleep_recorder,
            )
        )

        await policy.execute(FlakyOperation(failures=1))

        assert seen == [1]
        assert counter.count == 1
