"""Unit tests for the backoff retry loop."""

from __future__ import annotations

import pytest

from citenet.utils.retry import backoff_delay, retry_async


class Flaky:
    """Fails ``failures`` times with ``error`` before returning ``value``."""

    def __init__(self, failures: int, error: Exception, value: str = "ok") -> None:
        self.failures = failures
        self.error = error
        self.value = value
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.value


@pytest.fixture
def sleeps():
    recorded: list[float] = []

    async def sleep(delay: float) -> None:
        recorded.append(delay)

    sleep.recorded = recorded
    return sleep


def test_backoff_doubles():
    assert [backoff_delay(1.0, n) for n in range(4)] == [1.0, 2.0, 4.0, 8.0]


@pytest.mark.asyncio
async def test_succeeds_after_transient_failures(sleeps):
    operation = Flaky(2, ConnectionError("reset"))

    result = await retry_async(
        operation, max_retries=3, base_delay=0.5, is_retryable=lambda e: True, label="t", sleep=sleeps
    )

    assert result == "ok"
    assert operation.calls == 3
    assert sleeps.recorded == [0.5, 1.0]


@pytest.mark.asyncio
async def test_exhaustion_reraises_last_error(sleeps):
    operation = Flaky(10, ConnectionError("down"))

    with pytest.raises(ConnectionError, match="down"):
        await retry_async(
            operation, max_retries=2, base_delay=1.0, is_retryable=lambda e: True, label="t", sleep=sleeps
        )

    assert operation.calls == 3
    assert sleeps.recorded == [1.0, 2.0]


@pytest.mark.asyncio
async def test_non_retryable_error_propagates_immediately(sleeps):
    operation = Flaky(1, ValueError("bad request"))

    with pytest.raises(ValueError):
        await retry_async(
            operation,
            max_retries=5,
            base_delay=1.0,
            is_retryable=lambda e: not isinstance(e, ValueError),
            label="t",
            sleep=sleeps,
        )

    assert operation.calls == 1
    assert sleeps.recorded == []


@pytest.mark.asyncio
async def test_zero_retries_means_single_attempt(sleeps):
    operation = Flaky(1, ConnectionError("once"))

    with pytest.raises(ConnectionError):
        await retry_async(
            operation, max_retries=0, base_delay=1.0, is_retryable=lambda e: True, label="t", sleep=sleeps
        )

    assert operation.calls == 1
