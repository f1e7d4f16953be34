"""Tests for the asyncio retry driver and async token waits."""

from __future__ import annotations

import asyncio
import threading
import time

import pytest

from backoffkit import (
    BackoffConfig,
    CancelToken,
    DeadlineExceeded,
    Err,
    FatalError,
    Ok,
    RetryCancelled,
    aretry,
    fatal,
)
from backoffkit.runtime.concurrency import race, sleep_for


def _fast(max_retries: int | None = 5) -> BackoffConfig:
    return BackoffConfig(initial_delay=0.001, max_delay=0.004, jitter_factor=0, max_retries=max_retries)


class AsyncFlaky:
    """Async callable failing a fixed number of times before succeeding."""

    def __init__(self, failures: int, value: object = "success") -> None:
        self.failures = failures
        self.value = value
        self.calls = 0

    async def __call__(self) -> object:
        self.calls += 1
        await asyncio.sleep(0)
        if self.calls <= self.failures:
            raise ConnectionError(f"failure {self.calls}")
        return self.value


# ─────────────────────────────────────────────────────────────────────────────
# aretry
# ─────────────────────────────────────────────────────────────────────────────


class TestAsyncRetry:
    """Same contract as retry(), on the event loop."""

    @pytest.mark.asyncio
    async def test_k_failures_then_success(self) -> None:
        op = AsyncFlaky(3, value=42)
        result = await aretry(op, _fast())
        assert result == Ok(42)
        assert op.calls == 4

    @pytest.mark.asyncio
    async def test_exhaustion_returns_last_error(self) -> None:
        op = AsyncFlaky(100)
        result = await aretry(op, _fast(2))
        assert op.calls == 3
        assert str(result.unwrap_err()) == "failure 3"

    @pytest.mark.asyncio
    async def test_fatal_stops_immediately(self) -> None:
        calls = 0

        async def op() -> None:
            nonlocal calls
            calls += 1
            if calls == 2:
                raise fatal(PermissionError("denied"))
            raise OSError("transient")

        result = await aretry(op, _fast(10))
        assert isinstance(result.unwrap_err(), FatalError)
        assert calls == 2

    @pytest.mark.asyncio
    async def test_sync_callable_accepted(self) -> None:
        calls = iter([Err(TimeoutError()), Ok("done")])
        assert await aretry(lambda: next(calls), _fast()) == Ok("done")

    @pytest.mark.asyncio
    async def test_cancel_mid_wait(self) -> None:
        token = CancelToken()
        op = AsyncFlaky(100)
        loop = asyncio.get_running_loop()
        loop.call_later(0.05, token.cancel)
        start = time.monotonic()
        result = await aretry(op, BackoffConfig(initial_delay=10.0, jitter_factor=0, max_retries=3), cancel=token)
        assert isinstance(result.unwrap_err(), RetryCancelled)
        assert op.calls == 1
        assert time.monotonic() - start < 2.0

    @pytest.mark.asyncio
    async def test_cancel_from_other_thread(self) -> None:
        token = CancelToken()
        op = AsyncFlaky(100)
        threading.Timer(0.05, token.cancel).start()
        result = await aretry(op, BackoffConfig(initial_delay=10.0, jitter_factor=0), cancel=token)
        assert isinstance(result.unwrap_err(), RetryCancelled)
        assert op.calls == 1

    @pytest.mark.asyncio
    async def test_deadline_exceeded(self) -> None:
        token = CancelToken(timeout=0.05)
        op = AsyncFlaky(100)
        config = BackoffConfig(initial_delay=0.02, jitter_factor=0, max_retries=5)
        result = await aretry(op, config, cancel=token)
        assert isinstance(result.unwrap_err(), DeadlineExceeded)
        assert 1 <= op.calls <= config.max_retries + 1

    @pytest.mark.asyncio
    async def test_task_cancellation_propagates(self) -> None:
        op = AsyncFlaky(100)
        task = asyncio.create_task(aretry(op, BackoffConfig(initial_delay=10.0, jitter_factor=0)))
        await asyncio.sleep(0.02)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert op.calls == 1

    @pytest.mark.asyncio
    async def test_concurrent_sessions_are_independent(self) -> None:
        ops = [AsyncFlaky(k, value=k) for k in range(4)]
        results = await asyncio.gather(*(aretry(op, _fast()) for op in ops))
        assert [r.unwrap() for r in results] == [0, 1, 2, 3]
        assert [op.calls for op in ops] == [1, 2, 3, 4]


# ─────────────────────────────────────────────────────────────────────────────
# Async token waits & race
# ─────────────────────────────────────────────────────────────────────────────


class TestAsyncWaits:
    """CancelToken.wait_async and the race primitive."""

    @pytest.mark.asyncio
    async def test_wait_async_times_out(self) -> None:
        assert await CancelToken().wait_async(0.01) is False

    @pytest.mark.asyncio
    async def test_wait_async_wakes_on_cancel(self) -> None:
        token = CancelToken()
        asyncio.get_running_loop().call_later(0.01, token.cancel)
        assert await token.wait_async() is True

    @pytest.mark.asyncio
    async def test_wait_async_respects_deadline(self) -> None:
        token = CancelToken(timeout=0.01)
        assert await token.wait_async(5.0) is True
        assert isinstance(token.cause, DeadlineExceeded)

    @pytest.mark.asyncio
    async def test_waiters_cleaned_up(self) -> None:
        token = CancelToken()
        await token.wait_async(0.001)
        assert token._waiters == []

    @pytest.mark.asyncio
    async def test_race_returns_first(self) -> None:
        assert await race(sleep_for(0.05, "slow"), sleep_for(0.001, "fast")) == "fast"

    @pytest.mark.asyncio
    async def test_race_requires_contenders(self) -> None:
        with pytest.raises(ValueError):
            await race()

    @pytest.mark.asyncio
    async def test_race_cancels_losers(self) -> None:
        slow = asyncio.ensure_future(sleep_for(5.0, "slow"))
        assert await race(slow, sleep_for(0.001, "fast")) == "fast"
        assert slow.cancelled()
