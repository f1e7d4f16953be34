"""Retry drivers.

Runs an operation, then keeps re-running it on the delays of a backoff
sequence until it succeeds, signals a fatal error, the sequence runs out,
or an external CancelToken fires.

    Idle -> Attempting -> Succeeded | FatalStopped
                       -> AwaitingDelay -> Attempting | CancelledStopped
                       -> ExhaustedStopped

Both drivers return a Result instead of raising:
- Ok(value) on success
- Err(FatalError) when the operation marked its error with fatal()
- Err(RetryCancelled | DeadlineExceeded) when the token fired mid-session
- Err(last_error) when the retry budget is exhausted
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections.abc import Awaitable
from typing import Callable, TypeVar

from backoffkit.foundation.errors import Err, Ok, Result
from backoffkit.runtime.concurrency import CancelToken, checkpoint

from .backoff import BackoffConfig, delays
from .outcome import Outcome, capture, capture_async

logger = logging.getLogger("backoffkit.retry")

T = TypeVar("T")

# (retry number starting at 1, error being retried, delay in seconds)
OnRetry = Callable[[int, BaseException, float], None]


def _settle(outcome: Outcome[T]) -> Result[T, BaseException]:
    if outcome.is_success:
        return Ok(outcome.value)  # type: ignore[arg-type]
    return Err(outcome.error)  # type: ignore[arg-type]


def _cancelled(token: CancelToken) -> Result[T, BaseException]:
    logger.debug(f"Retry session stopped: {token.cause}")
    return Err(token.cause)  # type: ignore[arg-type]


def _budget(config: BackoffConfig) -> str:
    return "inf" if config.is_infinite else str(config.max_retries)


def _announce(
    attempt: int, error: BaseException, delay: float, config: BackoffConfig, on_retry: OnRetry | None,
) -> None:
    logger.debug(
        f"Retry {attempt}/{_budget(config)} in {delay:.3f}s "
        f"after {type(error).__name__}: {error}"
    )
    if on_retry:
        on_retry(attempt, error, delay)


def retry(
    operation: Callable[[], T | Result[T, BaseException]],
    config: BackoffConfig | None = None,
    *,
    cancel: CancelToken | None = None,
    rng: random.Random | None = None,
    seed: int | None = None,
    on_retry: OnRetry | None = None,
) -> Result[T, BaseException]:
    """Run operation with retries, blocking the current thread between attempts.

    The operation is always attempted once before any delay, so
    max_retries=0 means exactly one attempt. Waits are interruptible by
    `cancel`; once it fires no further attempt is made and its cause is
    returned in place of any earlier operation error.

    Args:
        operation: Zero-argument callable; raise (or return Err) to fail
        config: Backoff schedule (default: BackoffConfig())
        cancel: Optional cancellation token / deadline
        rng: Random source for jitter
        seed: Seed for jitter (exclusive with rng)
        on_retry: Called before each wait with (retry, error, delay)

    Returns:
        Ok(value), or Err with the fatal error, cancellation cause, or last error

    Example:
        >>> def fetch():
        ...     resp = httpx.get(url)
        ...     if resp.status_code == 401:
        ...         raise fatal(PermissionError("unauthorized"))
        ...     resp.raise_for_status()
        ...     return resp.json()
        >>>
        >>> body = retry(fetch, BackoffConfig(max_retries=5)).unwrap()
    """
    config = config or BackoffConfig()

    outcome = capture(operation)
    if outcome.should_stop:
        return _settle(outcome)
    last_error = outcome.error

    for attempt, delay in enumerate(delays(config, rng=rng, seed=seed), start=1):
        if cancel is not None and cancel.cancelled:
            return _cancelled(cancel)

        _announce(attempt, last_error, delay, config, on_retry)  # type: ignore[arg-type]

        if cancel is None:
            time.sleep(delay)
        elif cancel.wait(delay):
            return _cancelled(cancel)

        outcome = capture(operation)
        if outcome.should_stop:
            return _settle(outcome)
        last_error = outcome.error

    logger.debug(f"Retries exhausted ({_budget(config)}): {last_error!r}")
    return Err(last_error)  # type: ignore[arg-type]


async def aretry(
    operation: Callable[[], Awaitable[T | Result[T, BaseException]]],
    config: BackoffConfig | None = None,
    *,
    cancel: CancelToken | None = None,
    rng: random.Random | None = None,
    seed: int | None = None,
    on_retry: OnRetry | None = None,
) -> Result[T, BaseException]:
    """Run async operation with retries.

    Same contract as retry(). Delays race the token against a timer on the
    event loop. Cancelling the awaiting task raises asyncio.CancelledError
    out of aretry() as usual.

    Example:
        >>> async with httpx.AsyncClient() as client:
        ...     result = await aretry(
        ...         lambda: client.get(url),
        ...         BackoffConfig(max_retries=3),
        ...         cancel=CancelToken(timeout=10.0),
        ...     )
    """
    config = config or BackoffConfig()

    outcome = await capture_async(operation)
    if outcome.should_stop:
        return _settle(outcome)
    last_error = outcome.error

    for attempt, delay in enumerate(delays(config, rng=rng, seed=seed), start=1):
        await checkpoint()  # Cooperative cancellation point
        if cancel is not None and cancel.cancelled:
            return _cancelled(cancel)

        _announce(attempt, last_error, delay, config, on_retry)  # type: ignore[arg-type]

        if cancel is None:
            await asyncio.sleep(delay)
        elif await cancel.wait_async(delay):
            return _cancelled(cancel)

        outcome = await capture_async(operation)
        if outcome.should_stop:
            return _settle(outcome)
        last_error = outcome.error

    logger.debug(f"Retries exhausted ({_budget(config)}): {last_error!r}")
    return Err(last_error)  # type: ignore[arg-type]
