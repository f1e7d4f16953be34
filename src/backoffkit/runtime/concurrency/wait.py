"""Wait strategies for concurrent operations.

Provides the racing primitive used for interruptible delays:
    - race: first to complete wins, cancel others

Example:
    >>> # Sleep unless the token fires first
    >>> cancelled = await race(token_fired(), sleep_then_false(delay))
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


async def race(*coros: Awaitable[T]) -> T:
    """Race multiple awaitables - first to complete wins.

    Cancels all remaining awaitables after first completes.
    If the first to complete raises, that exception propagates.

    Args:
        *coros: Awaitables to race

    Returns:
        Result from first completing awaitable

    Raises:
        ValueError: If no awaitables provided
        Exception: If first completing awaitable raises
    """
    if not coros:
        raise ValueError("race() requires at least one coroutine")

    tasks = [asyncio.ensure_future(c) for c in coros]

    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)

        for task in pending:
            task.cancel()

        # Wait for cancellations to complete
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        # Return first result (may raise)
        winner = next(iter(done))
        return winner.result()

    except BaseException:
        # External cancellation: nothing may outlive the race
        for task in tasks:
            task.cancel()
        raise


async def sleep_for(delay: float, result: T) -> T:
    """Sleep for delay seconds then return result (a race contender)."""
    await asyncio.sleep(delay)
    return result
