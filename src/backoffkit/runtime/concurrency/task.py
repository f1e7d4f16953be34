"""Cancellation primitives for retry sessions.

CancelToken carries an external stop signal (manual cancel and/or deadline)
into a retry session. Waits on it are interruptible from both threads and
event loops, which is what keeps cancellation latency bounded by timer
resolution rather than by the current backoff delay.

Example:
    >>> token = CancelToken(timeout=5.0)
    >>> result = retry(fetch, config, cancel=token)

    >>> # From another thread or a signal handler
    >>> token.cancel("shutting down")
"""

from __future__ import annotations

import asyncio
import threading
import time
from typing import Self

from backoffkit.foundation.errors import DeadlineExceeded, RetryCancelled

from .wait import race, sleep_for


class CancelToken:
    """Cooperative cancellation signal with optional deadline.

    The first cancellation wins: later cancel() calls and deadline expiry do
    not replace the recorded cause.

    Args:
        timeout: Seconds from now after which the token expires
        deadline: Absolute time.monotonic() value after which the token expires

    Example:
        >>> token = CancelToken()
        >>> token.cancelled
        False
        >>> token.cancel()
        True
        >>> type(token.cause).__name__
        'RetryCancelled'
    """

    __slots__ = ("_event", "_lock", "_waiters", "_cause", "_deadline", "_timeout")

    def __init__(self, *, timeout: float | None = None, deadline: float | None = None) -> None:
        if timeout is not None and deadline is not None:
            raise ValueError("Pass either timeout or deadline, not both")
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._waiters: list[tuple[asyncio.AbstractEventLoop, asyncio.Future[bool]]] = []
        self._cause: BaseException | None = None
        self._timeout = timeout
        self._deadline = time.monotonic() + timeout if timeout is not None else deadline

    @classmethod
    def with_timeout(cls, seconds: float) -> Self:
        return cls(timeout=seconds)

    # ─────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────

    @property
    def cancelled(self) -> bool:
        """Whether cancellation was requested or the deadline has passed."""
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._expire()
            return True
        return False

    @property
    def cause(self) -> BaseException | None:
        """Error describing why the token fired, None while active."""
        return self._cause if self.cancelled else None

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def remaining(self) -> float | None:
        """Seconds until the deadline (never negative), None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self, reason: BaseException | str | None = None) -> bool:
        """Fire the token. Safe to call from any thread.

        Args:
            reason: Cancellation cause; strings become RetryCancelled

        Returns:
            True if this call fired the token, False if already fired
        """
        if isinstance(reason, BaseException):
            cause = reason
        else:
            cause = RetryCancelled(reason) if reason else RetryCancelled()

        with self._lock:
            if self._event.is_set():
                return False
            self._cause = cause
            self._event.set()
            waiters, self._waiters = self._waiters, []

        for loop, fut in waiters:
            if not loop.is_closed():
                loop.call_soon_threadsafe(_resolve, fut)
        return True

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise self._cause  # type: ignore[misc]

    def _expire(self) -> None:
        self.cancel(DeadlineExceeded.after(self._timeout) if self._timeout is not None else DeadlineExceeded())

    def _bound(self, timeout: float | None) -> tuple[float | None, bool]:
        """Clip timeout to the deadline. Second item: deadline falls inside."""
        remaining = self.remaining()
        if remaining is None:
            return timeout, False
        if timeout is None or remaining <= timeout:
            return remaining, True
        return timeout, False

    # ─────────────────────────────────────────────────────────────────
    # Waiting
    # ─────────────────────────────────────────────────────────────────

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the token fires or timeout elapses.

        Returns:
            True if the token fired (now cancelled), False if timeout elapsed
        """
        if self.cancelled:
            return True
        limit, expires = self._bound(timeout)
        if self._event.wait(limit):
            return True
        if expires:
            self._expire()
        return self.cancelled

    async def wait_async(self, timeout: float | None = None) -> bool:
        """Async twin of wait(): race the token against a timer.

        Returns:
            True if the token fired (now cancelled), False if timeout elapsed
        """
        if self.cancelled:
            return True
        limit, expires = self._bound(timeout)

        loop = asyncio.get_running_loop()
        fut: asyncio.Future[bool] = loop.create_future()
        with self._lock:
            if self._event.is_set():
                return True
            self._waiters.append((loop, fut))

        try:
            if limit is None:
                fired = await fut
            else:
                fired = await race(fut, sleep_for(limit, False))
        finally:
            with self._lock:
                if (loop, fut) in self._waiters:
                    self._waiters.remove((loop, fut))

        if fired:
            return True
        if expires:
            self._expire()
        return self.cancelled

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "active"
        return f"CancelToken({state}, remaining={self.remaining()})"


def _resolve(fut: asyncio.Future[bool]) -> None:
    if not fut.done():
        fut.set_result(True)


async def checkpoint() -> None:
    """Cooperative cancellation checkpoint.

    Yields control to the event loop, allowing pending task cancellations
    to be processed before the next attempt starts.
    """
    await asyncio.sleep(0)
