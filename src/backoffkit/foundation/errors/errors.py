"""Error types for retry control flow.

Operations signal "stop retrying now" by raising (or returning) an error
wrapped with fatal(). The driver reports cancellation and deadline expiry
with its own error types so callers can tell them apart from operation
failures.
"""

from __future__ import annotations

from typing import Self


class BackoffError(Exception):
    """Base class for all backoffkit errors."""


class FatalError(BackoffError):
    """Wraps an error to stop retries immediately.

    The driver returns the FatalError itself; use unwrap_fatal() or the
    `error` attribute to reach the original failure.

    Example:
        >>> def call_api():
        ...     resp = client.get(url)
        ...     if resp.status_code == 401:
        ...         raise fatal(PermissionError("unauthorized"))
        ...     return resp.json()
    """

    __slots__ = ("error",)

    def __init__(self, error: BaseException) -> None:
        self.error = error
        super().__init__(str(error))
        self.__cause__ = error

    def __repr__(self) -> str:
        return f"FatalError({self.error!r})"


class RetryCancelled(BackoffError):
    """Retry session stopped by an external cancellation signal."""

    def __init__(self, message: str = "retry cancelled") -> None:
        super().__init__(message)


class DeadlineExceeded(RetryCancelled, TimeoutError):
    """Retry session stopped because its deadline passed."""

    def __init__(self, message: str = "retry deadline exceeded") -> None:
        super().__init__(message)

    @classmethod
    def after(cls, seconds: float) -> Self:
        return cls(f"retry deadline exceeded after {seconds:.3f}s")


def fatal(error: BaseException | str) -> FatalError:
    """Mark an error as fatal so the retry driver stops immediately.

    Strings are wrapped in RuntimeError. Already-fatal errors are returned
    unchanged.
    """
    if isinstance(error, FatalError):
        return error
    return FatalError(RuntimeError(error) if isinstance(error, str) else error)


def is_fatal(error: BaseException | None) -> bool:
    """Whether error, or anything in its explicit `raise ... from` chain, is fatal.

    Only __cause__ is followed. An error raised while handling a FatalError
    (implicit __context__) is an ordinary failure.
    """
    return _find_fatal(error) is not None


def unwrap_fatal(error: BaseException) -> BaseException:
    """Return the error wrapped by the first FatalError in the chain.

    Non-fatal errors are returned unchanged.
    """
    found = _find_fatal(error)
    return found.error if found is not None else error


def _find_fatal(error: BaseException | None) -> FatalError | None:
    seen: set[int] = set()
    while error is not None and id(error) not in seen:
        if isinstance(error, FatalError):
            return error
        seen.add(id(error))
        error = error.__cause__
    return None
