"""Classification of a single operation invocation.

Every attempt settles into exactly one Outcome:
    - SUCCESS: returned a value (or Ok(value))
    - RECOVERABLE: raised / returned Err with an ordinary error; keep retrying
    - FATAL: raised / returned Err with an error marked by fatal(); stop now
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable
from dataclasses import dataclass
from enum import StrEnum
from typing import Callable, Generic, TypeVar

from backoffkit.foundation.errors import Result, is_fatal

T = TypeVar("T")


class OutcomeKind(StrEnum):
    """How an attempt settled."""
    SUCCESS = "success"
    RECOVERABLE = "recoverable"
    FATAL = "fatal"


@dataclass(slots=True, frozen=True)
class Outcome(Generic[T]):
    """Result of one attempt.

    Attributes:
        kind: SUCCESS, RECOVERABLE or FATAL
        value: Returned value if SUCCESS
        error: Exception if RECOVERABLE or FATAL
    """

    kind: OutcomeKind
    value: T | None = None
    error: BaseException | None = None

    @classmethod
    def success(cls, value: T) -> Outcome[T]:
        return cls(OutcomeKind.SUCCESS, value=value)

    @classmethod
    def recoverable(cls, error: BaseException) -> Outcome[T]:
        return cls(OutcomeKind.RECOVERABLE, error=error)

    @classmethod
    def fatal(cls, error: BaseException) -> Outcome[T]:
        return cls(OutcomeKind.FATAL, error=error)

    @classmethod
    def failure(cls, error: BaseException) -> Outcome[T]:
        """Recoverable or fatal depending on whether error is marked fatal."""
        return cls.fatal(error) if is_fatal(error) else cls.recoverable(error)

    @classmethod
    def from_value(cls, value: object) -> Outcome[T]:
        """Interpret an operation's return value.

        Results are unpacked (Err becomes a failure); anything else succeeds.
        Err payloads that are not exceptions are wrapped in RuntimeError.
        """
        if isinstance(value, Outcome):
            return value  # type: ignore[return-value]
        if isinstance(value, Result):
            if value.is_ok():
                return cls.success(value.unwrap())
            err = value.unwrap_err()
            return cls.failure(err if isinstance(err, BaseException) else RuntimeError(err))
        return cls.success(value)  # type: ignore[arg-type]

    @property
    def is_success(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS

    @property
    def is_fatal(self) -> bool:
        return self.kind == OutcomeKind.FATAL

    @property
    def should_stop(self) -> bool:
        """Whether the driver must stop after this attempt."""
        return self.kind != OutcomeKind.RECOVERABLE


def capture(operation: Callable[[], T | Result[T, BaseException]]) -> Outcome[T]:
    """Invoke operation once and classify what happened.

    Only Exception subclasses are captured; KeyboardInterrupt, SystemExit
    and other BaseExceptions propagate to the caller.
    """
    try:
        value = operation()
    except Exception as e:
        return Outcome.failure(e)
    return Outcome.from_value(value)


async def capture_async(
    operation: Callable[[], Awaitable[T | Result[T, BaseException]] | T | Result[T, BaseException]],
) -> Outcome[T]:
    """Async twin of capture().

    Accepts coroutine functions and plain callables alike; an awaitable
    return value is awaited. asyncio.CancelledError propagates.
    """
    try:
        value = operation()
        if inspect.isawaitable(value):
            value = await value
    except Exception as e:
        return Outcome.failure(e)
    return Outcome.from_value(value)
