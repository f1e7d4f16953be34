"""Result type returned by the retry drivers.

- Ok(value): the operation eventually succeeded
- Err(error): fatal error, cancellation cause, or last recoverable error

Operations may also return a Result themselves; the driver treats Err as a
failed attempt instead of requiring an exception to be raised.
"""

from __future__ import annotations

from typing import Generic, TypeVar, cast

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


class Result(Generic[T, E]):
    """Outcome of a retry session: Ok(value) or Err(error).

    Examples:
        >>> result = retry(fetch, BackoffConfig(max_retries=3))
        >>> if result.is_ok():
        ...     print(result.unwrap())

        >>> value, error = result.to_tuple()
    """

    __slots__ = ("_value", "_is_ok")

    def __init__(self, value: T | E, is_ok: bool) -> None:
        """Private constructor. Use Ok() or Err() instead."""
        self._value: T | E = value
        self._is_ok: bool = is_ok

    def is_ok(self) -> bool:
        return self._is_ok

    def is_err(self) -> bool:
        return not self._is_ok

    def unwrap(self) -> T:
        """Extract Ok value, raise on Err.

        An Err holding an exception re-raises that exception, so
        `retry(...).unwrap()` behaves like calling the operation with
        retries built in.

        Raises:
            The stored exception, or RuntimeError for non-exception errors
        """
        if self._is_ok:
            return cast(T, self._value)
        if isinstance(self._value, BaseException):
            raise self._value
        raise RuntimeError(f"Called unwrap() on Err value: {self._value}")

    def unwrap_err(self) -> E:
        """Extract Err value.

        Raises:
            RuntimeError: If Result is Ok
        """
        if not self._is_ok:
            return cast(E, self._value)
        raise RuntimeError(f"Called unwrap_err() on Ok value: {self._value}")

    def unwrap_or(self, default: T) -> T:
        return cast(T, self._value) if self._is_ok else default

    def ok(self) -> T | None:
        return cast(T, self._value) if self._is_ok else None

    def err(self) -> E | None:
        return cast(E, self._value) if not self._is_ok else None

    def to_tuple(self) -> tuple[T | None, E | None]:
        """Convert to (value, error) pair; exactly one side is None."""
        if self._is_ok:
            return (cast(T, self._value), None)
        return (None, cast(E, self._value))

    def __bool__(self) -> bool:
        return self._is_ok

    def __repr__(self) -> str:
        return f"{'Ok' if self._is_ok else 'Err'}({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return self._is_ok == other._is_ok and self._value == other._value


def Ok(value: T) -> Result[T, E]:  # noqa: N802
    """Construct Ok variant (success)."""
    return Result(value, is_ok=True)


def Err(error: E) -> Result[T, E]:  # noqa: N802
    """Construct Err variant (failure)."""
    return Result(error, is_ok=False)
