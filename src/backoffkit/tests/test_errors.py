"""Tests for fatal marking, the Result monad, and attempt outcomes."""

from __future__ import annotations

import pytest

from backoffkit import (
    BackoffError,
    DeadlineExceeded,
    Err,
    FatalError,
    Ok,
    Outcome,
    OutcomeKind,
    Result,
    RetryCancelled,
    capture,
    fatal,
    is_fatal,
    unwrap_fatal,
)


# ═════════════════════════════════════════════════════════════════════════════
# Fatal Marking
# ═════════════════════════════════════════════════════════════════════════════


class TestFatal:
    """fatal() / is_fatal() / unwrap_fatal()."""

    def test_fatal_wraps_and_unwraps(self) -> None:
        original = ValueError("bad input")
        err = fatal(original)
        assert isinstance(err, FatalError)
        assert isinstance(err, BackoffError)
        assert err.error is original
        assert unwrap_fatal(err) is original
        assert str(err) == "bad input"

    def test_fatal_is_idempotent(self) -> None:
        err = fatal(KeyError("k"))
        assert fatal(err) is err

    def test_fatal_from_string(self) -> None:
        err = fatal("stop now")
        assert isinstance(err.error, RuntimeError)
        assert str(err) == "stop now"

    def test_plain_errors_are_not_fatal(self) -> None:
        plain = OSError("transient")
        assert not is_fatal(plain)
        assert not is_fatal(None)
        assert unwrap_fatal(plain) is plain

    def test_fatal_found_through_cause_chain(self) -> None:
        inner = fatal(PermissionError("denied"))
        try:
            try:
                raise inner
            except FatalError as e:
                raise RuntimeError("wrapper") from e
        except RuntimeError as outer:
            assert is_fatal(outer)
            assert isinstance(unwrap_fatal(outer), PermissionError)

    def test_error_raised_while_handling_fatal_is_not_fatal(self) -> None:
        try:
            try:
                raise fatal(PermissionError("denied"))
            except FatalError:
                raise ConnectionError("transient")
        except ConnectionError as err:
            assert isinstance(err.__context__, FatalError)
            assert not is_fatal(err)
            assert unwrap_fatal(err) is err

    def test_suppressed_context_is_not_fatal(self) -> None:
        try:
            try:
                raise fatal(PermissionError("denied"))
            except FatalError:
                raise ConnectionError("transient") from None
        except ConnectionError as err:
            assert not is_fatal(err)

    def test_cyclic_chain_terminates(self) -> None:
        a, b = ValueError("a"), ValueError("b")
        a.__cause__, b.__cause__ = b, a
        assert not is_fatal(a)


class TestCancellationErrors:
    """Driver-level error types."""

    def test_deadline_is_a_cancellation_and_a_timeout(self) -> None:
        err = DeadlineExceeded.after(1.5)
        assert isinstance(err, RetryCancelled)
        assert isinstance(err, TimeoutError)
        assert "1.500s" in str(err)

    def test_default_messages(self) -> None:
        assert str(RetryCancelled()) == "retry cancelled"
        assert str(DeadlineExceeded()) == "retry deadline exceeded"


# ═════════════════════════════════════════════════════════════════════════════
# Result
# ═════════════════════════════════════════════════════════════════════════════


class TestResult:
    """Result operations used by driver callers."""

    def test_to_tuple(self) -> None:
        assert Ok(42).to_tuple() == (42, None)
        err = ValueError("x")
        assert Err(err).to_tuple() == (None, err)

    def test_unwrap_raises_stored_exception(self) -> None:
        result: Result[int, BaseException] = Err(ValueError("boom"))
        with pytest.raises(ValueError, match="boom"):
            result.unwrap()

    def test_unwrap_with_plain_error_value(self) -> None:
        with pytest.raises(RuntimeError):
            Err("nope").unwrap()

    def test_unwrap_err_on_ok_raises(self) -> None:
        with pytest.raises(RuntimeError):
            Ok(1).unwrap_err()

    def test_unwrap_or(self) -> None:
        assert Ok(3).unwrap_or(0) == 3
        assert Err("e").unwrap_or(0) == 0

    def test_truthiness_and_accessors(self) -> None:
        assert Ok(0)
        assert not Err("e")
        assert Ok(0).is_ok() and Err("e").is_err()
        assert Err("e").ok() is None and Err("e").err() == "e"
        assert Ok(5).ok() == 5 and Ok(5).err() is None
        assert repr(Err("e")) == "Err('e')"


# ═════════════════════════════════════════════════════════════════════════════
# Outcome Classification
# ═════════════════════════════════════════════════════════════════════════════


class TestOutcome:
    """capture() turns one invocation into an Outcome."""

    def test_return_value_is_success(self) -> None:
        outcome = capture(lambda: "ok")
        assert outcome == Outcome(OutcomeKind.SUCCESS, value="ok")
        assert outcome.should_stop

    def test_raised_error_is_recoverable(self) -> None:
        def op() -> None:
            raise ConnectionError("reset")
        outcome = capture(op)
        assert outcome.kind == OutcomeKind.RECOVERABLE
        assert isinstance(outcome.error, ConnectionError)
        assert not outcome.should_stop

    def test_raised_fatal_is_fatal(self) -> None:
        def op() -> None:
            raise fatal(PermissionError("401"))
        outcome = capture(op)
        assert outcome.is_fatal
        assert isinstance(outcome.error, FatalError)

    def test_returned_results_are_unpacked(self) -> None:
        assert capture(lambda: Ok(7)).value == 7
        assert capture(lambda: Err(OSError("x"))).kind == OutcomeKind.RECOVERABLE
        assert capture(lambda: Err(fatal(OSError("x")))).kind == OutcomeKind.FATAL

    def test_non_exception_err_payload_wrapped(self) -> None:
        outcome = capture(lambda: Err("rate limited"))
        assert isinstance(outcome.error, RuntimeError)
        assert str(outcome.error) == "rate limited"

    def test_returned_outcome_passes_through(self) -> None:
        preset = Outcome.recoverable(TimeoutError())
        assert capture(lambda: preset) is preset

    def test_base_exceptions_propagate(self) -> None:
        def op() -> None:
            raise KeyboardInterrupt
        with pytest.raises(KeyboardInterrupt):
            capture(op)
