"""Backoff configuration and delay sequences.

BackoffConfig is an immutable, self-normalizing description of a backoff
schedule. BackoffSequence turns one into a lazy, possibly infinite stream of
delays (seconds):

    delay[n] = min(max_delay, initial_delay * multiplier ** n) ± jitter

Jitter is applied to the yielded value only; growth is computed from the
unjittered base so randomness never compounds.

Example:
    >>> config = BackoffConfig(initial_delay=0.1, max_delay=1.0, jitter_factor=0, max_retries=4)
    >>> list(delays(config))
    [0.1, 0.2, 0.4, 0.8]

    >>> for delay in BackoffConfig.exponential().delays(seed=7):
    ...     time.sleep(delay)
    ...     if try_operation():
    ...         break
"""

from __future__ import annotations

import random
import sys
from collections.abc import Iterator
from datetime import timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Final, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

if TYPE_CHECKING:
    from backoffkit.foundation.config import BackoffSettings

# Sentinel retry budget meaning "never stop on its own"
INFINITE: Final[int] = sys.maxsize

MIN_DELAY: Final[float] = 0.001
DEFAULT_MAX_DELAY: Final[float] = 30.0
DEFAULT_MULTIPLIER: Final[float] = 2.0


class BackoffStrategy(StrEnum):
    """Growth pattern of a backoff schedule."""
    EXPONENTIAL = "exponential"
    CONSTANT = "constant"


class BackoffConfig(BaseModel):
    """Immutable backoff schedule.

    Out-of-range values are normalized rather than rejected:

    - initial_delay <= 0 becomes 1ms
    - max_delay <= 0 becomes 30s; below initial_delay it is raised to match
    - multiplier <= 1.0 becomes 2.0 (constant strategy pins it to 1.0)
    - jitter_factor < 0 becomes 0 (no jitter)
    - max_retries < 0 becomes 0; None means INFINITE

    Durations are float seconds; timedelta values are accepted. NaN and
    infinite floats are rejected with a ValidationError.

    Attributes:
        strategy: EXPONENTIAL or CONSTANT
        initial_delay: Delay before the first retry
        max_delay: Upper bound on any yielded delay
        multiplier: Growth factor per attempt
        jitter_factor: Fraction of each delay randomized symmetrically
        max_retries: Number of delays to produce (INFINITE = unbounded)

    Example:
        >>> BackoffConfig(initial_delay=-1, multiplier=0.5).multiplier
        2.0
        >>> list(BackoffConfig.constant(0.5).with_max_retries(3).delays())
        [0.5, 0.5, 0.5]
    """

    model_config = ConfigDict(
        frozen=True,
        validate_default=True,
        extra="forbid",
        allow_inf_nan=False,
        json_schema_extra={
            "title": "Backoff Config",
            "description": "Delay schedule between retry attempts",
            "examples": [{
                "initial_delay": 0.1,
                "max_delay": 30.0,
                "multiplier": 2.0,
                "jitter_factor": 0.1,
                "max_retries": 5,
            }],
        },
    )

    # Field order matters: later validators read earlier values from info.data
    strategy: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    initial_delay: float = Field(default=0.1, description="Delay before the first retry, seconds")
    max_delay: float = Field(default=DEFAULT_MAX_DELAY, description="Cap on any delay, seconds")
    multiplier: float = Field(default=DEFAULT_MULTIPLIER, description="Growth factor per attempt")
    jitter_factor: float = Field(default=0.1, description="Symmetric jitter fraction")
    max_retries: int = Field(default=INFINITE, description="Delays to produce; INFINITE = unbounded")

    @field_validator("initial_delay", "max_delay", mode="before")
    @classmethod
    def _accept_timedelta(cls, v: float | timedelta) -> float:
        return v.total_seconds() if isinstance(v, timedelta) else v

    @field_validator("initial_delay")
    @classmethod
    def _normalize_initial(cls, v: float) -> float:
        return v if v > 0 else MIN_DELAY

    @field_validator("max_delay")
    @classmethod
    def _normalize_max(cls, v: float, info: ValidationInfo) -> float:
        if v <= 0:
            v = DEFAULT_MAX_DELAY
        return max(v, info.data.get("initial_delay", v))

    @field_validator("multiplier")
    @classmethod
    def _normalize_multiplier(cls, v: float, info: ValidationInfo) -> float:
        if info.data.get("strategy") == BackoffStrategy.CONSTANT:
            return 1.0
        return v if v > 1.0 else DEFAULT_MULTIPLIER

    @field_validator("jitter_factor")
    @classmethod
    def _normalize_jitter(cls, v: float) -> float:
        return max(v, 0.0)

    @field_validator("max_retries", mode="before")
    @classmethod
    def _infinite_when_unset(cls, v: int | None) -> int:
        return INFINITE if v is None else v

    @field_validator("max_retries")
    @classmethod
    def _normalize_retries(cls, v: int) -> int:
        return max(v, 0)

    # ─────────────────────────────────────────────────────────────────
    # Presets
    # ─────────────────────────────────────────────────────────────────

    @classmethod
    def exponential(cls, **overrides: object) -> Self:
        """Doubling from 100ms up to 30s with 10% jitter (the default schedule)."""
        return cls(**{
            "initial_delay": 0.1,
            "max_delay": DEFAULT_MAX_DELAY,
            "multiplier": DEFAULT_MULTIPLIER,
            "jitter_factor": 0.1,
            **overrides,
        })

    @classmethod
    def constant(cls, delay: float | timedelta = 1.0, **overrides: object) -> Self:
        """Same delay before every retry, no jitter."""
        return cls(**{
            "strategy": BackoffStrategy.CONSTANT,
            "initial_delay": delay,
            "max_delay": delay,
            "jitter_factor": 0.0,
            **overrides,
        })

    @classmethod
    def from_settings(cls, settings: BackoffSettings | None = None, **overrides: object) -> Self:
        """Build from environment settings (BACKOFFKIT_RETRY_*)."""
        if settings is None:
            from backoffkit.foundation.config import get_settings
            settings = get_settings()
        return cls(**{**settings.retry.model_dump(), **overrides})

    # ─────────────────────────────────────────────────────────────────
    # Builder
    # ─────────────────────────────────────────────────────────────────

    def _replace(self, **changes: object) -> Self:
        return self.model_validate({**self.model_dump(), **changes})

    def with_initial_delay(self, delay: float | timedelta) -> Self:
        return self._replace(initial_delay=delay)

    def with_max_delay(self, delay: float | timedelta) -> Self:
        return self._replace(max_delay=delay)

    def with_multiplier(self, multiplier: float) -> Self:
        """Set growth factor. Switches a constant schedule back to exponential."""
        return self._replace(strategy=BackoffStrategy.EXPONENTIAL, multiplier=multiplier)

    def with_jitter_factor(self, factor: float) -> Self:
        return self._replace(jitter_factor=factor)

    def with_max_retries(self, retries: int | None) -> Self:
        return self._replace(max_retries=retries)

    # ─────────────────────────────────────────────────────────────────
    # Inspection
    # ─────────────────────────────────────────────────────────────────

    @property
    def is_infinite(self) -> bool:
        return self.max_retries == INFINITE

    @property
    def is_jittered(self) -> bool:
        return self.jitter_factor > 0

    def base_delay(self, attempt: int) -> float:
        """Unjittered delay for 0-indexed attempt: min(max_delay, initial * multiplier^n)."""
        try:
            return min(self.max_delay, self.initial_delay * self.multiplier ** attempt)
        except OverflowError:
            return self.max_delay

    def delays(self, *, rng: random.Random | None = None, seed: int | None = None) -> BackoffSequence:
        """Start a fresh delay sequence for this schedule."""
        return delays(self, rng=rng, seed=seed)


class BackoffSequence(Iterator[float]):
    """Lazy delay sequence for one retry session.

    Owns its mutable state (current base delay, attempt count) and its random
    source, so sequences built from the same config never interfere. Stopping
    early is just not calling next() again.

    Attributes:
        config: Schedule being iterated
        attempt: Number of delays yielded so far
        current_delay: Unjittered base for the next delay
    """

    __slots__ = ("_config", "_rng", "_current", "_attempt")

    def __init__(self, config: BackoffConfig, rng: random.Random | None = None) -> None:
        self._config = config
        self._rng = rng if rng is not None else random.Random()
        self._current = config.initial_delay
        self._attempt = 0

    @property
    def config(self) -> BackoffConfig:
        return self._config

    @property
    def attempt(self) -> int:
        return self._attempt

    @property
    def current_delay(self) -> float:
        return self._current

    def __iter__(self) -> BackoffSequence:
        return self

    def __next__(self) -> float:
        cfg = self._config
        if self._attempt >= cfg.max_retries:
            raise StopIteration

        base = self._current
        delay = base
        if cfg.jitter_factor > 0:
            delay = base + (2 * self._rng.random() - 1) * cfg.jitter_factor * base

        self._current = min(cfg.max_delay, base * cfg.multiplier)
        self._attempt += 1
        # Large jitter factors can push below zero; a negative wait is meaningless
        return max(0.0, min(delay, cfg.max_delay))

    def __repr__(self) -> str:
        return f"BackoffSequence(attempt={self._attempt}, current_delay={self._current:.3f})"


def delays(
    config: BackoffConfig | None = None,
    *,
    rng: random.Random | None = None,
    seed: int | None = None,
) -> BackoffSequence:
    """Create a delay sequence.

    Args:
        config: Schedule to follow (default: BackoffConfig.exponential())
        rng: Random source for jitter, owned by the sequence
        seed: Seed for a fresh random.Random (exclusive with rng)

    Returns:
        Iterator of delays in seconds
    """
    if rng is not None and seed is not None:
        raise ValueError("Pass either rng or seed, not both")
    return BackoffSequence(config or BackoffConfig(), rng if rng is not None else random.Random(seed))
