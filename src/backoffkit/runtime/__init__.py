"""Runtime - delay schedules, retry drivers, cancellation, logging.

Contains: retry, concurrency, observability.
"""

from __future__ import annotations

from .concurrency import CancelToken, checkpoint, race
from .observability import configure_logging, get_logger
from .retry import (
    INFINITE,
    BackoffConfig,
    BackoffSequence,
    BackoffStrategy,
    OnRetry,
    Outcome,
    OutcomeKind,
    aretry,
    capture,
    capture_async,
    delays,
    retry,
)

__all__ = [
    # Retry
    "BackoffConfig", "BackoffStrategy", "BackoffSequence", "INFINITE", "delays",
    "Outcome", "OutcomeKind", "capture", "capture_async",
    "retry", "aretry", "OnRetry",
    # Concurrency
    "CancelToken", "checkpoint", "race",
    # Observability
    "configure_logging", "get_logger",
]
