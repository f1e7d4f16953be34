"""Backoff schedules and retry drivers.

Example:
    >>> from backoffkit.runtime.retry import BackoffConfig, retry
    >>> from backoffkit.foundation.errors import fatal
    >>>
    >>> def call():
    ...     resp = client.get(url)
    ...     if resp.status_code == 404:
    ...         raise fatal(LookupError(url))
    ...     resp.raise_for_status()
    ...     return resp.text
    >>>
    >>> result = retry(call, BackoffConfig(initial_delay=0.2, max_retries=4))
"""

from .backoff import (
    INFINITE,
    BackoffConfig,
    BackoffSequence,
    BackoffStrategy,
    delays,
)
from .outcome import Outcome, OutcomeKind, capture, capture_async
from .policy import OnRetry, aretry, retry

__all__ = [
    # Schedules
    "BackoffConfig",
    "BackoffStrategy",
    "BackoffSequence",
    "INFINITE",
    "delays",
    # Outcomes
    "Outcome",
    "OutcomeKind",
    "capture",
    "capture_async",
    # Drivers
    "retry",
    "aretry",
    "OnRetry",
]
