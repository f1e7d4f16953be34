"""backoffkit - exponential/constant backoff sequences and retry drivers.

Quick Start:
    >>> from backoffkit import BackoffConfig, retry, fatal
    >>>
    >>> def fetch():
    ...     resp = httpx.get("https://api.example.com/data")
    ...     if resp.status_code == 401:
    ...         raise fatal(PermissionError("unauthorized"))  # stop retrying
    ...     resp.raise_for_status()                           # retry on failure
    ...     return resp.json()
    >>>
    >>> result = retry(fetch, BackoffConfig(max_retries=5))
    >>> data, error = result.to_tuple()

Iterating delays directly:
    >>> from backoffkit import delays
    >>> for delay in delays(BackoffConfig(max_delay=5.0, max_retries=10)):
    ...     time.sleep(delay)
    ...     if try_operation():
    ...         break

Presets:
    >>> BackoffConfig.exponential()        # 100ms doubling to 30s, 10% jitter
    >>> BackoffConfig.constant(0.5)        # 500ms every time, no jitter

Cancellation:
    >>> token = CancelToken(timeout=30.0)
    >>> result = await aretry(fetch_async, BackoffConfig(max_retries=5), cancel=token)
    >>> isinstance(result.err(), DeadlineExceeded)
"""

from __future__ import annotations

__version__ = "0.1.0"

from .foundation import (
    BackoffError,
    BackoffSettings,
    DeadlineExceeded,
    Err,
    FatalError,
    LoggingSettings,
    Ok,
    Result,
    RetryCancelled,
    RetrySettings,
    clear_settings_cache,
    fatal,
    get_settings,
    is_fatal,
    unwrap_fatal,
)
from .runtime import (
    INFINITE,
    BackoffConfig,
    BackoffSequence,
    BackoffStrategy,
    CancelToken,
    OnRetry,
    Outcome,
    OutcomeKind,
    aretry,
    capture,
    capture_async,
    configure_logging,
    delays,
    retry,
)

__all__ = [
    "__version__",
    # Schedules
    "BackoffConfig", "BackoffStrategy", "BackoffSequence", "INFINITE", "delays",
    # Drivers
    "retry", "aretry", "OnRetry", "Outcome", "OutcomeKind", "capture", "capture_async",
    # Cancellation
    "CancelToken",
    # Errors
    "BackoffError", "FatalError", "RetryCancelled", "DeadlineExceeded",
    "fatal", "is_fatal", "unwrap_fatal",
    "Result", "Ok", "Err",
    # Settings / logging
    "BackoffSettings", "RetrySettings", "LoggingSettings", "get_settings", "clear_settings_cache",
    "configure_logging",
]
