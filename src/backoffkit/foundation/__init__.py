"""Foundation - errors, Result monad, and settings shared by the runtime."""

from .config import BackoffSettings, LoggingSettings, RetrySettings, clear_settings_cache, get_settings
from .errors import (
    BackoffError,
    DeadlineExceeded,
    Err,
    FatalError,
    Ok,
    Result,
    RetryCancelled,
    fatal,
    is_fatal,
    unwrap_fatal,
)

__all__ = [
    # Errors
    "BackoffError", "FatalError", "RetryCancelled", "DeadlineExceeded",
    "fatal", "is_fatal", "unwrap_fatal",
    "Result", "Ok", "Err",
    # Settings
    "BackoffSettings", "RetrySettings", "LoggingSettings", "get_settings", "clear_settings_cache",
]
