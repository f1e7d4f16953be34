"""Error handling for backoffkit.

- BackoffError: base class for library errors
- FatalError/fatal/is_fatal/unwrap_fatal: mark and recognise stop-now errors
- RetryCancelled/DeadlineExceeded: cancellation causes reported by the driver
- Result/Ok/Err: monadic return type of the retry drivers
"""

from .errors import (
    BackoffError,
    DeadlineExceeded,
    FatalError,
    RetryCancelled,
    fatal,
    is_fatal,
    unwrap_fatal,
)
from .result import Err, Ok, Result

__all__ = [
    # Errors
    "BackoffError", "FatalError", "RetryCancelled", "DeadlineExceeded",
    "fatal", "is_fatal", "unwrap_fatal",
    # Result monad
    "Result", "Ok", "Err",
]
