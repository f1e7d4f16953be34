"""Concurrency primitives for retry sessions.

Pure asyncio/threading (Python 3.11+):
    - CancelToken: external cancellation signal with optional deadline
    - checkpoint: cooperative cancellation point for async loops
    - race: first awaitable to complete wins, the rest are cancelled

Example:
    >>> token = CancelToken(timeout=2.0)
    >>> fired = token.wait(0.5)          # blocks up to 0.5s
    >>> fired = await token.wait_async(0.5)
"""

from __future__ import annotations

from .task import CancelToken, checkpoint
from .wait import race, sleep_for

__all__ = [
    "CancelToken",
    "checkpoint",
    "race",
    "sleep_for",
]
