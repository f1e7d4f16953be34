"""Logging setup for backoffkit.

The library logs through stdlib loggers under the "backoffkit" namespace
(retry decisions at DEBUG) and installs no handlers on import. Applications
that want to see those records call configure_logging() once at startup.

Example:
    >>> configure_logging("DEBUG")
    >>> retry(fetch, BackoffConfig(max_retries=3))
    # => 2024-01-03 10:30:45 DEBUG backoffkit.retry Retry 1/3 in 0.104s after ConnectError: ...
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOGGER_NAME = "backoffkit"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_HANDLER_ATTR = "_backoffkit_handler"


def configure_logging(
    level: str | int | None = None,
    *,
    stream: TextIO | None = None,
    fmt: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Configure the backoffkit logger.

    Replaces any handler previously installed by this function, so calling
    it again only changes level/stream.

    Args:
        level: Minimum level; default from BACKOFFKIT_LOG_LEVEL settings
        stream: Output stream (default: stderr)
        fmt: logging.Formatter format string

    Returns:
        The configured "backoffkit" logger
    """
    if level is None:
        from backoffkit.foundation.config import get_settings
        level = get_settings().logging.level

    level_int = level if isinstance(level, int) else getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level_int)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_ATTR, False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    setattr(handler, _HANDLER_ATTR, True)
    logger.addHandler(handler)
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger inside the backoffkit namespace."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)
