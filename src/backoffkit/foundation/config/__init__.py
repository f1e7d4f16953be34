"""Configuration management using pydantic-settings.

Provides environment-based defaults with type safety and validation.
"""

from .settings import (
    BackoffSettings,
    LoggingSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "BackoffSettings",
    "LoggingSettings",
    "RetrySettings",
    "clear_settings_cache",
    "get_settings",
]
