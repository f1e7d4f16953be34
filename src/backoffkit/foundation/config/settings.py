"""Environment-based configuration using pydantic-settings.

Provides process-wide defaults for backoff parameters and logging, read
from environment variables (and an optional .env file).

Example:
    >>> from backoffkit.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.max_delay
    30.0
    >>> settings.logging.level
    'WARNING'

    # Or with environment variables:
    # BACKOFFKIT_RETRY_INITIAL_DELAY=0.25
    # BACKOFFKIT_RETRY_MAX_RETRIES=5
    # BACKOFFKIT_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, NonNegativeFloat, NonNegativeInt, PositiveFloat, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrySettings(BaseSettings):
    """Default backoff parameters.

    Values here are validated strictly; BackoffConfig applies its own
    normalization on top when built with BackoffConfig.from_settings().
    """

    model_config = SettingsConfigDict(
        env_prefix="BACKOFFKIT_RETRY_",
        extra="ignore",
        allow_inf_nan=False,
    )

    initial_delay: PositiveFloat = Field(default=0.1, description="First retry delay in seconds")
    max_delay: PositiveFloat = Field(default=30.0, description="Maximum delay in seconds")
    multiplier: PositiveFloat = Field(default=2.0, description="Exponential growth factor")
    jitter_factor: NonNegativeFloat = Field(default=0.1, description="Symmetric jitter fraction")
    max_retries: NonNegativeInt | None = Field(default=None, description="Retry budget; unset = infinite")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BACKOFFKIT_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class BackoffSettings(BaseSettings):
    """Root settings for backoffkit.

    Loads configuration from environment variables with BACKOFFKIT_ prefix.
    Nested sections read their own prefixes (BACKOFFKIT_RETRY_, BACKOFFKIT_LOG_)
    or the nested form BACKOFFKIT_RETRY__MAX_DELAY.
    """

    model_config = SettingsConfigDict(
        env_prefix="BACKOFFKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Singleton pattern for settings
@lru_cache(maxsize=1)
def get_settings() -> BackoffSettings:
    """Get the global settings instance (cached)."""
    return BackoffSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
