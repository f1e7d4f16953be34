"""Observability - stdlib logging setup for the backoffkit namespace."""

from .logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
