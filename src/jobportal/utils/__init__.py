"""Shared utilities."""

from .logging import configure_logging, get_logger, log_transition

__all__ = [
    "configure_logging",
    "get_logger",
    "log_transition",
]
