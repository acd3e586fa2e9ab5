"""
Logging module - structlog setup for tierlog's own diagnostics.
"""

from .setup import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
