"""
Configuration module for tierlog.

Exports the main components for convenient imports.
"""

from .builder import build_logger, configure
from .loader import load_config
from .schema import DiagnosticsConfig, LoggingConfig, SinkConfig

__all__ = [
    "build_logger",
    "configure",
    "load_config",
    "DiagnosticsConfig",
    "LoggingConfig",
    "SinkConfig",
]
