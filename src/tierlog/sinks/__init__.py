"""
Sinks module - Concrete loggers writing to streams, files and other loggers.
"""

from .file import FileLogger, JsonFileLogger
from .formatter import FormatterLogger
from .memory import MemoryLogger, NullLogger
from .stream import StderrLogger, StdoutLogger, StreamLogger
from .structured import StdlibLogger, StructlogLogger

__all__ = [
    "FileLogger",
    "FormatterLogger",
    "JsonFileLogger",
    "MemoryLogger",
    "NullLogger",
    "StderrLogger",
    "StdlibLogger",
    "StdoutLogger",
    "StreamLogger",
    "StructlogLogger",
]
