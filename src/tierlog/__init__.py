"""
tierlog - Hierarchical, level-gated logging core.

Public API:
    Severity, should_log            — severities and the gating rule
    Logger, MessageSink             — base logger and the write protocol
    CompositeLogger, ArrayLogger    — fan-out to named children
    ThreadSafeLogger                — atomic messages across threads
    LoggerRegistry                  — default logger and global threshold
    log, trace, info, ...           — log through the default logger

Usage:
    import tierlog
    from tierlog.sinks import FileLogger

    tierlog.set_default_logger(FileLogger("app.log", threshold="trace"))
    tierlog.warning("disk at ", 91, "%")
"""

from typing import Any, Callable

from .composite import ArrayLogger, CompositeLogger, LoggerEntry
from .errors import (
    ConfigError,
    DuplicateLoggerError,
    FatalLogError,
    InvalidSeverityError,
    InvalidThresholdError,
    LoggerNotFoundError,
    MessageStateError,
    TierlogError,
)
from .levels import LEVELS, UNSPECIFIED, Severity, parse_severity, should_log
from .logger import Lazy, Logger, MessageSink, lazy
from .record import CallSite, LogRecord
from .registry import (
    LoggerRegistry,
    default_logger,
    global_threshold,
    set_default_logger,
    set_global_threshold,
)
from .threadsafe import ThreadSafeLogger

__version__ = "0.3.0"

__all__ = [
    "ArrayLogger",
    "CallSite",
    "CompositeLogger",
    "ConfigError",
    "DuplicateLoggerError",
    "FatalLogError",
    "InvalidSeverityError",
    "InvalidThresholdError",
    "LEVELS",
    "Lazy",
    "LogRecord",
    "Logger",
    "LoggerEntry",
    "LoggerNotFoundError",
    "LoggerRegistry",
    "MessageSink",
    "MessageStateError",
    "Severity",
    "ThreadSafeLogger",
    "TierlogError",
    "UNSPECIFIED",
    "default_logger",
    "global_threshold",
    "lazy",
    "parse_severity",
    "set_default_logger",
    "set_global_threshold",
    "should_log",
    "log",
    "logf",
    "trace",
    "info",
    "warning",
    "error",
    "critical",
    "fatal",
    "tracef",
    "infof",
    "warningf",
    "errorf",
    "criticalf",
    "fatalf",
]

Condition = bool | Callable[[], bool]


def log(severity: Severity | str | int, *args: Any, condition: Condition = True) -> Logger:
    """Log through the default logger. See Logger.log."""
    return default_logger().log(severity, *args, condition=condition)


def logf(severity: Severity | str | int, fmt: str, *args: Any, condition: Condition = True) -> Logger:
    """%-format and log through the default logger. See Logger.logf."""
    return default_logger().logf(severity, fmt, *args, condition=condition)


def trace(*args: Any, condition: Condition = True) -> Logger:
    return default_logger().log(Severity.TRACE, *args, condition=condition)


def info(*args: Any, condition: Condition = True) -> Logger:
    return default_logger().log(Severity.INFO, *args, condition=condition)


def warning(*args: Any, condition: Condition = True) -> Logger:
    return default_logger().log(Severity.WARNING, *args, condition=condition)


def error(*args: Any, condition: Condition = True) -> Logger:
    return default_logger().log(Severity.ERROR, *args, condition=condition)


def critical(*args: Any, condition: Condition = True) -> Logger:
    return default_logger().log(Severity.CRITICAL, *args, condition=condition)


def fatal(*args: Any, condition: Condition = True) -> Logger:
    return default_logger().log(Severity.FATAL, *args, condition=condition)


def tracef(fmt: str, *args: Any, condition: Condition = True) -> Logger:
    return default_logger().logf(Severity.TRACE, fmt, *args, condition=condition)


def infof(fmt: str, *args: Any, condition: Condition = True) -> Logger:
    return default_logger().logf(Severity.INFO, fmt, *args, condition=condition)


def warningf(fmt: str, *args: Any, condition: Condition = True) -> Logger:
    return default_logger().logf(Severity.WARNING, fmt, *args, condition=condition)


def errorf(fmt: str, *args: Any, condition: Condition = True) -> Logger:
    return default_logger().logf(Severity.ERROR, fmt, *args, condition=condition)


def criticalf(fmt: str, *args: Any, condition: Condition = True) -> Logger:
    return default_logger().logf(Severity.CRITICAL, fmt, *args, condition=condition)


def fatalf(fmt: str, *args: Any, condition: Condition = True) -> Logger:
    return default_logger().logf(Severity.FATAL, fmt, *args, condition=condition)
