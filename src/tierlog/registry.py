"""
Logger Registry — default logger and global threshold.

A LoggerRegistry is a plain object that can be built and passed around
explicitly (Logger(registry=...)). Loggers that are not given one use the
process-wide instance returned by LoggerRegistry.get().

Lifecycle of the default logger:
- Starts unset.
- The first read that finds it unset builds a StderrLogger seeded with the
  registry's current global threshold, stores it and returns it.
- Either field can be reassigned at any time; the change applies to the
  next gating decision, never to records already written.
"""

import threading
from typing import Any, Callable

import structlog

from .levels import Severity
from .logger import Logger, validate_threshold

logger = structlog.get_logger()

__all__ = [
    "LoggerRegistry",
    "default_logger",
    "set_default_logger",
    "global_threshold",
    "set_global_threshold",
]

DefaultFactory = Callable[["LoggerRegistry"], Logger]


def _stderr_factory(registry: "LoggerRegistry") -> Logger:
    from .sinks.stream import StderrLogger

    return StderrLogger(threshold=registry.global_threshold, name="default", registry=registry)


class LoggerRegistry:
    """Holds one default logger and one global threshold.

    Usage:
        registry = LoggerRegistry(global_threshold=Severity.WARNING)
        app_log = FileLogger("app.log", registry=registry)

        # process-wide instance
        LoggerRegistry.get().global_threshold = Severity.ERROR
    """

    _instance: "LoggerRegistry | None" = None
    _instance_lock = threading.Lock()

    def __init__(
        self,
        global_threshold: Severity | str | int = Severity.ALL,
        default_logger: Logger | None = None,
        default_factory: DefaultFactory | None = None,
    ) -> None:
        self._global_threshold = validate_threshold(global_threshold)
        self._default_logger = default_logger
        self._default_factory = default_factory or _stderr_factory
        self._lock = threading.Lock()
        self.log = logger.bind(component="registry")

    @classmethod
    def get(cls) -> "LoggerRegistry":
        """Get or create the process-wide registry."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the process-wide registry (for testing)."""
        with cls._instance_lock:
            cls._instance = None

    @property
    def global_threshold(self) -> Severity:
        """Threshold every gating decision is checked against."""
        return self._global_threshold

    @global_threshold.setter
    def global_threshold(self, value: Severity | str | int) -> None:
        self._global_threshold = validate_threshold(value)
        self.log.debug("registry.global_threshold", threshold=str(self._global_threshold))

    @property
    def default_logger(self) -> Logger:
        """The default logger, built on first access if unset."""
        current = self._default_logger
        if current is not None:
            return current
        with self._lock:
            if self._default_logger is None:
                self._default_logger = self._default_factory(self)
                self.log.debug(
                    "registry.default_created",
                    logger=type(self._default_logger).__name__,
                    threshold=str(self._default_logger.threshold),
                )
            return self._default_logger

    @default_logger.setter
    def default_logger(self, value: Logger | None) -> None:
        # None returns the registry to the unset state
        with self._lock:
            self._default_logger = value

    @property
    def has_default_logger(self) -> bool:
        """True if a default logger is set (without building one)."""
        return self._default_logger is not None

    def __repr__(self) -> str:
        current: Any = self._default_logger
        return (
            f"<LoggerRegistry global_threshold={self._global_threshold} "
            f"default_logger={current!r}>"
        )


def default_logger() -> Logger:
    """Return the process-wide default logger."""
    return LoggerRegistry.get().default_logger


def set_default_logger(value: Logger | None) -> None:
    """Replace the process-wide default logger. None unsets it."""
    LoggerRegistry.get().default_logger = value


def global_threshold() -> Severity:
    """Return the process-wide global threshold."""
    return LoggerRegistry.get().global_threshold


def set_global_threshold(value: Severity | str | int) -> None:
    """Replace the process-wide global threshold."""
    LoggerRegistry.get().global_threshold = value
