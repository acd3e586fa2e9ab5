"""
ThreadSafeLogger — serializes whole messages onto a destination logger.

The lock is taken in begin_message() and released in finish_message()
(or abort_message()), so the content parts of two messages written from
different threads never interleave. The lock is reentrant, so a nested
log call made from inside a phase on the same thread reaches the
destination (which rejects it with MessageStateError) instead of
deadlocking.

Threshold and fatal-action accessors go straight to the destination and
do not take the lock.
"""

import threading
from datetime import datetime
from typing import Any

from .levels import Severity
from .logger import FatalAction, Logger
from .record import LogRecord

__all__ = ["ThreadSafeLogger"]


class ThreadSafeLogger(Logger):
    """Wraps a destination logger and makes each message atomic.

    Args:
        destination: Logger receiving the serialized phases.
        name: Optional name of the wrapper. Defaults to the destination's name.
    """

    def __init__(self, destination: Logger, name: str | None = None) -> None:
        # Logger.__init__ is not called: threshold, fatal action and registry
        # all belong to the destination
        self.destination = destination
        self.name = destination.name if name is None else name
        self._registry = None
        self._pending = None
        self._lock = threading.RLock()

    # Threshold and fatal action live on the destination

    @property
    def threshold(self) -> Severity:
        return self.destination.threshold

    @threshold.setter
    def threshold(self, value: Severity | str | int) -> None:
        self.destination.threshold = value

    @property
    def fatal_action(self) -> FatalAction:
        return self.destination.fatal_action

    @fatal_action.setter
    def fatal_action(self, action: FatalAction | None) -> None:
        self.destination.set_fatal_action(action)

    def set_fatal_action(self, action: FatalAction | None) -> None:
        self.destination.set_fatal_action(action)

    @property
    def registry(self) -> Any:
        return self.destination.registry

    @registry.setter
    def registry(self, registry: Any) -> None:
        self.destination.registry = registry

    # -- Write protocol ----------------------------------------------------

    def begin_message(
        self,
        file_name: str,
        line: int,
        func_name: str,
        pretty_func_name: str,
        module_name: str,
        severity: Severity,
        thread_id: int,
        timestamp: datetime,
    ) -> None:
        self._lock.acquire()
        try:
            self.destination.begin_message(
                file_name,
                line,
                func_name,
                pretty_func_name,
                module_name,
                severity,
                thread_id,
                timestamp,
            )
        except BaseException:
            self._lock.release()
            raise

    def write_content(self, text: str) -> None:
        self.destination.write_content(text)

    def finish_message(self) -> None:
        try:
            self.destination.finish_message()
        finally:
            self._lock.release()

    def abort_message(self) -> None:
        try:
            abort = getattr(self.destination, "abort_message", None)
            if abort is not None:
                abort()
        finally:
            self._lock.release()

    def write_record(self, record: LogRecord) -> None:
        with self._lock:
            self.destination.write_record(record)

    def close(self) -> None:
        with self._lock:
            self.destination.close()

    def __repr__(self) -> str:
        return f"<ThreadSafeLogger -> {self.destination!r}>"
