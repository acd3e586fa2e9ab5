"""
Composite loggers — fan one message out to a collection of child loggers.

Two variants:
- CompositeLogger: children keyed by unique, non-empty names, kept sorted
  by name. Insert, remove and lookup are binary searches.
- ArrayLogger: children kept in insertion order. Names may repeat; remove
  and lookup act on the first match.

Fan-out rule: a child receives the phases of a message only if its own
threshold is <= the message severity. Children are not gated against the
global threshold again; the composite's own log() call already did that.
The receiving children are chosen at begin_message(), and the content and
finish phases go to that same selection in the same order. A child held
more than once streams the message once and gets a full replay of it at
finish for each further slot.

Composites take no locks. The message in progress is kept per thread, so
several threads can log through one composite whose children are
ThreadSafeLoggers. Wrapping the composite itself serializes whole
fan-outs instead.
"""

import threading
from abc import abstractmethod
from bisect import bisect_left
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterator

import structlog

from .errors import DuplicateLoggerError, LoggerNotFoundError, MessageStateError
from .levels import Severity
from .logger import FatalAction, Logger, MessageSink
from .record import LogRecord

logger = structlog.get_logger()

__all__ = [
    "ArrayLogger",
    "CompositeLogger",
    "LoggerEntry",
]


@dataclass(frozen=True)
class LoggerEntry:
    """A named child of a composite logger."""

    name: str
    logger: Any


def _check_child(child: Any) -> None:
    if not isinstance(child, MessageSink) or not hasattr(child, "threshold"):
        raise TypeError(
            f"Composite children must implement the write protocol and expose "
            f"a threshold, got {type(child).__name__}"
        )


class _CompositeBase(Logger):
    """Shared fan-out behaviour of the composite variants."""

    def __init__(
        self,
        threshold: Severity | str | int = Severity.ALL,
        name: str = "",
        fatal_action: FatalAction | None = None,
        registry: Any = None,
    ) -> None:
        super().__init__(threshold=threshold, name=name, fatal_action=fatal_action, registry=registry)
        self._entries: list[LoggerEntry] = []
        # The message in progress is per thread
        self._local = threading.local()
        self._diag = logger.bind(component="composite", composite=name or type(self).__name__)

    # -- Child collection --------------------------------------------------

    def entries(self) -> list[LoggerEntry]:
        """Return the (name, logger) entries in fan-out order."""
        return list(self._entries)

    def names(self) -> list[str]:
        """Return the child names in fan-out order."""
        return [entry.name for entry in self._entries]

    def children(self) -> list[Any]:
        """Return the child loggers in fan-out order."""
        return [entry.logger for entry in self._entries]

    def _not_found(self, name: str) -> LoggerNotFoundError:
        available = ", ".join(self.names()) if self._entries else "(none)"
        label = f"'{self.name}'" if self.name else type(self).__name__
        return LoggerNotFoundError(
            f"Composite {label} does not hold a logger named '{name}'. "
            f"Available loggers: {available}"
        )

    def __getitem__(self, name: str) -> Any:
        return self.lookup(name)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LoggerEntry]:
        return iter(list(self._entries))

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        try:
            self.lookup(name)
        except LoggerNotFoundError:
            return False
        return True

    @abstractmethod
    def insert(self, name: str, child: Any) -> None:
        """Add a child under a name."""

    @abstractmethod
    def remove(self, name: str) -> Any:
        """Remove a child by name and return it."""

    @abstractmethod
    def lookup(self, name: str) -> Any:
        """Return a child by name."""

    # -- Fan-out -----------------------------------------------------------

    def _select(self, severity: Severity) -> list[Any]:
        return [e.logger for e in self._entries if e.logger.threshold <= severity]

    @property
    def _delivery(self) -> "_Delivery | None":
        return getattr(self._local, "delivery", None)

    @_delivery.setter
    def _delivery(self, delivery: "_Delivery | None") -> None:
        self._local.delivery = delivery

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
        if self._delivery is not None:
            raise MessageStateError(
                f"Composite '{self.name}' received begin_message while a message is open"
            )
        header = (file_name, line, func_name, pretty_func_name, module_name, severity, thread_id, timestamp)
        order: list[tuple[Any, bool]] = []
        started: list[Any] = []
        try:
            for child in self._select(severity):
                # A child held twice streams once and is replayed at finish
                if any(child is s for s in started):
                    order.append((child, False))
                    continue
                child.begin_message(*header)
                started.append(child)
                order.append((child, True))
        except BaseException:
            self._abort_children(started)
            raise
        replays = len(started) < len(order)
        self._delivery = _Delivery(header, order, started, [] if replays else None)

    def write_content(self, text: str) -> None:
        delivery = self._delivery
        if delivery is None:
            raise MessageStateError(
                f"Composite '{self.name}' received write_content without begin_message"
            )
        for child in delivery.started:
            child.write_content(text)
        if delivery.parts is not None:
            delivery.parts.append(text)

    def finish_message(self) -> None:
        delivery = self._delivery
        if delivery is None:
            raise MessageStateError(
                f"Composite '{self.name}' received finish_message without begin_message"
            )
        self._delivery = None

        # Every child gets its finish call even if an earlier one failed,
        # so locks and buffers further down are released.
        first_error: Exception | None = None
        for child, streamed in delivery.order:
            try:
                if streamed:
                    child.finish_message()
                else:
                    _replay(child, delivery)
            except Exception as e:
                self._diag.warning("composite.child_finish_failed", error=str(e))
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error

    def abort_message(self) -> None:
        delivery = self._delivery
        self._delivery = None
        if delivery is None:
            return
        first_error = self._abort_children(delivery.started)
        if first_error is not None:
            raise first_error

    def _abort_children(self, children: list[Any]) -> Exception | None:
        """Abort every child, returning the first failure."""
        first_error: Exception | None = None
        for child in children:
            abort = getattr(child, "abort_message", None)
            if abort is None:
                continue
            try:
                abort()
            except Exception as e:
                self._diag.warning("composite.child_abort_failed", error=str(e))
                if first_error is None:
                    first_error = e
        return first_error

    def write_record(self, record: LogRecord) -> None:
        """Deliver a complete record to every child whose threshold admits it."""
        self.begin_message(
            record.file_name,
            record.line,
            record.func_name,
            record.pretty_func_name,
            record.module_name,
            record.severity,
            record.thread_id,
            record.timestamp,
        )
        try:
            self.write_content(record.message)
        except BaseException:
            self.abort_message()
            raise
        self.finish_message()

    def close(self) -> None:
        """Close every child that can be closed."""
        for entry in self._entries:
            close = getattr(entry.logger, "close", None)
            if close is not None:
                close()

    def __repr__(self) -> str:
        name = f" '{self.name}'" if self.name else ""
        return f"<{type(self).__name__}{name} threshold={self.threshold} children={self.names()}>"


@dataclass
class _Delivery:
    """A message in progress on one thread."""

    header: tuple
    order: list[tuple[Any, bool]]
    started: list[Any]
    # Buffered parts, kept only when some child is replayed
    parts: list[str] | None


def _replay(child: Any, delivery: _Delivery) -> None:
    child.begin_message(*delivery.header)
    try:
        for part in delivery.parts or []:
            child.write_content(part)
    except BaseException:
        abort = getattr(child, "abort_message", None)
        if abort is not None:
            abort()
        raise
    child.finish_message()


class CompositeLogger(_CompositeBase):
    """Fan-out logger with uniquely named children kept sorted by name.

    Children can themselves be composites, which builds a tree:

        root = CompositeLogger(threshold=Severity.TRACE)
        node = CompositeLogger(threshold=Severity.WARNING)
        root.insert("node", node)
        root.insert("console", StderrLogger(threshold=Severity.TRACE))
        node.insert("errors", FileLogger("errors.log", threshold=Severity.ERROR))

    Example:
        >>> composite.insert("file", file_logger)
        >>> composite.remove("file") is file_logger
        True
    """

    def __init__(
        self,
        threshold: Severity | str | int = Severity.ALL,
        name: str = "",
        fatal_action: FatalAction | None = None,
        registry: Any = None,
    ) -> None:
        super().__init__(threshold=threshold, name=name, fatal_action=fatal_action, registry=registry)
        # Parallel to _entries, used for the binary searches
        self._names: list[str] = []

    def _index(self, name: str) -> int:
        idx = bisect_left(self._names, name)
        if idx < len(self._names) and self._names[idx] == name:
            return idx
        return -1

    def insert(self, name: str, child: Any) -> None:
        """Insert a child under a unique name.

        Args:
            name: Non-empty name, unique within this composite.
            child: Logger (or any write-protocol sink with a threshold).

        Raises:
            DuplicateLoggerError: If name is empty or already present.
                The composite is left unchanged.
            TypeError: If child does not implement the write protocol.
        """
        if not name:
            raise DuplicateLoggerError(
                "A logger must have a non-empty name to be inserted into a CompositeLogger"
            )
        _check_child(child)
        idx = bisect_left(self._names, name)
        if idx < len(self._names) and self._names[idx] == name:
            raise DuplicateLoggerError(
                f"This CompositeLogger already holds a logger named '{name}'"
            )
        self._names.insert(idx, name)
        self._entries.insert(idx, LoggerEntry(name, child))
        self._diag.debug("composite.insert", child=name, count=len(self._entries))

    def remove(self, name: str) -> Any:
        """Remove the child with the given name and return it.

        Raises:
            LoggerNotFoundError: If no child has this name.
        """
        idx = self._index(name)
        if idx < 0:
            raise self._not_found(name)
        del self._names[idx]
        entry = self._entries.pop(idx)
        self._diag.debug("composite.remove", child=name, count=len(self._entries))
        return entry.logger

    def lookup(self, name: str) -> Any:
        """Return the child with the given name.

        Raises:
            LoggerNotFoundError: If no child has this name.
        """
        idx = self._index(name)
        if idx < 0:
            raise self._not_found(name)
        return self._entries[idx].logger


class ArrayLogger(_CompositeBase):
    """Fan-out logger that keeps children in insertion order.

    Duplicate and empty names are allowed. remove() and lookup() act on
    the first child with a matching name and take linear time.
    """

    def insert(self, name: str, child: Any) -> None:
        """Append a child. The name does not need to be unique."""
        _check_child(child)
        self._entries.append(LoggerEntry(name, child))
        self._diag.debug("array.insert", child=name, count=len(self._entries))

    def _first(self, name: str) -> int:
        for idx, entry in enumerate(self._entries):
            if entry.name == name:
                return idx
        return -1

    def remove(self, name: str) -> Any:
        """Remove the first child with the given name and return it.

        Raises:
            LoggerNotFoundError: If no child has this name.
        """
        idx = self._first(name)
        if idx < 0:
            raise self._not_found(name)
        entry = self._entries.pop(idx)
        self._diag.debug("array.remove", child=name, count=len(self._entries))
        return entry.logger

    def lookup(self, name: str) -> Any:
        """Return the first child with the given name.

        Raises:
            LoggerNotFoundError: If no child has this name.
        """
        idx = self._first(name)
        if idx < 0:
            raise self._not_found(name)
        return self._entries[idx].logger
