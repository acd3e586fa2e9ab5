"""
In-memory sinks: a capturing logger for tests and a logger that discards everything.
"""

from datetime import datetime
from typing import Any

from ..levels import Severity
from ..logger import FatalAction, Logger
from ..record import LogRecord

__all__ = [
    "MemoryLogger",
    "NullLogger",
]


class MemoryLogger(Logger):
    """Logger that keeps every record in memory.

    Besides the finished records, the raw phase calls are kept in
    `events` as tuples ("begin", severity), ("content", text), ("finish",)
    and ("abort",), so tests can check the write protocol itself.

    Usage:
        mem = MemoryLogger(threshold=Severity.TRACE)
        mem.warning("disk at ", 91, "%")
        assert mem.messages == ["disk at 91%"]
    """

    def __init__(
        self,
        threshold: Severity | str | int = Severity.INFO,
        name: str = "",
        fatal_action: FatalAction | None = None,
        registry: Any = None,
    ) -> None:
        super().__init__(threshold=threshold, name=name, fatal_action=fatal_action, registry=registry)
        self.records: list[LogRecord] = []
        self.events: list[tuple[Any, ...]] = []

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
        super().begin_message(
            file_name, line, func_name, pretty_func_name, module_name, severity, thread_id, timestamp
        )
        self.events.append(("begin", severity))

    def write_content(self, text: str) -> None:
        super().write_content(text)
        self.events.append(("content", text))

    def finish_message(self) -> None:
        super().finish_message()
        self.events.append(("finish",))

    def abort_message(self) -> None:
        super().abort_message()
        self.events.append(("abort",))

    def write_record(self, record: LogRecord) -> None:
        self.records.append(record)

    @property
    def messages(self) -> list[str]:
        """Message texts of the captured records, oldest first."""
        return [r.message for r in self.records]

    @property
    def last(self) -> LogRecord | None:
        """Most recent record, or None."""
        return self.records[-1] if self.records else None

    def clear(self) -> None:
        """Forget captured records and events."""
        self.records.clear()
        self.events.clear()

    def __len__(self) -> int:
        return len(self.records)


class NullLogger(Logger):
    """Logger that accepts messages and discards them.

    Its default fatal action does nothing, so a FATAL message sent here
    never raises.
    """

    def __init__(
        self,
        threshold: Severity | str | int = Severity.INFO,
        name: str = "",
        fatal_action: FatalAction | None = None,
        registry: Any = None,
    ) -> None:
        super().__init__(
            threshold=threshold,
            name=name,
            fatal_action=fatal_action or _ignore_fatal,
            registry=registry,
        )

    def set_fatal_action(self, action: FatalAction | None) -> None:
        self._fatal_action = action or _ignore_fatal

    def begin_message(self, *args: Any) -> None:
        pass

    def write_content(self, text: str) -> None:
        pass

    def finish_message(self) -> None:
        pass

    def abort_message(self) -> None:
        pass

    def write_record(self, record: LogRecord) -> None:
        pass


def _ignore_fatal() -> None:
    pass
