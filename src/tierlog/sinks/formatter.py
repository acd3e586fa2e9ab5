"""
FormatterLogger — a sink assembled from three callables.

    write(text)         -> where rendered output goes
    formatter(record)   -> how a record is rendered
    record_filter(rec)  -> whether a record is written at all
"""

from typing import Any, Callable

from ..formatting import format_line
from ..levels import Severity
from ..logger import FatalAction, Logger
from ..record import LogRecord

__all__ = ["FormatterLogger"]

Formatter = Callable[[LogRecord], str]
RecordFilter = Callable[[LogRecord], bool]


class FormatterLogger(Logger):
    """Logger rendering records with a formatter and passing them to a write callable.

    Example:
        >>> lines = []
        >>> log = FormatterLogger(lines.append, threshold=Severity.TRACE)
        >>> log.info("Hello")
        >>> "Hello" in lines[0]
        True
    """

    def __init__(
        self,
        write: Callable[[str], Any],
        formatter: Formatter = format_line,
        record_filter: RecordFilter | None = None,
        threshold: Severity | str | int = Severity.INFO,
        name: str = "",
        fatal_action: FatalAction | None = None,
        registry: Any = None,
    ) -> None:
        super().__init__(threshold=threshold, name=name, fatal_action=fatal_action, registry=registry)
        self.write = write
        self.formatter = formatter
        self.record_filter = record_filter

    def write_record(self, record: LogRecord) -> None:
        if self.record_filter is not None and not self.record_filter(record):
            return
        self.write(self.formatter(record))
