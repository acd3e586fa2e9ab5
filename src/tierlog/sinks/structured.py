"""
Bridges into structlog and stdlib logging.

StructlogLogger hands each record to a structlog logger as an event, with
the call site and thread as key-value pairs. StdlibLogger does the same
for a stdlib logging.Logger, mapping severities onto its numeric scale.
"""

import logging
from typing import Any

import structlog

from ..levels import Severity, to_stdlib_level
from ..logger import FatalAction, Logger
from ..record import LogRecord

__all__ = [
    "StructlogLogger",
    "StdlibLogger",
]

# structlog only knows the stdlib level names; TRACE and FATAL fold into
# their nearest neighbours and keep their own name in the "severity" field
_STRUCTLOG_METHODS = {
    Severity.ALL: "debug",
    Severity.TRACE: "debug",
    Severity.INFO: "info",
    Severity.WARNING: "warning",
    Severity.ERROR: "error",
    Severity.CRITICAL: "critical",
    Severity.FATAL: "critical",
}


def _record_fields(record: LogRecord) -> dict[str, Any]:
    return {
        "severity": str(record.severity),
        "file": record.base_file_name,
        "function": record.short_func_name,
        "line": record.line,
        "module": record.module_name,
        "thread_id": record.thread_id,
        "logged_at": record.timestamp.isoformat(),
    }


class StructlogLogger(Logger):
    """Logger forwarding records to a structlog logger.

    Args:
        target: structlog (bound) logger. Defaults to structlog.get_logger(name).
    """

    def __init__(
        self,
        target: Any = None,
        threshold: Severity | str | int = Severity.INFO,
        name: str = "",
        fatal_action: FatalAction | None = None,
        registry: Any = None,
    ) -> None:
        super().__init__(threshold=threshold, name=name, fatal_action=fatal_action, registry=registry)
        self.target = target if target is not None else structlog.get_logger(name or "tierlog")

    def write_record(self, record: LogRecord) -> None:
        method = getattr(self.target, _STRUCTLOG_METHODS[record.severity])
        method(record.message, **_record_fields(record))


class StdlibLogger(Logger):
    """Logger forwarding records to a stdlib logging.Logger.

    Args:
        target: logging.Logger or logger name. Defaults to the "tierlog" logger.
    """

    def __init__(
        self,
        target: logging.Logger | str | None = None,
        threshold: Severity | str | int = Severity.INFO,
        name: str = "",
        fatal_action: FatalAction | None = None,
        registry: Any = None,
    ) -> None:
        super().__init__(threshold=threshold, name=name, fatal_action=fatal_action, registry=registry)
        if target is None or isinstance(target, str):
            target = logging.getLogger(target or "tierlog")
        self.target = target

    def write_record(self, record: LogRecord) -> None:
        level = to_stdlib_level(record.severity)
        if not self.target.isEnabledFor(level):
            return
        stdlib_record = self.target.makeRecord(
            self.target.name,
            level,
            record.file_name,
            record.line,
            record.message,
            None,
            None,
            func=record.short_func_name,
            extra={"severity": str(record.severity), "tierlog_thread_id": record.thread_id},
        )
        stdlib_record.created = record.timestamp.timestamp()
        self.target.handle(stdlib_record)
