"""
Rendering of log records.

Canonical line format used by the file and stream sinks:

    <ISO-8601 timestamp>:<basename of source file>:<unqualified function name>:<line> <message>
"""

import json
import os
from datetime import datetime
from typing import Any

from .record import LogRecord

__all__ = [
    "format_header",
    "format_line",
    "record_to_dict",
    "record_to_json",
]


def format_header(timestamp: datetime, file_name: str, func_name: str, line: int) -> str:
    """Render the part of a line that precedes the message text.

    Example:
        >>> format_header(ts, "/src/app/main.py", "app.main.Worker.run", 42)
        '2026-10-18T09:15:02.120443+02:00:main.py:run:42 '
    """
    base = os.path.basename(file_name)
    short_func = func_name.rpartition(".")[2]
    return f"{timestamp.isoformat()}:{base}:{short_func}:{line} "


def format_line(record: LogRecord) -> str:
    """Render a full record as one canonical line, newline included."""
    header = format_header(record.timestamp, record.file_name, record.func_name, record.line)
    return f"{header}{record.message}\n"


def record_to_dict(record: LogRecord) -> dict[str, Any]:
    """Convert a record into a JSON-serializable dict."""
    return {
        "timestamp": record.timestamp.isoformat(),
        "severity": str(record.severity),
        "logger": record.logger_name,
        "file": record.file_name,
        "line": record.line,
        "function": record.func_name,
        "pretty_function": record.pretty_func_name,
        "module": record.module_name,
        "thread_id": record.thread_id,
        "message": record.message,
    }


def record_to_json(record: LogRecord) -> str:
    """Render a record as a single JSON line (no trailing newline)."""
    return json.dumps(record_to_dict(record), ensure_ascii=False)
