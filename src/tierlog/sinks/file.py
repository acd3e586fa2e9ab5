"""
File sinks — append log output to a file on disk.

The file is opened in append mode when the logger is built. Failing to
open it raises immediately; a file logger never degrades into a no-op.
"""

from pathlib import Path
from typing import Any

import structlog

from ..formatting import record_to_json
from ..levels import Severity
from ..logger import FatalAction, Logger
from ..record import LogRecord
from .stream import StreamLogger

logger = structlog.get_logger()

__all__ = [
    "FileLogger",
    "JsonFileLogger",
]


def _open_append(path: Path) -> Any:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return open(path, "a", encoding="utf-8")
    except OSError as e:
        logger.error("file_logger.open_failed", path=str(path), error=str(e))
        raise


class FileLogger(StreamLogger):
    """Logger appending canonical lines to a file.

    Args:
        path: File to append to. Parent directories are created.
        threshold: Lowest severity accepted. Defaults to INFO.
        name: Optional logger name.
        fatal_action: Callback run after a FATAL record is written.
        registry: Registry providing the global threshold.

    Raises:
        OSError: If the file cannot be opened for appending.
    """

    def __init__(
        self,
        path: str | Path,
        threshold: Severity | str | int = Severity.INFO,
        name: str = "",
        fatal_action: FatalAction | None = None,
        registry: Any = None,
    ) -> None:
        self.path = Path(path)
        super().__init__(
            _open_append(self.path),
            threshold=threshold,
            name=name,
            fatal_action=fatal_action,
            registry=registry,
        )

    @property
    def closed(self) -> bool:
        return self._stream is None or self._stream.closed

    def close(self) -> None:
        """Close the underlying file handle."""
        if self._stream is not None and not self._stream.closed:
            self._stream.close()

    def __repr__(self) -> str:
        return f"<FileLogger path='{self.path}' threshold={self.threshold}>"


class JsonFileLogger(Logger):
    """Logger appending one JSON object per record to a file.

    The phases are buffered and each record is written in one line on
    finish_message, which keeps the file valid JSONL.

    Raises:
        OSError: If the file cannot be opened for appending.
    """

    def __init__(
        self,
        path: str | Path,
        threshold: Severity | str | int = Severity.INFO,
        name: str = "",
        fatal_action: FatalAction | None = None,
        registry: Any = None,
    ) -> None:
        super().__init__(threshold=threshold, name=name, fatal_action=fatal_action, registry=registry)
        self.path = Path(path)
        self._file = _open_append(self.path)

    def write_record(self, record: LogRecord) -> None:
        self._file.write(record_to_json(record) + "\n")
        self._file.flush()

    def close(self) -> None:
        """Close the underlying file handle."""
        if not self._file.closed:
            self._file.close()

    def __repr__(self) -> str:
        return f"<JsonFileLogger path='{self.path}' threshold={self.threshold}>"
