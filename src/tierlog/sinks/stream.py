"""
Stream sinks — write canonical lines to a text stream.

Output is streamed phase by phase: the header is written on
begin_message, each content part as it arrives, and the newline plus a
flush on finish_message.
"""

import sys
from datetime import datetime
from typing import Any, TextIO

from ..errors import MessageStateError
from ..formatting import format_header, format_line
from ..levels import Severity
from ..logger import FatalAction, Logger
from ..record import LogRecord

__all__ = [
    "StreamLogger",
    "StdoutLogger",
    "StderrLogger",
]


class StreamLogger(Logger):
    """Logger writing canonical lines to a text stream.

    Args:
        stream: Writable text stream (needs write() and flush()).
        threshold: Lowest severity accepted. Defaults to INFO.
        name: Optional logger name.
        fatal_action: Callback run after a FATAL record is written.
        registry: Registry providing the global threshold.
    """

    def __init__(
        self,
        stream: TextIO | None,
        threshold: Severity | str | int = Severity.INFO,
        name: str = "",
        fatal_action: FatalAction | None = None,
        registry: Any = None,
    ) -> None:
        super().__init__(threshold=threshold, name=name, fatal_action=fatal_action, registry=registry)
        self._stream = stream
        self._in_message = False

    @property
    def stream(self) -> TextIO:
        """Stream written to."""
        if self._stream is None:
            raise ValueError(f"{type(self).__name__} has no stream")
        return self._stream

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
        if self._in_message:
            raise MessageStateError(
                f"{type(self).__name__} received begin_message while a message is open"
            )
        self.stream.write(format_header(timestamp, file_name, func_name, line))
        self._in_message = True

    def write_content(self, text: str) -> None:
        if not self._in_message:
            raise MessageStateError(
                f"{type(self).__name__} received write_content without begin_message"
            )
        self.stream.write(text)

    def finish_message(self) -> None:
        if not self._in_message:
            raise MessageStateError(
                f"{type(self).__name__} received finish_message without begin_message"
            )
        self._in_message = False
        stream = self.stream
        stream.write("\n")
        stream.flush()

    def abort_message(self) -> None:
        # Terminate the partial line so the next record starts clean
        if self._in_message:
            self._in_message = False
            self.stream.write("\n")
            self.stream.flush()

    def write_record(self, record: LogRecord) -> None:
        stream = self.stream
        stream.write(format_line(record))
        stream.flush()


class StdoutLogger(StreamLogger):
    """StreamLogger bound to sys.stdout (looked up at write time)."""

    def __init__(
        self,
        threshold: Severity | str | int = Severity.INFO,
        name: str = "",
        fatal_action: FatalAction | None = None,
        registry: Any = None,
    ) -> None:
        super().__init__(None, threshold=threshold, name=name, fatal_action=fatal_action, registry=registry)

    @property
    def stream(self) -> TextIO:
        return sys.stdout


class StderrLogger(StreamLogger):
    """StreamLogger bound to sys.stderr (looked up at write time)."""

    def __init__(
        self,
        threshold: Severity | str | int = Severity.INFO,
        name: str = "",
        fatal_action: FatalAction | None = None,
        registry: Any = None,
    ) -> None:
        super().__init__(None, threshold=threshold, name=name, fatal_action=fatal_action, registry=registry)

    @property
    def stream(self) -> TextIO:
        return sys.stderr
