"""
Logger base class and the three-phase write protocol.

Every message that passes the gate is written in three phases:

    begin_message(...)     -> header: call site, severity, thread, timestamp
    write_content(text)    -> zero or more parts of the message body
    finish_message()       -> commit the record

Anything implementing these three methods is a valid sink (see
MessageSink). The Logger base class buffers the phases and hands a
complete LogRecord to write_record() on finish; sinks that want
incremental I/O override the phases directly.

Invariants:
- The gate is evaluated once per log call, before any argument is rendered.
- For FATAL records the fatal action runs after finish_message(), and it
  still runs when finish_message() raised, but not when begin_message() did.
- Logger itself holds no lock. Concurrent multi-part messages on the same
  logger need ThreadSafeLogger.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

from .errors import FatalLogError, InvalidSeverityError, InvalidThresholdError, MessageStateError
from .levels import UNSPECIFIED, Severity, parse_severity, should_log
from .record import CallSite, LogRecord, capture_call_site, current_thread_id, now

if TYPE_CHECKING:
    from .registry import LoggerRegistry

__all__ = [
    "FatalAction",
    "Lazy",
    "Logger",
    "MessageSink",
    "lazy",
    "validate_threshold",
]

FatalAction = Callable[[], None]


@runtime_checkable
class MessageSink(Protocol):
    """Capability required from anything that receives log messages."""

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
        """Start a message. No content has been written yet."""

    def write_content(self, text: str) -> None:
        """Append a part of the message body, without adding separators."""

    def finish_message(self) -> None:
        """Commit the message."""


class Lazy:
    """Log argument evaluated only when the message passes the gate.

    Usage:
        log.trace("state: ", lazy(lambda: expensive_dump(state)))
    """

    __slots__ = ("_func",)

    def __init__(self, func: Callable[[], Any]) -> None:
        self._func = func

    def __call__(self) -> Any:
        return self._func()

    def __repr__(self) -> str:
        return f"<Lazy {self._func!r}>"


def lazy(func: Callable[[], Any]) -> Lazy:
    """Wrap a zero-argument callable as a lazily evaluated log argument."""
    return Lazy(func)


def _resolve(value: Any) -> Any:
    return value() if isinstance(value, Lazy) else value


def _check_condition(condition: "bool | Callable[[], bool]") -> bool:
    if callable(condition):
        return bool(condition())
    return bool(condition)


def validate_threshold(value: Any) -> Severity:
    """Check that a value is usable as a logger threshold.

    OFF is a legal threshold; UNSPECIFIED and None are not.

    Raises:
        InvalidThresholdError: If the value is not a concrete severity.
    """
    if value is UNSPECIFIED or value is None:
        raise InvalidThresholdError(
            "A logger threshold must be a concrete severity, got UNSPECIFIED"
        )
    try:
        return parse_severity(value)
    except ValueError as e:
        raise InvalidThresholdError(str(e)) from None


def _validate_message_severity(value: Any) -> Severity:
    if value is UNSPECIFIED or value is None:
        raise InvalidSeverityError("Cannot log a message with UNSPECIFIED severity")
    try:
        severity = parse_severity(value)
    except ValueError as e:
        raise InvalidSeverityError(str(e)) from None
    if severity == Severity.OFF:
        raise InvalidSeverityError("OFF is a threshold, not a message severity")
    return severity


@dataclass
class _PendingMessage:
    """Header and body parts of the message being written."""

    file_name: str
    line: int
    func_name: str
    pretty_func_name: str
    module_name: str
    severity: Severity
    thread_id: int
    timestamp: datetime
    parts: list[str]


class Logger(ABC):
    """Abstract base for every logger.

    Subclasses implement write_record(), or override the three phases for
    streaming output.

    Args:
        threshold: Lowest severity this logger accepts. Defaults to INFO.
        name: Optional name, used in diagnostics and records.
        fatal_action: Callback run after a FATAL record is written.
            Defaults to raising FatalLogError.
        registry: Registry providing the global threshold. Defaults to the
            process-wide registry.
    """

    def __init__(
        self,
        threshold: Severity | str | int = Severity.INFO,
        name: str = "",
        fatal_action: FatalAction | None = None,
        registry: "LoggerRegistry | None" = None,
    ) -> None:
        self.name = name
        self._threshold = validate_threshold(threshold)
        self._fatal_action: FatalAction = fatal_action or self._raise_fatal
        self._registry = registry
        self._pending: _PendingMessage | None = None

    # -- Configuration -----------------------------------------------------

    @property
    def threshold(self) -> Severity:
        """Lowest severity this logger accepts."""
        return self._threshold

    @threshold.setter
    def threshold(self, value: Severity | str | int) -> None:
        self._threshold = validate_threshold(value)

    @property
    def fatal_action(self) -> FatalAction:
        """Callback run after a FATAL record has been written."""
        return self._fatal_action

    @fatal_action.setter
    def fatal_action(self, action: FatalAction | None) -> None:
        self.set_fatal_action(action)

    def set_fatal_action(self, action: FatalAction | None) -> None:
        """Replace the fatal action. None restores the default, which raises FatalLogError."""
        self._fatal_action = action or self._raise_fatal

    def _raise_fatal(self) -> None:
        label = f" by logger '{self.name}'" if self.name else ""
        raise FatalLogError(f"A fatal log message was logged{label}", logger_name=self.name)

    @property
    def registry(self) -> "LoggerRegistry":
        """Registry consulted for the global threshold."""
        if self._registry is not None:
            return self._registry
        from .registry import LoggerRegistry

        return LoggerRegistry.get()

    @registry.setter
    def registry(self, registry: "LoggerRegistry | None") -> None:
        self._registry = registry

    def is_enabled_for(self, severity: Severity) -> bool:
        """Return True if a message at `severity` would pass the gate."""
        return should_log(
            parse_severity(severity), self.threshold, self.registry.global_threshold
        )

    # -- Entry points ------------------------------------------------------

    def log(
        self,
        severity: Severity | str | int,
        *args: Any,
        condition: "bool | Callable[[], bool]" = True,
        call_site: CallSite | None = None,
    ) -> "Logger":
        """Log the string forms of `args`, written back to back as message parts.

        Nothing in `args` is rendered, and no Lazy argument or callable
        condition is evaluated, unless the gate is open.

        Args:
            severity: Severity of the message. OFF is rejected.
            *args: Message parts. Lazy parts are resolved on demand.
            condition: Extra guard, a bool or a zero-argument callable.
            call_site: Explicit origin of the call. Captured from the stack
                when omitted.

        Returns:
            This logger, for chaining.

        Raises:
            InvalidSeverityError: If severity is OFF or UNSPECIFIED.
        """
        severity = _validate_message_severity(severity)
        if not should_log(severity, self.threshold, self.registry.global_threshold):
            return self
        if not _check_condition(condition):
            return self

        parts = [str(_resolve(arg)) for arg in args]
        self._emit(severity, parts, call_site or capture_call_site())
        return self

    def logf(
        self,
        severity: Severity | str | int,
        fmt: str,
        *args: Any,
        condition: "bool | Callable[[], bool]" = True,
        call_site: CallSite | None = None,
    ) -> "Logger":
        """Log a %-style formatted message. Formatting happens only when the gate is open."""
        severity = _validate_message_severity(severity)
        if not should_log(severity, self.threshold, self.registry.global_threshold):
            return self
        if not _check_condition(condition):
            return self

        values = tuple(_resolve(arg) for arg in args)
        text = fmt % values if values else fmt
        self._emit(severity, [text], call_site or capture_call_site())
        return self

    def _emit(self, severity: Severity, parts: list[str], site: CallSite) -> None:
        """Run the three phases for one accepted message."""
        self.begin_message(
            site.file_name,
            site.line,
            site.func_name,
            site.pretty_func_name,
            site.module_name,
            severity,
            current_thread_id(),
            now(),
        )
        # The fatal action runs only once the header has been written
        try:
            try:
                for part in parts:
                    self.write_content(part)
            except BaseException:
                self.abort_message()
                raise
            self.finish_message()
        finally:
            if severity == Severity.FATAL:
                self.fatal_action()

    # -- Severity shortcuts ------------------------------------------------

    def trace(self, *args: Any, condition: "bool | Callable[[], bool]" = True) -> "Logger":
        return self.log(Severity.TRACE, *args, condition=condition)

    def info(self, *args: Any, condition: "bool | Callable[[], bool]" = True) -> "Logger":
        return self.log(Severity.INFO, *args, condition=condition)

    def warning(self, *args: Any, condition: "bool | Callable[[], bool]" = True) -> "Logger":
        return self.log(Severity.WARNING, *args, condition=condition)

    def error(self, *args: Any, condition: "bool | Callable[[], bool]" = True) -> "Logger":
        return self.log(Severity.ERROR, *args, condition=condition)

    def critical(self, *args: Any, condition: "bool | Callable[[], bool]" = True) -> "Logger":
        return self.log(Severity.CRITICAL, *args, condition=condition)

    def fatal(self, *args: Any, condition: "bool | Callable[[], bool]" = True) -> "Logger":
        return self.log(Severity.FATAL, *args, condition=condition)

    def tracef(self, fmt: str, *args: Any, condition: "bool | Callable[[], bool]" = True) -> "Logger":
        return self.logf(Severity.TRACE, fmt, *args, condition=condition)

    def infof(self, fmt: str, *args: Any, condition: "bool | Callable[[], bool]" = True) -> "Logger":
        return self.logf(Severity.INFO, fmt, *args, condition=condition)

    def warningf(self, fmt: str, *args: Any, condition: "bool | Callable[[], bool]" = True) -> "Logger":
        return self.logf(Severity.WARNING, fmt, *args, condition=condition)

    def errorf(self, fmt: str, *args: Any, condition: "bool | Callable[[], bool]" = True) -> "Logger":
        return self.logf(Severity.ERROR, fmt, *args, condition=condition)

    def criticalf(self, fmt: str, *args: Any, condition: "bool | Callable[[], bool]" = True) -> "Logger":
        return self.logf(Severity.CRITICAL, fmt, *args, condition=condition)

    def fatalf(self, fmt: str, *args: Any, condition: "bool | Callable[[], bool]" = True) -> "Logger":
        return self.logf(Severity.FATAL, fmt, *args, condition=condition)

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
        """Start buffering a message."""
        if self._pending is not None:
            raise MessageStateError(
                f"Logger '{self.name}' received begin_message while a message is open"
            )
        self._pending = _PendingMessage(
            file_name=file_name,
            line=line,
            func_name=func_name,
            pretty_func_name=pretty_func_name,
            module_name=module_name,
            severity=severity,
            thread_id=thread_id,
            timestamp=timestamp,
            parts=[],
        )

    def write_content(self, text: str) -> None:
        """Buffer a part of the message body."""
        if self._pending is None:
            raise MessageStateError(
                f"Logger '{self.name}' received write_content without begin_message"
            )
        self._pending.parts.append(text)

    def finish_message(self) -> None:
        """Build the record from the buffered phases and pass it to write_record()."""
        pending = self._pending
        if pending is None:
            raise MessageStateError(
                f"Logger '{self.name}' received finish_message without begin_message"
            )
        self._pending = None
        self.write_record(
            LogRecord(
                file_name=pending.file_name,
                line=pending.line,
                func_name=pending.func_name,
                pretty_func_name=pending.pretty_func_name,
                module_name=pending.module_name,
                severity=pending.severity,
                timestamp=pending.timestamp,
                thread_id=pending.thread_id,
                message="".join(pending.parts),
                logger_name=self.name,
            )
        )

    def abort_message(self) -> None:
        """Drop the message being written. Called when rendering a part failed."""
        self._pending = None

    @abstractmethod
    def write_record(self, record: LogRecord) -> None:
        """Write one complete record to the sink."""

    def close(self) -> None:
        """Release resources held by the sink. No-op by default."""

    def __enter__(self) -> "Logger":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        name = f" '{self.name}'" if self.name else ""
        return f"<{type(self).__name__}{name} threshold={self.threshold}>"
