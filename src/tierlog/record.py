"""
Log records and call-site capture.

A LogRecord is built once per accepted log call and never mutated
afterwards; sinks only read it.
"""

import os
import sys
import threading
from dataclasses import dataclass, field
from datetime import datetime
from types import FrameType

from .levels import Severity

__all__ = [
    "CallSite",
    "LogRecord",
    "capture_call_site",
    "current_thread_id",
    "now",
]

# Frames from files inside this directory belong to tierlog itself
_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


@dataclass(frozen=True)
class CallSite:
    """Where a log call was made from.

    Attributes:
        file_name: Path of the source file.
        line: Line number of the call.
        func_name: Qualified function name (module.Class.function).
        pretty_func_name: Function name with its parameter list.
        module_name: Dotted module name.
    """

    file_name: str
    line: int
    func_name: str
    pretty_func_name: str
    module_name: str


@dataclass(frozen=True)
class LogRecord:
    """Immutable record of one logged message."""

    file_name: str
    line: int
    func_name: str
    pretty_func_name: str
    module_name: str
    severity: Severity
    timestamp: datetime
    thread_id: int
    message: str
    logger_name: str = field(default="", compare=False)

    @property
    def base_file_name(self) -> str:
        """Source file name without its directory."""
        return os.path.basename(self.file_name)

    @property
    def short_func_name(self) -> str:
        """Function name without module or class qualification."""
        return self.func_name.rpartition(".")[2]


def _is_internal(frame: FrameType) -> bool:
    filename = os.path.abspath(frame.f_code.co_filename)
    return filename.startswith(_PACKAGE_DIR + os.sep)


def _call_site_from_frame(frame: FrameType) -> CallSite:
    code = frame.f_code
    module_name = frame.f_globals.get("__name__", "")
    qualname = getattr(code, "co_qualname", code.co_name)
    func_name = f"{module_name}.{qualname}" if module_name else qualname

    argcount = code.co_argcount + code.co_kwonlyargcount
    params = list(code.co_varnames[:argcount])
    if code.co_flags & 0x04:  # CO_VARARGS
        params.append("*" + code.co_varnames[argcount])
        argcount += 1
    if code.co_flags & 0x08:  # CO_VARKEYWORDS
        params.append("**" + code.co_varnames[argcount])

    return CallSite(
        file_name=code.co_filename,
        line=frame.f_lineno,
        func_name=func_name,
        pretty_func_name=f"{func_name}({', '.join(params)})",
        module_name=module_name,
    )


def capture_call_site() -> CallSite:
    """Return the call site of the first frame outside tierlog.

    Walks up the stack past every frame whose source file lives inside
    the tierlog package, so convenience wrappers and composites do not
    show up as the origin of a message.
    """
    frame: FrameType | None = sys._getframe(1)
    fallback = frame
    while frame is not None and _is_internal(frame):
        frame = frame.f_back
    if frame is None:
        frame = fallback
    if frame is None:
        return CallSite("<unknown>", 0, "<unknown>", "<unknown>()", "")
    return _call_site_from_frame(frame)


def current_thread_id() -> int:
    """Identity of the calling thread."""
    return threading.get_ident()


def now() -> datetime:
    """Current wall-clock time as a timezone-aware local datetime."""
    return datetime.now().astimezone()
