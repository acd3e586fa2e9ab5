"""
Severity levels and the gating policy.

Severities form a totally ordered integer scale with gaps left between
the members so new levels can be slotted in later:

    all      (1)   -> lowest assignable threshold, lets everything through
    trace    (32)
    info     (64)
    warning  (96)
    error    (128)
    critical (160)
    fatal    (192) -> runs the logger's fatal action after the record is written
    off      (255) -> threshold only; never matches

UNSPECIFIED is not a severity. It marks "no level chosen" and is rejected
wherever a concrete threshold is required.
"""

import logging
from enum import IntEnum

__all__ = [
    "Severity",
    "UNSPECIFIED",
    "LEVELS",
    "should_log",
    "parse_severity",
    "to_stdlib_level",
]


class Severity(IntEnum):
    """Ordered log severity."""

    ALL = 1
    TRACE = 32
    INFO = 64
    WARNING = 96
    ERROR = 128
    CRITICAL = 160
    FATAL = 192
    OFF = 255

    def __str__(self) -> str:
        return self.name.lower()

    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)


class _Unspecified:
    """Sentinel for "no severity chosen"."""

    _instance: "_Unspecified | None" = None

    def __new__(cls) -> "_Unspecified":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSPECIFIED"

    def __bool__(self) -> bool:
        return False


UNSPECIFIED = _Unspecified()

# Every severity in ascending order, OFF included
LEVELS: tuple[Severity, ...] = tuple(sorted(Severity))

_ALIASES = {
    "warn": Severity.WARNING,
    "crit": Severity.CRITICAL,
    "none": Severity.OFF,
}

_STDLIB_LEVELS = {
    Severity.ALL: logging.NOTSET,
    Severity.TRACE: 5,
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.CRITICAL: logging.CRITICAL,
    Severity.FATAL: logging.CRITICAL + 10,
    Severity.OFF: logging.CRITICAL + 20,
}


def should_log(
    message: Severity,
    logger_threshold: Severity,
    global_threshold: Severity,
) -> bool:
    """Decide whether a message passes the gate.

    Thresholds are inclusive lower bounds. OFF in any position closes the
    gate, so a message logged at OFF never passes.

    Args:
        message: Severity of the message.
        logger_threshold: Threshold of the logger handling the message.
        global_threshold: Process-wide threshold.

    Returns:
        True if the message should be written.
    """
    return (
        message != Severity.OFF
        and logger_threshold != Severity.OFF
        and global_threshold != Severity.OFF
        and message >= logger_threshold
        and message >= global_threshold
    )


def parse_severity(value: "Severity | int | str") -> Severity:
    """Convert a name, integer or Severity into a Severity.

    Names are case-insensitive; "warn", "crit" and "none" are accepted as
    aliases.

    Raises:
        ValueError: If the value does not name a severity.
    """
    if isinstance(value, Severity):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a severity: {value!r}")
    if isinstance(value, int):
        try:
            return Severity(value)
        except ValueError:
            raise ValueError(f"Unknown severity value: {value}") from None
    if isinstance(value, str):
        key = value.strip().lower()
        if key in _ALIASES:
            return _ALIASES[key]
        try:
            return Severity[key.upper()]
        except KeyError:
            names = ", ".join(str(s) for s in LEVELS)
            raise ValueError(
                f"Unknown severity '{value}'. Valid severities: {names}"
            ) from None
    raise ValueError(f"Not a severity: {value!r}")


def to_stdlib_level(severity: Severity) -> int:
    """Map a Severity onto the stdlib logging numeric scale."""
    return _STDLIB_LEVELS[severity]


# Register names for the levels stdlib logging does not know about, so
# records bridged into logging/structlog render readable level names.
logging.addLevelName(_STDLIB_LEVELS[Severity.TRACE], "TRACE")
logging.addLevelName(_STDLIB_LEVELS[Severity.FATAL], "FATAL")
