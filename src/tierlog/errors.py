"""
Exceptions raised by tierlog.

Structural errors (duplicate names, missing children, invalid thresholds)
are programming errors and are raised immediately. FatalLogError is the
signal raised by the default fatal action once a fatal record has been
written.
"""

__all__ = [
    "TierlogError",
    "DuplicateLoggerError",
    "LoggerNotFoundError",
    "InvalidThresholdError",
    "InvalidSeverityError",
    "MessageStateError",
    "FatalLogError",
    "ConfigError",
]


class TierlogError(Exception):
    """Base class for every error raised by tierlog."""

    pass


class DuplicateLoggerError(TierlogError):
    """Error raised when inserting a child under an empty or already used name."""

    pass


class LoggerNotFoundError(TierlogError, KeyError):
    """Error raised when a named child does not exist in a composite."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class InvalidThresholdError(TierlogError, ValueError):
    """Error raised when a logger threshold is set to something other than a concrete severity."""

    pass


class InvalidSeverityError(TierlogError, ValueError):
    """Error raised when a message is logged at OFF or UNSPECIFIED."""

    pass


class MessageStateError(TierlogError, RuntimeError):
    """Error raised when the write phases are called out of order."""

    pass


class FatalLogError(TierlogError):
    """Raised by the default fatal action after a fatal record was written.

    Attributes:
        logger_name: Name of the logger whose fatal action fired.
    """

    def __init__(self, message: str = "A fatal log message was logged", logger_name: str = "") -> None:
        super().__init__(message)
        self.logger_name = logger_name


class ConfigError(TierlogError):
    """Error raised for an invalid logging configuration."""

    pass
