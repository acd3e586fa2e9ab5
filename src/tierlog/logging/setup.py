"""
Configuration of tierlog's own diagnostics logging.

tierlog reports its internal events (children inserted or removed,
default logger created, config loaded, file open failures) through
structlog, never through its own Loggers. Two pipelines:
1. File (JSON) — if config.file is set. Captures everything (DEBUG+).
2. Console (stderr) — level from config.level, lowered by the verbose counter.
"""

import logging
import sys
from pathlib import Path

import structlog

from ..config.schema import DiagnosticsConfig

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def _json_file_handler(path: Path, pre_chain: list) -> logging.Handler:
    """DEBUG+ handler writing one JSON object per event."""
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(str(path), encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=pre_chain,
        )
    )
    return handler


def _console_handler(level: int, pre_chain: list, formatted: bool) -> logging.Handler:
    """stderr handler. `formatted` is set when events are rendered by the handler."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if formatted:
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
                foreign_pre_chain=pre_chain,
            )
        )
    return handler


def configure_logging(config: DiagnosticsConfig, quiet: bool = False) -> None:
    """Configure structlog and stdlib logging for tierlog diagnostics.

    With a diagnostics file both pipelines render through
    ProcessorFormatter; without one, structlog renders for the console
    directly.

    Args:
        config: Diagnostics configuration (level, file, verbose)
        quiet: If True, disable the console pipeline
    """
    logging.root.handlers.clear()
    structlog.reset_defaults()

    # Handlers filter by level; the root lets everything through
    logging.basicConfig(level=logging.DEBUG, format="%(message)s", handlers=[])

    pre_chain = _shared_processors()
    to_file = config.file is not None

    if to_file:
        logging.root.addHandler(_json_file_handler(Path(config.file), pre_chain))
    if not quiet:
        level = _console_level(config.level, config.verbose)
        logging.root.addHandler(_console_handler(level, pre_chain, formatted=to_file))

    if to_file:
        renderer = structlog.stdlib.ProcessorFormatter.wrap_for_formatter
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=pre_chain + [structlog.processors.format_exc_info, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _console_level(level: str, verbose: int) -> int:
    """Console level: the configured level, lowered one step per -v.

    warning + -v  -> INFO
    warning + -vv -> DEBUG

    Args:
        level: Configured level name
        verbose: Count of -v flags

    Returns:
        stdlib logging level
    """
    base = _LEVELS.get(level, logging.WARNING)
    return max(logging.DEBUG, base - 10 * max(verbose, 0))


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured diagnostics logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        structlog logger
    """
    return structlog.get_logger(name)
