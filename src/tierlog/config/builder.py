"""
Build logger trees from configuration.
"""

from typing import Any

import structlog

from ..composite import ArrayLogger, CompositeLogger
from ..logger import Logger
from ..registry import LoggerRegistry
from ..sinks import (
    FileLogger,
    JsonFileLogger,
    MemoryLogger,
    NullLogger,
    StderrLogger,
    StdlibLogger,
    StdoutLogger,
    StructlogLogger,
)
from ..threadsafe import ThreadSafeLogger
from .schema import LoggingConfig, SinkConfig

logger = structlog.get_logger()

__all__ = [
    "build_logger",
    "configure",
]


def _build_leaf(config: SinkConfig, registry: LoggerRegistry | None) -> Logger:
    common: dict[str, Any] = {
        "threshold": config.threshold,
        "name": config.name,
        "registry": registry,
    }
    match config.type:
        case "console":
            if config.stream == "stdout":
                return StdoutLogger(**common)
            return StderrLogger(**common)
        case "file":
            return FileLogger(config.path, **common)
        case "json_file":
            return JsonFileLogger(config.path, **common)
        case "null":
            return NullLogger(**common)
        case "memory":
            return MemoryLogger(**common)
        case "structlog":
            target = structlog.get_logger(config.target) if config.target else None
            return StructlogLogger(target, **common)
        case "stdlib":
            return StdlibLogger(config.target, **common)
        case _:
            raise ValueError(f"Unknown sink type: {config.type}")


def build_logger(config: SinkConfig, registry: LoggerRegistry | None = None) -> Logger:
    """Turn a SinkConfig tree into a Logger tree.

    Args:
        config: Root of the sink configuration.
        registry: Registry the built loggers consult for the global
            threshold. None means the process-wide registry.

    Returns:
        Root logger. Wrapped in a ThreadSafeLogger when thread_safe is set.

    Raises:
        OSError: If a file sink cannot be opened.
    """
    if config.type in ("composite", "array"):
        cls = CompositeLogger if config.type == "composite" else ArrayLogger
        composite = cls(threshold=config.threshold, name=config.name, registry=registry)
        for child_config in config.children:
            composite.insert(child_config.name, build_logger(child_config, registry))
        built: Logger = composite
    else:
        built = _build_leaf(config, registry)

    if config.thread_safe:
        built = ThreadSafeLogger(built)

    logger.debug("builder.built", type=config.type, name=config.name, threshold=str(config.threshold))
    return built


def configure(config: LoggingConfig, registry: LoggerRegistry | None = None) -> Logger:
    """Install a configuration into a registry.

    Sets the global threshold and replaces the default logger with the
    tree described by config.default.

    Args:
        config: Validated configuration.
        registry: Target registry. None means the process-wide registry.

    Returns:
        The new default logger.
    """
    target = registry if registry is not None else LoggerRegistry.get()
    root = build_logger(config.default, registry)
    target.global_threshold = config.global_threshold
    target.default_logger = root
    return root
