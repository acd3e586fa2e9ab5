"""
Pydantic models for tierlog configuration.

A configuration describes the global threshold, the tree of loggers that
becomes the default logger, and how tierlog's own diagnostics are logged.

Example (YAML):

    global_threshold: info
    default:
      type: composite
      children:
        - name: console
          type: console
          threshold: warning
        - name: audit
          type: file
          path: logs/audit.log
          threshold: trace
          thread_safe: true
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from ..levels import Severity, parse_severity

SinkType = Literal[
    "console",
    "file",
    "json_file",
    "null",
    "memory",
    "structlog",
    "stdlib",
    "composite",
    "array",
]

_NEEDS_PATH = {"file", "json_file"}
_CONTAINERS = {"composite", "array"}


def _coerce_severity(v: object) -> object:
    """Parse severity names. YAML 1.1 reads an unquoted `off` as False."""
    if v is False:
        return Severity.OFF
    if isinstance(v, str) and v.strip().lower() in ("unspecified", "unspecific"):
        raise ValueError("'unspecified' is not a valid threshold")
    if isinstance(v, (str, int)) and not isinstance(v, Severity):
        return parse_severity(v)
    return v


class SinkConfig(BaseModel):
    """Configuration of one logger in the tree.

    Leaf types write somewhere; `composite` and `array` fan out to their
    children.
    """

    type: SinkType = "console"
    name: str = ""
    threshold: Severity = Severity.INFO
    path: Path | None = Field(
        default=None,
        description="Output file (required for 'file' and 'json_file')",
    )
    stream: Literal["stdout", "stderr"] = Field(
        default="stderr",
        description="Stream used by 'console' sinks",
    )
    target: str | None = Field(
        default=None,
        description="Logger name used by 'structlog' and 'stdlib' sinks",
    )
    thread_safe: bool = Field(
        default=False,
        description="If True, wrap this logger in a ThreadSafeLogger",
    )
    children: list["SinkConfig"] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    @field_validator("threshold", mode="before")
    @classmethod
    def _parse_threshold(cls, v: object) -> object:
        return _coerce_severity(v)

    @model_validator(mode="after")
    def _check_shape(self) -> "SinkConfig":
        if self.type in _NEEDS_PATH and self.path is None:
            raise ValueError(f"Sink type '{self.type}' requires 'path'")
        if self.type not in _CONTAINERS and self.children:
            raise ValueError(f"Sink type '{self.type}' cannot have children")
        if self.type == "composite":
            seen: set[str] = set()
            for child in self.children:
                if not child.name:
                    raise ValueError("Every child of a 'composite' sink needs a name")
                if child.name in seen:
                    raise ValueError(f"Duplicate child name '{child.name}' in 'composite' sink")
                seen.add(child.name)
        return self


SinkConfig.model_rebuild()


class DiagnosticsConfig(BaseModel):
    """How tierlog logs its own internal events (through structlog)."""

    level: Literal["debug", "info", "warning", "error"] = "warning"
    file: Path | None = None
    verbose: int = 0

    model_config = {"extra": "forbid"}


class LoggingConfig(BaseModel):
    """Complete tierlog configuration.

    This is the root of the configuration tree and the entry point for
    validation.
    """

    global_threshold: Severity = Severity.ALL
    default: SinkConfig = Field(default_factory=SinkConfig)
    diagnostics: DiagnosticsConfig = Field(default_factory=DiagnosticsConfig)

    model_config = {"extra": "forbid"}

    @field_validator("global_threshold", mode="before")
    @classmethod
    def _parse_global_threshold(cls, v: object) -> object:
        return _coerce_severity(v)
