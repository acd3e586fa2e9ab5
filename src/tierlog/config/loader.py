"""
Configuration loader with deep merge.

Precedence (lowest to highest):
1. Defaults (declared in the Pydantic schemas)
2. YAML file
3. Environment variables
4. Explicit overrides (e.g. CLI arguments)

The merge is recursive so keys are preserved at every level.
"""

import os
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from ..errors import ConfigError
from .schema import LoggingConfig

logger = structlog.get_logger()


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary whose values win over base

    Returns:
        New merged dictionary. Override wins on leaf conflicts.

    Example:
        >>> base = {"default": {"type": "file", "threshold": "info"}}
        >>> override = {"default": {"threshold": "trace"}}
        >>> deep_merge(base, override)
        {"default": {"type": "file", "threshold": "trace"}}
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_config(config_path: Path | None) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML file, or None to skip

    Returns:
        Configuration dictionary, or an empty dict if there is no file

    Raises:
        FileNotFoundError: If config_path does not exist
        ConfigError: If the file is not valid YAML or not a mapping
    """
    if not config_path:
        return {}

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not data:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {config_path} must be a mapping")
    return data


def load_env_overrides() -> dict[str, Any]:
    """Load overrides from environment variables.

    Supported variables:
        TIERLOG_GLOBAL_THRESHOLD: overrides global_threshold
        TIERLOG_THRESHOLD: overrides default.threshold
        TIERLOG_LOG_FILE: overrides diagnostics.file

    Returns:
        Dictionary of overrides taken from env vars
    """
    overrides: dict[str, Any] = {}

    if global_threshold := os.environ.get("TIERLOG_GLOBAL_THRESHOLD"):
        overrides["global_threshold"] = global_threshold.lower()

    if threshold := os.environ.get("TIERLOG_THRESHOLD"):
        overrides.setdefault("default", {})["threshold"] = threshold.lower()

    if log_file := os.environ.get("TIERLOG_LOG_FILE"):
        overrides.setdefault("diagnostics", {})["file"] = log_file

    return overrides


def apply_overrides(config_dict: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Apply explicit overrides (CLI arguments and the like).

    Recognized keys: global_threshold, threshold, verbose, diagnostics_file.
    Keys whose value is None are ignored.

    Args:
        config_dict: Base configuration (already merged with YAML and env)
        overrides: Flat dictionary of overrides

    Returns:
        Configuration with the overrides applied
    """
    nested: dict[str, Any] = {}

    if overrides.get("global_threshold"):
        nested["global_threshold"] = overrides["global_threshold"]

    if overrides.get("threshold"):
        nested.setdefault("default", {})["threshold"] = overrides["threshold"]

    if overrides.get("verbose") is not None:
        nested.setdefault("diagnostics", {})["verbose"] = overrides["verbose"]

    if overrides.get("diagnostics_file"):
        nested.setdefault("diagnostics", {})["file"] = overrides["diagnostics_file"]

    return deep_merge(config_dict, nested)


def load_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> LoggingConfig:
    """Load and validate the complete logging configuration.

    Steps:
    1. Pydantic defaults
    2. Merge YAML (if any)
    3. Merge env vars
    4. Merge explicit overrides
    5. Validate with Pydantic

    Args:
        config_path: Path to the YAML configuration file
        overrides: Flat dictionary of explicit overrides

    Returns:
        Validated LoggingConfig

    Raises:
        FileNotFoundError: If config_path does not exist
        ConfigError: If the resulting configuration is invalid
    """
    yaml_config = load_yaml_config(config_path)
    merged = deep_merge(yaml_config, load_env_overrides())
    merged = apply_overrides(merged, overrides or {})

    try:
        config = LoggingConfig(**merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid logging configuration: {e}") from e

    logger.debug(
        "config.loaded",
        path=str(config_path) if config_path else None,
        global_threshold=str(config.global_threshold),
        default_type=config.default.type,
    )
    return config
