"""
Command line interface for tierlog using Click.

    tierlog validate -c logging.yaml          -> check a config and show its logger tree
    tierlog emit -c logging.yaml -s warning "disk almost full"
"""

import sys
from pathlib import Path

import click

from . import __version__
from .config import LoggingConfig, SinkConfig, configure, load_config
from .errors import ConfigError, FatalLogError
from .levels import LEVELS, Severity
from .logging import configure_logging
from .record import CallSite

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 3

_SEVERITY_CHOICES = [str(s) for s in LEVELS if s != Severity.OFF]


def _describe_sink(config: SinkConfig, indent: int = 1) -> list[str]:
    """Render a sink config tree as indented lines."""
    pad = "  " * indent
    label = f"{config.name}: " if config.name else ""
    match config.type:
        case "file" | "json_file":
            detail = f" -> {config.path}"
        case "console":
            detail = f" -> {config.stream}"
        case "structlog" | "stdlib":
            detail = f" -> {config.target or 'tierlog'}"
        case _:
            detail = ""
    flags = ", thread-safe" if config.thread_safe else ""
    lines = [f"{pad}{label}{config.type}{detail} (threshold={config.threshold}{flags})"]
    for child in config.children:
        lines.extend(_describe_sink(child, indent + 1))
    return lines


def _load(config_path: Path | None, overrides: dict) -> LoggingConfig:
    try:
        return load_config(config_path=config_path, overrides=overrides)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except ConfigError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)


@click.group()
@click.version_option(version=__version__, prog_name="tierlog")
def main() -> None:
    """tierlog - Hierarchical, level-gated logging core.

    Inspect logging configurations and send test messages through them.
    """
    pass


@main.command()
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to the configuration file to validate",
)
def validate(config: Path | None) -> None:
    """Validate a YAML configuration file and show its logger tree."""
    logging_config = _load(config, {})
    click.echo("Valid configuration")
    click.echo(f"  Global threshold: {logging_config.global_threshold}")
    click.echo("  Default logger:")
    for line in _describe_sink(logging_config.default, indent=2):
        click.echo(line)


@main.command()
@click.argument("message", nargs=-1, required=True)
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to the YAML configuration file",
)
@click.option(
    "-s",
    "--severity",
    type=click.Choice(_SEVERITY_CHOICES, case_sensitive=False),
    default="info",
    show_default=True,
    help="Severity of the message",
)
@click.option(
    "--global-threshold",
    type=click.Choice([str(s) for s in LEVELS], case_sensitive=False),
    default=None,
    help="Override the global threshold",
)
@click.option("-v", "--verbose", count=True, help="More diagnostics output (-v, -vv)")
@click.option("--quiet", is_flag=True, help="Silence tierlog diagnostics")
def emit(
    message: tuple[str, ...],
    config: Path | None,
    severity: str,
    global_threshold: str | None,
    verbose: int,
    quiet: bool,
) -> None:
    """Log MESSAGE through the configured default logger."""
    logging_config = _load(
        config,
        {"global_threshold": global_threshold, "verbose": verbose or None},
    )
    configure_logging(logging_config.diagnostics, quiet=quiet)

    try:
        root = configure(logging_config)
    except OSError as e:
        click.echo(f"Error: could not open log output: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    site = CallSite(
        file_name="<cli>",
        line=0,
        func_name="tierlog.cli.emit",
        pretty_func_name="tierlog.cli.emit(message)",
        module_name="tierlog.cli",
    )
    try:
        root.log(severity, " ".join(message), call_site=site)
    except FatalLogError as e:
        click.echo(f"Fatal: {e}", err=True)
        sys.exit(EXIT_FAILED)
    finally:
        root.close()


if __name__ == "__main__":
    main()
