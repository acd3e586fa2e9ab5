"""
Tests for the tierlog command line interface.

Covers:
- tierlog validate (valid tree, invalid YAML, invalid thresholds)
- tierlog emit (gating, global threshold override, fatal exit code,
  file sink open failures)
- --version
"""

import logging
import textwrap
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

from tierlog import __version__
from tierlog.cli import EXIT_CONFIG_ERROR, EXIT_FAILED, EXIT_SUCCESS, main
from tierlog.levels import Severity
from tierlog.registry import LoggerRegistry


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def isolate(monkeypatch):
    """Fresh registry and diagnostics setup around every invocation."""
    for var in ("TIERLOG_GLOBAL_THRESHOLD", "TIERLOG_THRESHOLD", "TIERLOG_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)
    LoggerRegistry.reset()
    yield
    LoggerRegistry.reset()
    logging.root.handlers.clear()
    structlog.reset_defaults()


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def write_yaml(tmp_path: Path):
    def _write(content: str) -> Path:
        path = tmp_path / "tierlog.yaml"
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def stdout_config(write_yaml) -> Path:
    """Default logger printing to stdout at trace."""
    return write_yaml(
        """
        default:
          type: console
          stream: stdout
          threshold: trace
        """
    )


# ── validate ──────────────────────────────────────────────────────────────


class TestValidate:
    """tierlog validate."""

    def test_valid_tree(self, runner: CliRunner, write_yaml, tmp_path: Path):
        path = write_yaml(
            f"""
            global_threshold: info
            default:
              type: composite
              children:
                - name: console
                  type: console
                  stream: stdout
                  threshold: warning
                - name: audit
                  type: file
                  path: {tmp_path / "audit.log"}
                  threshold: trace
                  thread_safe: true
            """
        )
        result = runner.invoke(main, ["validate", "-c", str(path)])

        assert result.exit_code == EXIT_SUCCESS
        assert "Valid configuration" in result.output
        assert "Global threshold: info" in result.output
        assert "console: console -> stdout (threshold=warning)" in result.output
        assert "audit: file -> " in result.output
        assert "(threshold=trace, thread-safe)" in result.output

    def test_defaults_without_file(self, runner: CliRunner):
        result = runner.invoke(main, ["validate"])
        assert result.exit_code == EXIT_SUCCESS
        assert "console -> stderr (threshold=info)" in result.output

    def test_invalid_yaml(self, runner: CliRunner, write_yaml):
        path = write_yaml("default: [unclosed\n")
        result = runner.invoke(main, ["validate", "-c", str(path)])
        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_invalid_threshold(self, runner: CliRunner, write_yaml):
        path = write_yaml("global_threshold: unspecified\n")
        result = runner.invoke(main, ["validate", "-c", str(path)])
        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_missing_file(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(main, ["validate", "-c", str(tmp_path / "missing.yaml")])
        assert result.exit_code != EXIT_SUCCESS


# ── emit ──────────────────────────────────────────────────────────────────


class TestEmit:
    """tierlog emit."""

    def test_message_written(self, runner: CliRunner, stdout_config: Path):
        result = runner.invoke(
            main, ["emit", "-c", str(stdout_config), "-s", "warning", "--quiet", "disk", "almost", "full"]
        )
        assert result.exit_code == EXIT_SUCCESS
        assert ":<cli>:emit:0 disk almost full\n" in result.output

    def test_gated_message(self, runner: CliRunner, write_yaml):
        path = write_yaml("default:\n  type: console\n  stream: stdout\n  threshold: error\n")
        result = runner.invoke(main, ["emit", "-c", str(path), "-s", "warning", "--quiet", "hidden"])
        assert result.exit_code == EXIT_SUCCESS
        assert "hidden" not in result.output

    def test_global_threshold_override(self, runner: CliRunner, stdout_config: Path):
        result = runner.invoke(
            main,
            ["emit", "-c", str(stdout_config), "-s", "warning", "--global-threshold", "error", "--quiet", "hidden"],
        )
        assert result.exit_code == EXIT_SUCCESS
        assert "hidden" not in result.output
        assert LoggerRegistry.get().global_threshold is Severity.ERROR

    def test_fatal_exit_code(self, runner: CliRunner, stdout_config: Path):
        result = runner.invoke(main, ["emit", "-c", str(stdout_config), "-s", "fatal", "--quiet", "going down"])
        assert result.exit_code == EXIT_FAILED
        assert "going down" in result.output

    def test_off_not_a_message_severity(self, runner: CliRunner, stdout_config: Path):
        result = runner.invoke(main, ["emit", "-c", str(stdout_config), "-s", "off", "--quiet", "x"])
        assert result.exit_code == 2

    def test_file_sink(self, runner: CliRunner, write_yaml, tmp_path: Path):
        log_path = tmp_path / "out" / "app.log"
        path = write_yaml(f"default:\n  type: file\n  path: {log_path}\n  threshold: trace\n")
        result = runner.invoke(main, ["emit", "-c", str(path), "-s", "trace", "--quiet", "to", "file"])
        assert result.exit_code == EXIT_SUCCESS
        assert log_path.read_text(encoding="utf-8").endswith(":<cli>:emit:0 to file\n")

    def test_file_sink_open_failure(self, runner: CliRunner, write_yaml, tmp_path: Path):
        path = write_yaml(f"default:\n  type: file\n  path: {tmp_path}\n")
        result = runner.invoke(main, ["emit", "-c", str(path), "--quiet", "x"])
        assert result.exit_code == EXIT_CONFIG_ERROR


class TestVersion:
    def test_version(self, runner: CliRunner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output
