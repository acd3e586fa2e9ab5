"""
Tests for the Logger base class and the write protocol.

Covers:
- Gating against the logger threshold and the registry's global threshold
- Lazy arguments and conditions (nothing evaluated when the gate is closed)
- logf formatting, severity shortcuts and chaining
- Threshold validation (OFF legal, UNSPECIFIED rejected)
- Three-phase protocol order, abort and out-of-order calls
- Fatal action ordering and replacement
- Call-site capture
"""

import sys
import threading

import pytest

from tierlog.errors import (
    FatalLogError,
    InvalidSeverityError,
    InvalidThresholdError,
    MessageStateError,
)
from tierlog.levels import UNSPECIFIED, Severity
from tierlog.logger import Logger, MessageSink, lazy
from tierlog.record import CallSite
from tierlog.registry import LoggerRegistry
from tierlog.sinks import MemoryLogger


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def reset_registry():
    """Every test starts with a fresh process-wide registry."""
    LoggerRegistry.reset()
    yield
    LoggerRegistry.reset()


@pytest.fixture
def registry() -> LoggerRegistry:
    """Explicit registry with the global threshold fully open."""
    return LoggerRegistry(global_threshold=Severity.ALL)


@pytest.fixture
def mem(registry: LoggerRegistry) -> MemoryLogger:
    """Capturing logger with threshold INFO."""
    return MemoryLogger(threshold=Severity.INFO, name="mem", registry=registry)


class FailingContentLogger(MemoryLogger):
    """Fails on the second content part."""

    def write_content(self, text: str) -> None:
        if any(e[0] == "content" for e in self.events):
            raise OSError("disk full")
        super().write_content(text)


class FailingWriteLogger(MemoryLogger):
    """Buffers the phases but cannot commit a record."""

    def write_record(self, record) -> None:
        raise OSError("disk full")


# ── Gating ────────────────────────────────────────────────────────────────


class TestGating:
    """Threshold and global threshold decisions."""

    def test_concrete_scenario(self, mem: MemoryLogger):
        mem.log(Severity.TRACE, "x")
        assert mem.records == []

        mem.log(Severity.WARNING, "y")
        assert len(mem.records) == 1
        assert mem.records[0].message == "y"

    def test_threshold_is_inclusive(self, mem: MemoryLogger):
        mem.info("at threshold")
        assert mem.messages == ["at threshold"]

    def test_global_threshold_gates(self, mem: MemoryLogger, registry: LoggerRegistry):
        registry.global_threshold = Severity.ERROR
        mem.warning("dropped")
        mem.error("kept")
        assert mem.messages == ["kept"]

    def test_global_threshold_change_applies_to_next_call(self, mem: MemoryLogger, registry: LoggerRegistry):
        mem.warning("first")
        registry.global_threshold = Severity.OFF
        mem.critical("second")
        registry.global_threshold = Severity.ALL
        mem.critical("third")
        assert mem.messages == ["first", "third"]

    def test_threshold_off_disables_logger(self, mem: MemoryLogger):
        mem.threshold = Severity.OFF
        mem.critical("never")
        assert mem.records == []

    def test_threshold_accepts_names(self, mem: MemoryLogger):
        mem.threshold = "trace"
        assert mem.threshold is Severity.TRACE
        mem.trace("now visible")
        assert mem.messages == ["now visible"]

    def test_uses_process_registry_by_default(self):
        mem = MemoryLogger(threshold=Severity.TRACE)
        LoggerRegistry.get().global_threshold = Severity.CRITICAL
        mem.error("dropped")
        mem.critical("kept")
        assert mem.messages == ["kept"]
        assert mem.registry is LoggerRegistry.get()

    def test_is_enabled_for(self, mem: MemoryLogger, registry: LoggerRegistry):
        assert mem.is_enabled_for(Severity.INFO)
        assert not mem.is_enabled_for(Severity.TRACE)
        registry.global_threshold = Severity.FATAL
        assert not mem.is_enabled_for(Severity.CRITICAL)


# ── Lazy arguments and conditions ─────────────────────────────────────────


class TestLazyEvaluation:
    """Filtered messages do no formatting work."""

    def test_lazy_not_evaluated_when_gated(self, mem: MemoryLogger):
        calls = []
        mem.trace("state: ", lazy(lambda: calls.append("evaluated") or "dump"))
        assert calls == []
        assert mem.records == []

    def test_lazy_evaluated_when_open(self, mem: MemoryLogger):
        calls = []
        mem.info("state: ", lazy(lambda: calls.append("evaluated") or "dump"))
        assert calls == ["evaluated"]
        assert mem.messages == ["state: dump"]

    def test_str_not_called_when_gated(self, mem: MemoryLogger):
        class Exploding:
            def __str__(self):
                raise AssertionError("rendered a filtered message")

        mem.trace(Exploding())
        assert mem.records == []

    def test_condition_false_skips(self, mem: MemoryLogger):
        mem.warning("skipped", condition=False)
        mem.warning("kept", condition=True)
        assert mem.messages == ["kept"]

    def test_callable_condition(self, mem: MemoryLogger):
        mem.warning("skipped", condition=lambda: False)
        mem.warning("kept", condition=lambda: True)
        assert mem.messages == ["kept"]

    def test_condition_not_evaluated_when_gated(self, mem: MemoryLogger):
        calls = []

        def condition():
            calls.append(True)
            return True

        mem.trace("gated", condition=condition)
        assert calls == []


# ── Entry points ──────────────────────────────────────────────────────────


class TestEntryPoints:
    """log, logf, shortcuts and chaining."""

    def test_parts_written_back_to_back(self, mem: MemoryLogger):
        mem.warning("disk at ", 91, "%")
        assert mem.messages == ["disk at 91%"]

    def test_no_args_gives_empty_message(self, mem: MemoryLogger):
        mem.info()
        assert mem.messages == [""]

    def test_chaining(self, mem: MemoryLogger):
        result = mem.info("a").warning("b").error("c")
        assert result is mem
        assert mem.messages == ["a", "b", "c"]

    def test_log_returns_self_when_gated(self, mem: MemoryLogger):
        assert mem.trace("gated") is mem

    def test_shortcut_severities(self, registry: LoggerRegistry):
        mem = MemoryLogger(threshold=Severity.TRACE, registry=registry, fatal_action=lambda: None)
        mem.trace("t").info("i").warning("w").error("e").critical("c").fatal("f")
        assert [r.severity for r in mem.records] == [
            Severity.TRACE,
            Severity.INFO,
            Severity.WARNING,
            Severity.ERROR,
            Severity.CRITICAL,
            Severity.FATAL,
        ]

    def test_severity_by_name(self, mem: MemoryLogger):
        mem.log("error", "by name")
        assert mem.last.severity is Severity.ERROR

    def test_logf(self, mem: MemoryLogger):
        mem.infof("%d items in %s", 3, "queue")
        assert mem.messages == ["3 items in queue"]

    def test_logf_without_args_keeps_percent(self, mem: MemoryLogger):
        mem.warningf("100% done")
        assert mem.messages == ["100% done"]

    def test_logf_not_formatted_when_gated(self, mem: MemoryLogger):
        # A bad format would raise TypeError if it were applied
        mem.tracef("%d", "not a number")
        assert mem.records == []

    def test_logf_resolves_lazy(self, mem: MemoryLogger):
        mem.errorf("value=%s", lazy(lambda: 42))
        assert mem.messages == ["value=42"]


# ── Validation ────────────────────────────────────────────────────────────


class TestValidation:
    """Thresholds and message severities."""

    def test_unspecified_threshold_rejected(self, mem: MemoryLogger):
        with pytest.raises(InvalidThresholdError):
            mem.threshold = UNSPECIFIED
        assert mem.threshold is Severity.INFO

    def test_none_threshold_rejected(self, mem: MemoryLogger):
        with pytest.raises(InvalidThresholdError):
            mem.threshold = None

    def test_unknown_threshold_rejected(self, mem: MemoryLogger):
        with pytest.raises(InvalidThresholdError):
            mem.threshold = "loud"

    def test_unspecified_threshold_in_constructor(self):
        with pytest.raises(InvalidThresholdError):
            MemoryLogger(threshold=UNSPECIFIED)

    def test_off_threshold_allowed(self, mem: MemoryLogger):
        mem.threshold = Severity.OFF
        assert mem.threshold is Severity.OFF

    def test_off_message_rejected(self, mem: MemoryLogger):
        with pytest.raises(InvalidSeverityError):
            mem.log(Severity.OFF, "x")
        assert mem.records == []

    def test_unspecified_message_rejected(self, mem: MemoryLogger):
        with pytest.raises(InvalidSeverityError):
            mem.log(UNSPECIFIED, "x")

    def test_invalid_severity_is_value_error(self, mem: MemoryLogger):
        with pytest.raises(ValueError):
            mem.log("bogus", "x")


# ── Write protocol ────────────────────────────────────────────────────────


class TestWriteProtocol:
    """Phase order, abort and state errors."""

    def test_phase_order(self, mem: MemoryLogger):
        mem.info("a", 1, "b")
        assert mem.events == [
            ("begin", Severity.INFO),
            ("content", "a"),
            ("content", "1"),
            ("content", "b"),
            ("finish",),
        ]
        assert mem.messages == ["a1b"]

    def test_gated_message_emits_no_phases(self, mem: MemoryLogger):
        mem.trace("x")
        assert mem.events == []

    def test_content_failure_aborts(self, registry: LoggerRegistry):
        failing = FailingContentLogger(threshold=Severity.INFO, registry=registry)
        with pytest.raises(OSError):
            failing.info("first", "second")
        assert failing.events[-1] == ("abort",)
        assert failing.records == []

        # The logger is usable again after the abort
        failing.events.clear()
        failing.info("only")
        assert failing.messages == ["only"]

    def test_write_content_without_begin(self, mem: MemoryLogger):
        with pytest.raises(MessageStateError):
            mem.write_content("orphan")

    def test_finish_without_begin(self, mem: MemoryLogger):
        with pytest.raises(MessageStateError):
            mem.finish_message()

    def test_double_begin(self, mem: MemoryLogger):
        args = ("f.py", 1, "m.f", "m.f()", "m", Severity.INFO, 1, None)
        mem.begin_message(*args)
        with pytest.raises(MessageStateError):
            mem.begin_message(*args)

    def test_manual_phases(self, mem: MemoryLogger):
        from tierlog.record import now

        mem.begin_message("/src/app.py", 7, "app.run", "app.run()", "app", Severity.ERROR, 99, now())
        mem.write_content("part one, ")
        mem.write_content("part two")
        mem.finish_message()

        record = mem.last
        assert record.message == "part one, part two"
        assert record.line == 7
        assert record.thread_id == 99
        assert record.logger_name == "mem"

    def test_logger_is_message_sink(self, mem: MemoryLogger):
        assert isinstance(mem, MessageSink)

    def test_duck_typed_sink(self):
        class Sink:
            def begin_message(self, *args):
                pass

            def write_content(self, text):
                pass

            def finish_message(self):
                pass

        assert isinstance(Sink(), MessageSink)

    def test_logger_is_abstract(self):
        with pytest.raises(TypeError):
            Logger()


# ── Fatal ─────────────────────────────────────────────────────────────────


class TestFatal:
    """Fatal action ordering and configuration."""

    def test_default_fatal_raises_after_write(self, mem: MemoryLogger):
        with pytest.raises(FatalLogError) as exc_info:
            mem.fatal("boom")
        assert mem.messages == ["boom"]
        assert exc_info.value.logger_name == "mem"

    def test_record_visible_when_action_runs(self, mem: MemoryLogger):
        seen = []
        mem.set_fatal_action(lambda: seen.append(list(mem.messages)))
        mem.fatal("boom")
        assert seen == [["boom"]]

    def test_action_runs_when_finish_fails(self, registry: LoggerRegistry):
        calls = []
        failing = FailingWriteLogger(registry=registry, fatal_action=lambda: calls.append(True))
        with pytest.raises(OSError):
            failing.fatal("boom")
        assert calls == [True]

    def test_action_not_run_when_begin_fails(self, mem: MemoryLogger):
        calls = []
        mem.set_fatal_action(lambda: calls.append(True))
        mem.begin_message("f.py", 1, "m.f", "m.f()", "m", Severity.INFO, 1, None)

        with pytest.raises(MessageStateError, match="while a message is open"):
            mem.fatal("nested")
        assert calls == []

    def test_action_not_run_below_fatal(self, mem: MemoryLogger):
        calls = []
        mem.set_fatal_action(lambda: calls.append(True))
        mem.critical("not fatal")
        assert calls == []

    def test_action_not_run_when_gated(self, mem: MemoryLogger, registry: LoggerRegistry):
        calls = []
        mem.set_fatal_action(lambda: calls.append(True))
        registry.global_threshold = Severity.OFF
        mem.fatal("gated")
        assert calls == []

    def test_none_restores_default(self, mem: MemoryLogger):
        mem.set_fatal_action(lambda: None)
        mem.fatal("tolerated")
        mem.set_fatal_action(None)
        with pytest.raises(FatalLogError):
            mem.fatal("raises again")

    def test_fatal_action_property(self, mem: MemoryLogger):
        action = lambda: None  # noqa: E731
        mem.fatal_action = action
        assert mem.fatal_action is action

    def test_fatalf(self, mem: MemoryLogger):
        with pytest.raises(FatalLogError):
            mem.fatalf("code %d", 7)
        assert mem.messages == ["code 7"]


# ── Records ───────────────────────────────────────────────────────────────


class TestRecords:
    """Metadata captured in each record."""

    def test_call_site_captured(self, mem: MemoryLogger):
        line = sys._getframe().f_lineno + 1
        mem.info("here")

        record = mem.last
        assert record.file_name.endswith("test_logger.py")
        assert record.base_file_name == "test_logger.py"
        assert record.line == line
        assert record.func_name.endswith("TestRecords.test_call_site_captured")
        assert record.short_func_name == "test_call_site_captured"
        assert record.pretty_func_name.endswith("test_call_site_captured(self, mem)")
        assert record.module_name == __name__

    def test_explicit_call_site(self, mem: MemoryLogger):
        site = CallSite("<cli>", 0, "tool.main", "tool.main()", "tool")
        mem.log(Severity.WARNING, "explicit", call_site=site)
        assert mem.last.file_name == "<cli>"
        assert mem.last.func_name == "tool.main"

    def test_thread_and_time(self, mem: MemoryLogger):
        mem.info("x")
        record = mem.last
        assert record.thread_id == threading.get_ident()
        assert record.timestamp.tzinfo is not None
        assert record.severity is Severity.INFO
        assert record.logger_name == "mem"

    def test_context_manager(self, registry: LoggerRegistry):
        with MemoryLogger(registry=registry) as m:
            m.info("inside")
        assert m.messages == ["inside"]

    def test_repr(self, mem: MemoryLogger):
        assert repr(mem) == "<MemoryLogger 'mem' threshold=info>"
