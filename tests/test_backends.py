# tests/test_backends.py
"""
Tests for the rich channel backend, the logging channel and backend
selection through configuration.
"""

import logging

import pytest

from gendiag import (
    ConfigError,
    Diagnostic,
    FallbackBackend,
    Fragment,
    Level,
    LoggingChannel,
    RichBackend,
    abort,
    abort_if_dirty,
    emit,
    emit_call_site_warning,
    emit_warning,
    entry_point,
    set_dummy,
)
from gendiag import config
from tests.conftest import SPAN_A, SPAN_B, SPAN_C, RecordingChannel


GOOD_OUTPUT = Fragment.from_source("ok = True\n")


class TestRichBackend:

    def test_diagnostics_go_to_channel_in_order(self, recording_channel):
        first = Diagnostic.spanned(SPAN_A, Level.ERROR, "first").span_note(SPAN_B, "here")
        warning = Diagnostic.spanned(SPAN_B, Level.WARNING, "careful")
        last = Diagnostic.spanned(SPAN_B, Level.ERROR, "last")

        def gen():
            emit(first)
            emit(warning)
            abort(last)

        out = entry_point(gen)
        assert recording_channel.reported == [first, warning, last]
        assert not out

    def test_warnings_are_real_but_do_not_fail(self, recording_channel):
        def gen():
            emit_warning(SPAN_A, "careful")
            abort_if_dirty()
            return GOOD_OUTPUT

        assert entry_point(gen) is GOOD_OUTPUT
        assert [d.level for d in recording_channel.reported] == [Level.WARNING]

    def test_call_site_warning(self, recording_channel):
        def gen():
            emit_call_site_warning("derive is deprecated")
            return GOOD_OUTPUT

        assert entry_point(gen, call_site=SPAN_C) is GOOD_OUTPUT
        [warning] = recording_channel.reported
        assert warning.level is Level.WARNING
        assert warning.start == SPAN_C
        assert warning.message == "derive is deprecated"

    def test_dirty_flag_aborts(self, recording_channel):
        reached = []

        def gen():
            emit(Diagnostic.spanned(SPAN_A, Level.ERROR, "bad"))
            abort_if_dirty()
            reached.append(True)

        entry_point(gen)
        assert reached == []

    def test_dummy_is_the_whole_output_on_error(self, recording_channel):
        dummy = Fragment.from_source("stub = None\n")

        def gen():
            set_dummy(dummy)
            emit(Diagnostic.spanned(SPAN_A, Level.ERROR, "bad"))
            return GOOD_OUTPUT

        assert entry_point(gen) == dummy

    def test_dirty_flag_is_per_pass(self, recording_channel):
        def failing():
            emit(Diagnostic.spanned(SPAN_A, Level.ERROR, "bad"))

        entry_point(failing)
        assert entry_point(lambda: GOOD_OUTPUT) is GOOD_OUTPUT


class TestLoggingChannel:

    def test_levels_and_format(self, caplog):
        channel = LoggingChannel()
        with caplog.at_level(logging.WARNING, logger="gendiag.channel"):
            channel.report(Diagnostic.spanned(SPAN_A, Level.ERROR, "boom").help("fix"))
            channel.report(Diagnostic.spanned(SPAN_B, Level.WARNING, "hm"))

        assert [r.levelno for r in caplog.records] == [logging.ERROR, logging.WARNING]
        assert caplog.records[0].getMessage() == "model.gd:3:5: error: boom\n  = help: fix"
        assert caplog.records[1].getMessage() == "model.gd:7:1: warning: hm"

    def test_default_channel_of_rich_backend(self):
        assert isinstance(RichBackend().channel, LoggingChannel)


class TestFallbackLogging:

    def test_dropped_warning_logged(self, caplog):
        def gen():
            emit_warning(SPAN_A, "careful")
            return GOOD_OUTPUT

        with caplog.at_level(logging.DEBUG, logger="gendiag"):
            entry_point(gen)
        assert any("drops warning" in r.getMessage() for r in caplog.records)


class TestConfiguration:

    def test_default_is_fallback(self):
        config._reset()
        assert isinstance(config.get_backend(), FallbackBackend)

    def test_backend_cached(self):
        assert config.get_backend() is config.get_backend()

    def test_from_env(self):
        settings = config.Settings.from_env({"GENDIAG_BACKEND": " Rich ", "GENDIAG_LOG_LEVEL": "debug"})
        assert settings.backend == "rich"
        assert settings.log_level == "DEBUG"
        assert settings.validate() == []

    def test_env_selects_backend(self, monkeypatch):
        monkeypatch.setenv("GENDIAG_BACKEND", "rich")
        config._reset()
        assert isinstance(config.get_backend(), RichBackend)

    def test_configure_overrides(self):
        channel = RecordingChannel()
        settings = config.configure(backend="rich", channel=channel)
        assert settings.backend == "rich"
        backend = config.get_backend()
        assert isinstance(backend, RichBackend)
        assert backend.channel is channel

    @pytest.mark.parametrize("kwargs, problem", [
        ({"backend": "native"}, "unknown backend"),
        ({"backend": "fallback", "channel": RecordingChannel()}, "rich backend"),
        ({"backend": "rich", "channel": object()}, "report(diagnostic)"),
        ({"log_level": "LOUD"}, "unknown log level"),
    ])
    def test_invalid_settings(self, kwargs, problem):
        with pytest.raises(ConfigError, match=problem.replace("(", r"\(").replace(")", r"\)")):
            config.configure(config.Settings(**kwargs))

    def test_invalid_env_fails_on_first_use(self, monkeypatch):
        monkeypatch.setenv("GENDIAG_BACKEND", "bogus")
        config._reset()
        with pytest.raises(ConfigError):
            entry_point(lambda: None)

    def test_pass_keeps_its_backend(self):
        channel = RecordingChannel()

        def gen():
            config.configure(backend="rich", channel=channel)
            emit(Diagnostic.spanned(SPAN_A, Level.ERROR, "still fallback"))

        out = entry_point(gen)
        assert "still fallback" in out.render()
        assert channel.reported == []

    def test_configure_logging(self):
        log = logging.getLogger("gendiag")
        before = list(log.handlers)
        try:
            config.configure_logging(2)
            assert log.level == logging.DEBUG
            assert len(log.handlers) == len(before) + 1
        finally:
            for handler in log.handlers[len(before):]:
                log.removeHandler(handler)


class TestLogLevel:

    @pytest.fixture(autouse=True)
    def restore_logger(self):
        log = logging.getLogger("gendiag")
        level, handlers = log.level, list(log.handlers)
        yield log
        log.setLevel(level)
        for handler in log.handlers[len(handlers):]:
            log.removeHandler(handler)

    def test_unset_level_from_env(self):
        assert config.Settings.from_env({}).log_level is None

    def test_env_level_applied_on_first_use(self, monkeypatch, restore_logger):
        restore_logger.setLevel(logging.NOTSET)
        monkeypatch.setenv("GENDIAG_LOG_LEVEL", "debug")
        config._reset()
        entry_point(lambda: GOOD_OUTPUT)
        assert restore_logger.level == logging.DEBUG

    def test_explicit_level_applied(self, restore_logger):
        config.configure(backend="fallback", log_level="INFO")
        assert restore_logger.level == logging.INFO

    def test_configure_keeps_verbosity_from_configure_logging(self, monkeypatch, restore_logger):
        monkeypatch.delenv("GENDIAG_LOG_LEVEL", raising=False)
        config.configure_logging(2)
        config.configure(backend="rich")
        assert restore_logger.level == logging.DEBUG
