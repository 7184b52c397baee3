"""Tests for the logging sink.

Covers format resolution, stdout/stderr separation, level thresholds,
timestamps, record rendering, output-file redirection and the installed
sink.
"""

from __future__ import annotations

import json
import re

import pytest

from glueapi import output as output_module
from glueapi.output import (
    Level,
    LogSink,
    OutputFormat,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)

RECORDS = [
    {"id": "1", "type": "organizations", "attributes": {"name": "Acme"}},
    {"id": "2", "type": "organizations", "attributes": {"name": "Globex"}},
]


@pytest.fixture()
def non_tty(monkeypatch):
    monkeypatch.setattr("glueapi.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    monkeypatch.setattr("glueapi.output._is_tty", lambda: True)


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert LogSink(format=OutputFormat.AUTO).format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert LogSink(format=OutputFormat.AUTO).format == OutputFormat.RICH

    def test_auto_is_plain_when_color_disabled(self, tty):
        assert LogSink(format=OutputFormat.AUTO, no_color=True).format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, tty):
        assert LogSink(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color()

    def test_term_dumb(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color()

    def test_default(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert not _should_disable_color()


class TestRecords:
    def test_json_records_on_stdout_only(self, capsys):
        LogSink(format=OutputFormat.JSON, no_color=True).print_records(RECORDS)
        captured = capsys.readouterr()
        assert json.loads(captured.out) == RECORDS
        assert captured.err == ""

    def test_plain_one_line_per_record(self, capsys):
        LogSink(format=OutputFormat.PLAIN, no_color=True).print_records(RECORDS)
        lines = capsys.readouterr().out.splitlines()
        assert lines == [
            '1\torganizations\t{"name": "Acme"}',
            '2\torganizations\t{"name": "Globex"}',
        ]

    def test_plain_single_record(self, capsys):
        LogSink(format=OutputFormat.PLAIN, no_color=True).print_records(RECORDS[0])
        assert capsys.readouterr().out.startswith("1\torganizations\t")

    def test_rich_is_highlighted_json(self, capsys, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        LogSink(format=OutputFormat.RICH).print_records(RECORDS[0])
        out = capsys.readouterr().out
        assert "\x1b[" in out
        assert "Acme" in out

    def test_none_prints_nothing(self, capsys):
        LogSink(format=OutputFormat.JSON).print_records(None)
        assert capsys.readouterr().out == ""

    def test_output_file(self, tmp_path, capsys):
        target = tmp_path / "records.json"
        LogSink(format=OutputFormat.PLAIN, output_file=str(target)).print_records(RECORDS)
        assert json.loads(target.read_text()) == RECORDS
        assert capsys.readouterr().out == ""


class TestDiagnostics:
    def test_levels_go_to_stderr(self, capsys):
        sink = LogSink(no_color=True)
        sink.info("fetching")
        sink.warning("rate limited")
        sink.error("failed")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.splitlines() == [
            "fetching",
            "Warning: rate limited",
            "Error: failed",
        ]

    def test_quiet_keeps_warnings_and_errors(self, capsys):
        sink = LogSink(no_color=True, quiet=True)
        sink.debug("hidden")
        sink.info("hidden")
        sink.warning("shown")
        sink.error("shown too")
        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "Warning: shown" in err
        assert "Error: shown too" in err

    def test_quiet_wins_over_verbose(self):
        sink = LogSink(quiet=True, verbose=True)
        assert not sink.enabled(Level.INFO)
        assert sink.enabled(Level.WARNING)

    def test_debug_only_when_verbose(self, capsys):
        LogSink(no_color=True).debug("quiet")
        LogSink(no_color=True, verbose=True).debug("loud")
        err = capsys.readouterr().err
        assert "quiet" not in err
        assert "[debug] loud" in err

    def test_timestamps(self, capsys):
        LogSink(no_color=True, timestamps=True).warning("slow down")
        line = capsys.readouterr().err.strip()
        assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\+00:00 Warning: slow down$", line)

    def test_markup_in_messages_is_literal(self, capsys, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        LogSink().error("bad filter [bold]x[/bold]")
        assert "[bold]x[/bold]" in capsys.readouterr().err


class TestInstalledSink:
    def test_lazily_created(self):
        reset_output()
        assert isinstance(get_output(), LogSink)

    def test_set_and_reset(self):
        sink = LogSink(quiet=True)
        set_output(sink)
        assert get_output() is sink
        reset_output()
        assert get_output() is not sink

    def test_module_functions_delegate(self, capsys):
        set_output(LogSink(format=OutputFormat.JSON, no_color=True))
        output_module.info("i")
        output_module.warning("w")
        output_module.print_records({"id": "9"})
        captured = capsys.readouterr()
        assert json.loads(captured.out) == {"id": "9"}
        assert captured.err.splitlines() == ["i", "Warning: w"]
