from __future__ import annotations

import io
import logging
import re

from sampleseries import diagnostics as diag
from sampleseries.diagnostics import Diagnostics, configure_diagnostics


def test_record_writes_console_and_file(tmp_path, capsys):
    log_dir = tmp_path / "localDebug"
    sink = configure_diagnostics(logging.INFO, log_dir=log_dir)
    sink.record("hello there")

    out = capsys.readouterr().out.strip().splitlines()
    assert re.fullmatch(r"\d{2}:\d{2}:\d{2}\.\d{3} - hello there", out[-1])

    content = (log_dir / "application_log.txt").read_text(encoding="utf-8").splitlines()
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} - hello there", content[-1])


def test_log_file_is_appended_across_configurations(tmp_path):
    log_dir = tmp_path / "logs"
    configure_diagnostics(log_dir=log_dir, console=False).record("first")
    configure_diagnostics(log_dir=log_dir, console=False).record("second")
    lines = (log_dir / "application_log.txt").read_text(encoding="utf-8").splitlines()
    assert [line.split(" - ", 1)[1] for line in lines] == ["first", "second"]


def test_reconfigure_replaces_handlers(tmp_path):
    configure_diagnostics(log_dir=tmp_path)
    configure_diagnostics(log_dir=tmp_path)
    logger = logging.getLogger(diag.LOGGER_NAME)
    assert len(logger.handlers) == 2


def test_permission_error_switches_to_fallback(tmp_path, monkeypatch, capsys):
    log_dir = tmp_path / "locked"
    fallback = tmp_path / "obj" / "Debug" / "fallback.txt"
    original = diag._file_handler

    def _guarded(path):
        if path.parent == log_dir:
            raise PermissionError("denied")
        return original(path)

    monkeypatch.setattr(diag, "_file_handler", _guarded)
    sink = configure_diagnostics(log_dir=log_dir, fallback_file=fallback)
    sink.record("still logged")

    lines = fallback.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("Log started at: ")
    assert any("Unable to write to" in line for line in lines)
    assert lines[-1].endswith(" - still logged")
    assert "using fallback log at" in capsys.readouterr().out


def test_unwritable_fallback_keeps_console_only(tmp_path, monkeypatch, capsys):
    def _always_fail(path):
        raise PermissionError("denied")

    monkeypatch.setattr(diag, "_file_handler", _always_fail)
    sink = configure_diagnostics(log_dir=tmp_path / "a", fallback_file=tmp_path / "b.txt")
    sink.record("console only")

    out = capsys.readouterr().out
    assert "fallback failed" in out
    assert "console only" in out


def test_record_never_raises_on_broken_stream(monkeypatch):
    monkeypatch.setattr(logging, "raiseExceptions", False)
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    logger = logging.getLogger(f"{diag.LOGGER_NAME}.broken")
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    stream.close()
    try:
        sink = Diagnostics(logger)
        sink.record("lost message")
        sink.record_failure("lost failure", RuntimeError("boom"))
    finally:
        logger.removeHandler(handler)


def test_record_failure_includes_traceback(caplog):
    sink = Diagnostics()
    try:
        raise ValueError("bad sample")
    except ValueError as exc:
        with caplog.at_level(logging.ERROR, logger=diag.LOGGER_NAME):
            sink.record_failure("Execution Failed in Cycle 2!", exc)
    [record] = caplog.records
    assert record.getMessage() == "Execution Failed in Cycle 2!"
    assert record.exc_info[0] is ValueError
