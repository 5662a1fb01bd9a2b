from __future__ import annotations

from pathlib import Path

import orjson
import pytest

from dblog_file.core import diagnostics
from dblog_file.plugins.sinks.bounded_file import BoundedFileSink


def test_warn_is_silent_by_default(capsys: pytest.CaptureFixture[str]) -> None:
    diagnostics.warn("sink", "something failed", detail="x")
    assert capsys.readouterr().err == ""


def test_warn_emits_json_line_when_enabled(capsys: pytest.CaptureFixture[str]) -> None:
    diagnostics.set_enabled(True)

    diagnostics.warn("sink", "something failed", detail="x")

    payload = orjson.loads(capsys.readouterr().err.strip())
    assert payload["level"] == "WARN"
    assert payload["component"] == "sink"
    assert payload["message"] == "something failed"
    assert payload["detail"] == "x"


def test_enabled_flag_read_from_environment(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("DBLOG_FILE_CORE__INTERNAL_LOGGING_ENABLED", "true")
    diagnostics.debug("logger", "hello")
    assert '"DEBUG"' in capsys.readouterr().err


def test_sink_failure_is_reported(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    diagnostics.set_enabled(True)
    directory = tmp_path / "dir"
    directory.mkdir()

    BoundedFileSink(directory).append("x", max_lines=1)

    payload = orjson.loads(capsys.readouterr().err.strip())
    assert payload["component"] == "sink"
    assert payload["sink"] == "bounded-file"
    assert payload["error"] == "IsADirectoryError"
