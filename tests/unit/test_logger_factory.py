from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest

import dblog_file
from dblog_file.containers.container import SinkContainer
from dblog_file.core.config_store import EnvSettingsStore, StaticSettingsStore
from dblog_file.core.delegates import FanOutDelegate, StdlibDelegate
from dblog_file.core.logger import LogSinkFactory
from dblog_file.core.settings import Settings, SinkSettings
from dblog_file.plugins.sinks.bounded_file import BoundedFileSink


class Recorder:
    def __init__(self, name: str, calls: list[str]) -> None:
        self.name = name
        self.calls = calls

    def log(self, level: str, message: str, context: Any) -> None:
        self.calls.append(self.name)


def test_get_wraps_original_channel_logger(log_path: Path) -> None:
    factory = LogSinkFactory(BoundedFileSink(log_path), settings_store=StaticSettingsStore())

    sink = factory.get("payments")

    assert sink.channel == "payments"
    assert isinstance(sink.delegate, StdlibDelegate)
    assert sink.delegate.logger is logging.getLogger("payments")


def test_channels_share_file_and_store(log_path: Path) -> None:
    store = StaticSettingsStore(SinkSettings(enabled=True, types=["info"]))
    factory = LogSinkFactory(
        BoundedFileSink(log_path),
        settings_store=store,
        original_factory=lambda channel: None,
    )

    factory.get("a").info("from a")
    factory.get("b").info("from b")

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert [line.split("] ")[-1].split(" Original")[0] for line in lines] == [
        "from a",
        "from b",
    ]


def test_add_logger_fans_out_by_priority(log_path: Path) -> None:
    calls: list[str] = []
    factory = LogSinkFactory(
        BoundedFileSink(log_path),
        settings_store=StaticSettingsStore(),
        original_factory=lambda channel: Recorder(f"original:{channel}", calls),
    )

    result = factory.add_logger(Recorder("low", calls), priority=-5)
    factory.add_logger(Recorder("high", calls), priority=10)
    factory.add_logger(Recorder("high-later", calls), priority=10)

    sink = factory.get("audit")
    sink.info("x")

    assert result is factory
    assert isinstance(sink.delegate, FanOutDelegate)
    assert calls == ["original:audit", "high", "high-later", "low"]


def test_invalid_original_logger_rejected(log_path: Path) -> None:
    factory = LogSinkFactory(
        BoundedFileSink(log_path),
        settings_store=StaticSettingsStore(),
        original_factory=lambda channel: 42,
    )
    with pytest.raises(TypeError):
        factory.get("x")


def test_container_wires_settings(tmp_path: Path) -> None:
    settings = Settings(
        file={"path": tmp_path / "out.log"},
        identity={"anonymous_label": "Visitor"},
        core={"enable_metrics": True},
    )
    container = SinkContainer(
        settings,
        settings_store=StaticSettingsStore(SinkSettings(enabled=True, types=["error"])),
    )

    container.get_logger("api").error("boom")

    assert container.file.path == tmp_path / "out.log"
    assert "[Visitor]" in (tmp_path / "out.log").read_text(encoding="utf-8")
    assert container.metrics.is_enabled
    assert container.metrics.snapshot().lines_written == 1


def test_container_defaults_to_env_store() -> None:
    assert isinstance(SinkContainer(Settings()).settings_store, EnvSettingsStore)


def test_get_logger_reads_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    target = tmp_path / "env.log"
    monkeypatch.setenv("DBLOG_FILE_FILE__PATH", str(target))
    monkeypatch.setenv("DBLOG_FILE_SINK__ENABLED", "true")
    monkeypatch.setenv("DBLOG_FILE_SINK__TYPES", '["warning"]')

    logger = dblog_file.get_logger("env-test")
    logger.warning("Low disk on {host}", {"host": "db1"})

    content = target.read_text(encoding="utf-8")
    assert "Low disk on db1" in content
    assert 'Original context: {"host":"db1"}' in content


def test_get_logger_factory_with_custom_original(tmp_path: Path) -> None:
    calls: list[str] = []
    factory = dblog_file.get_logger_factory(
        settings=Settings(file={"path": tmp_path / "f.log"}),
        settings_store=StaticSettingsStore(),
        original_factory=lambda channel: Recorder(channel, calls),
    )
    factory.get("chan").debug("x")
    assert calls == ["chan"]
