from __future__ import annotations

import logging
import uuid
from collections.abc import Generator
from pathlib import Path
from typing import Callable

import orjson
import pytest

from dblog_file.core.config_store import StaticSettingsStore
from dblog_file.core.logger import LogSink
from dblog_file.core.settings import SinkSettings
from dblog_file.core.stdlib_bridge import (
    BoundedFileHandler,
    enable_stdlib_bridge,
    record_context,
)


@pytest.fixture
def std_logger() -> Generator[logging.Logger, None, None]:
    logger = logging.getLogger(f"dblog-bridge-{uuid.uuid4().hex}")
    logger.propagate = False
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)


def _context_of(line: str) -> dict:
    return orjson.loads(line.split("Original context: ", 1)[1])


def test_forwards_message_and_extras(
    make_sink: Callable[..., LogSink],
    enabled_store: StaticSettingsStore,
    std_logger: logging.Logger,
    log_path: Path,
) -> None:
    sink = make_sink(enabled_store)
    handler = enable_stdlib_bridge(sink, logger=std_logger, level=logging.DEBUG)

    std_logger.warning("disk %s low", "/var", extra={"host": "db1", "pct": 93})

    assert isinstance(handler, BoundedFileHandler)
    line = log_path.read_text(encoding="utf-8")
    assert "] [warning] [" in line
    assert "disk /var low" in line
    assert _context_of(line) == {"host": "db1", "pct": 93}


def test_handler_respects_sink_gating(
    make_sink: Callable[..., LogSink], std_logger: logging.Logger, log_path: Path
) -> None:
    sink = make_sink(StaticSettingsStore(SinkSettings(enabled=True, types=["error"])))
    enable_stdlib_bridge(sink, logger=std_logger, level=logging.DEBUG)

    std_logger.info("skipped")
    std_logger.error("kept")

    content = log_path.read_text(encoding="utf-8")
    assert "skipped" not in content
    assert "kept" in content


def test_exception_info_added_to_context(
    make_sink: Callable[..., LogSink],
    enabled_store: StaticSettingsStore,
    std_logger: logging.Logger,
    log_path: Path,
) -> None:
    enable_stdlib_bridge(make_sink(enabled_store), logger=std_logger)

    try:
        raise KeyError("missing")
    except KeyError:
        std_logger.exception("lookup failed")

    line = log_path.read_text(encoding="utf-8")
    assert "] [error] [" in line
    assert _context_of(line) == {"exception": "KeyError: 'missing'"}


def test_records_from_stdlib_delegate_are_not_duplicated(
    make_sink: Callable[..., LogSink],
    enabled_store: StaticSettingsStore,
    std_logger: logging.Logger,
    log_path: Path,
) -> None:
    sink = make_sink(enabled_store, delegate=std_logger)
    enable_stdlib_bridge(sink, logger=std_logger, level=logging.DEBUG)

    sink.error("once {n}", {"n": 1})

    assert log_path.read_text(encoding="utf-8").count("once 1") == 1


def test_remove_existing_handlers(make_sink: Callable[..., LogSink], std_logger: logging.Logger) -> None:
    old = logging.NullHandler()
    std_logger.addHandler(old)

    handler = enable_stdlib_bridge(
        make_sink(), logger=std_logger, remove_existing_handlers=True
    )

    assert std_logger.handlers == [handler]
    assert std_logger.level == logging.INFO


def test_record_context_includes_nested_context() -> None:
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "m", (), None)
    record.context = {"a": 1}
    record.user = "bob"
    assert record_context(record) == {"a": 1, "user": "bob"}
