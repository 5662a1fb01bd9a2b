"""
Root pytest configuration.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from dblog_file.core.config_store import StaticSettingsStore
from dblog_file.core.levels import LogLevel
from dblog_file.core.logger import LogSink
from dblog_file.core.settings import SinkSettings
from dblog_file.plugins.sinks.bounded_file import BoundedFileSink

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 45)


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "critical: Tests that must never fail - core functionality",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests exercising the HTTP surface or several threads",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (may be slow)",
    )


@pytest.fixture(autouse=True)
def reset_diagnostics_cache() -> Generator[None, None, None]:
    """Reset the diagnostics module cache before each test.

    The diagnostics module caches the ``internal_logging_enabled`` setting at
    first access. Resetting it keeps tests from inheriting that state.
    """
    import dblog_file.core.diagnostics as diag

    diag._internal_logging_enabled = None
    yield
    diag._internal_logging_enabled = None


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop DBLOG_FILE_* variables from the developer's environment."""
    for key in list(os.environ):
        if key.upper().startswith("DBLOG_FILE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    return tmp_path / "dblog-file.log"


@pytest.fixture
def enabled_store() -> StaticSettingsStore:
    """Store with every level enabled and a generous cap."""
    return StaticSettingsStore(
        SinkSettings(enabled=True, count=1000, types=list(LogLevel))
    )


@pytest.fixture
def make_sink(log_path: Path) -> Callable[..., LogSink]:
    """Build a ``LogSink`` on ``log_path`` with a fixed clock and no identity."""

    def _make(
        store: Any = None,
        *,
        delegate: Any = None,
        path: Path | None = None,
        **options: Any,
    ) -> LogSink:
        options.setdefault("clock", lambda: FIXED_NOW)
        return LogSink(
            BoundedFileSink(path or log_path),
            settings_store=store if store is not None else StaticSettingsStore(),
            delegate=delegate,
            **options,
        )

    return _make
