"""
dblog-file: mirror an application's log stream into a bounded text file.

Public entrypoints:

    >>> import dblog_file
    >>> logger = dblog_file.get_logger("payments")
    >>> logger.error("Payment {id} failed", {"id": 42})

The record goes to ``logging.getLogger("payments")`` as usual and, when the
sink is enabled for ``error``, one line is appended to the log file.
"""

from __future__ import annotations

from typing import Any, Callable

from ._version import __version__
from .containers.container import SinkContainer
from .context import request_scope
from .core.config_store import (
    EnvSettingsStore,
    JsonFileSettingsStore,
    SettingsStore,
    StaticSettingsStore,
)
from .core.errors import (
    ConfigurationError,
    DblogFileError,
    LogFileNotFoundError,
    ReadOnlySettingsError,
    UnknownLevelError,
)
from .core.levels import LogLevel
from .core.logger import LogSink, LogSinkFactory
from .core.settings import Settings, SinkSettings
from .core.stdlib_bridge import BoundedFileHandler, enable_stdlib_bridge
from .plugins.sinks.bounded_file import BoundedFileSink

__all__ = [
    "BoundedFileHandler",
    "BoundedFileSink",
    "ConfigurationError",
    "DblogFileError",
    "EnvSettingsStore",
    "JsonFileSettingsStore",
    "LogFileNotFoundError",
    "LogLevel",
    "LogSink",
    "LogSinkFactory",
    "ReadOnlySettingsError",
    "Settings",
    "SettingsStore",
    "SinkContainer",
    "SinkSettings",
    "StaticSettingsStore",
    "UnknownLevelError",
    "__version__",
    "enable_stdlib_bridge",
    "get_logger",
    "get_logger_factory",
    "request_scope",
]


def get_logger_factory(
    *,
    settings: Settings | None = None,
    settings_store: SettingsStore | None = None,
    original_factory: Callable[[str], Any] | None = None,
) -> LogSinkFactory:
    """Return a per-channel factory configured from ``settings`` (or the env)."""
    kwargs: dict[str, Any] = {}
    if original_factory is not None:
        kwargs["original_factory"] = original_factory
    return SinkContainer(settings, settings_store=settings_store, **kwargs).factory


def get_logger(
    channel: str = "app",
    *,
    settings: Settings | None = None,
    settings_store: SettingsStore | None = None,
) -> LogSink:
    """Return a ``LogSink`` wrapping ``logging.getLogger(channel)``."""
    return get_logger_factory(settings=settings, settings_store=settings_store).get(
        channel
    )
