"""
Delegating logger that mirrors records into the bounded log file.

``LogSink`` has the call shape of a structured logger: ``log(level, message,
context)`` plus one method per severity. Each call

1. forwards the raw record to the wrapped logger,
2. loads the sink settings (never cached),
3. gates on ``enabled`` and the allowed levels,
4. formats one line and appends it, trimming the oldest lines first.

Steps 2-4 never raise. A failure in the wrapped logger still propagates to
the caller, after the record has been offered to the file.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping

from .. import context as request_context
from ..metrics.metrics import MetricsCollector
from ..plugins.filters.level import LevelFilter
from ..plugins.sinks.bounded_file import BoundedFileSink
from . import diagnostics
from .config_store import SettingsStore
from .delegates import FanOutDelegate, LoggerDelegate, as_delegate
from .formatting import format_line
from .levels import LogLevel
from .settings import SinkSettings

ActorProvider = Callable[[], "str | None"]
ClientIpProvider = Callable[[], "str | None"]
Clock = Callable[[], datetime]


class LogSink:
    """Logger facade that delegates first, then persists to a bounded file."""

    def __init__(
        self,
        file: BoundedFileSink,
        *,
        settings_store: SettingsStore,
        delegate: Any = None,
        actor_provider: ActorProvider = request_context.current_actor,
        client_ip_provider: ClientIpProvider = request_context.current_client_ip,
        anonymous_label: str = "Anonymous",
        clock: Clock = datetime.now,
        metrics: MetricsCollector | None = None,
        channel: str | None = None,
    ) -> None:
        self._file = file
        self._settings_store = settings_store
        self._delegate: LoggerDelegate = as_delegate(delegate)
        self._actor_provider = actor_provider
        self._client_ip_provider = client_ip_provider
        self._anonymous_label = anonymous_label
        self._clock = clock
        self._metrics = metrics
        self._channel = channel

    @property
    def file(self) -> BoundedFileSink:
        return self._file

    @property
    def channel(self) -> str | None:
        return self._channel

    @property
    def delegate(self) -> LoggerDelegate:
        return self._delegate

    def log(
        self,
        level: LogLevel | str,
        message: str,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx: Mapping[str, Any] = context if context is not None else {}
        try:
            self._delegate.log(str(level), message, ctx)
        finally:
            self.persist(level, message, ctx)

    record = log

    def persist(
        self,
        level: LogLevel | str,
        message: str,
        context: Mapping[str, Any] | None = None,
    ) -> bool:
        """Gate, format and append one record without delegating.

        Returns True when a line was written.
        """
        settings = self._load_settings()
        if settings is None:
            self._gated("config")
            return False
        reason = LevelFilter.from_settings(settings).reject_reason(level)
        if reason is not None:
            if reason == "unknown_level":
                diagnostics.warn(
                    "logger",
                    "record with unknown level not persisted",
                    level=str(level),
                    channel=self._channel,
                )
            self._gated(reason)
            return False
        try:
            line = self.format(level, message, context)
        except Exception as e:
            diagnostics.warn(
                "logger",
                "record formatting failed",
                error=type(e).__name__,
                detail=str(e),
                channel=self._channel,
            )
            if self._metrics is not None:
                self._metrics.record_failure(stage="format")
            return False
        return self._file.append(line, max_lines=settings.count)

    def format(
        self,
        level: LogLevel | str,
        message: str,
        context: Mapping[str, Any] | None = None,
    ) -> str:
        """Render the line that ``persist`` would write."""
        return format_line(
            level,
            message,
            context,
            actor=self._actor_provider() or self._anonymous_label,
            client_ip=self._client_ip_provider(),
            now=self._clock(),
        )

    def _load_settings(self) -> SinkSettings | None:
        try:
            return self._settings_store.load()
        except Exception as e:
            diagnostics.warn(
                "logger",
                "sink settings unavailable; treating as disabled",
                error=type(e).__name__,
                detail=str(e),
            )
            return None

    def _gated(self, reason: str) -> None:
        if self._metrics is not None:
            self._metrics.record_gated(reason=reason)

    def emergency(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.EMERGENCY, message, context)

    def alert(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.ALERT, message, context)

    def critical(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.CRITICAL, message, context)

    def error(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.ERROR, message, context)

    def warning(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.WARNING, message, context)

    def notice(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.NOTICE, message, context)

    def info(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.INFO, message, context)

    def debug(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.DEBUG, message, context)


class LogSinkFactory:
    """Hand out one ``LogSink`` per channel, all sharing one file.

    ``original_factory`` returns the wrapped logger for a channel name;
    by default that is ``logging.getLogger``.
    """

    def __init__(
        self,
        file: BoundedFileSink,
        *,
        settings_store: SettingsStore,
        original_factory: Callable[[str], Any] = logging.getLogger,
        **sink_options: Any,
    ) -> None:
        self._file = file
        self._settings_store = settings_store
        self._original_factory = original_factory
        self._sink_options = sink_options
        self._extra: list[tuple[int, int, LoggerDelegate]] = []

    @property
    def file(self) -> BoundedFileSink:
        return self._file

    @property
    def settings_store(self) -> SettingsStore:
        return self._settings_store

    def get(self, channel: str) -> LogSink:
        delegate: LoggerDelegate = as_delegate(self._original_factory(channel))
        if self._extra:
            ordered = [d for _, _, d in sorted(self._extra, key=lambda e: (-e[0], e[1]))]
            delegate = FanOutDelegate([delegate, *ordered])
        return LogSink(
            self._file,
            settings_store=self._settings_store,
            delegate=delegate,
            channel=channel,
            **self._sink_options,
        )

    def add_logger(self, logger: Any, priority: int = 0) -> LogSinkFactory:
        """Forward every channel to ``logger`` as well, higher priority first."""
        self._extra.append((priority, len(self._extra), as_delegate(logger)))
        return self
