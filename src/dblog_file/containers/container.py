"""
Component container for dblog-file.

Builds the collaborators of a log file pipeline from one ``Settings``
instance: metrics, the bounded file, the settings store and the per-channel
factory. Each container is isolated; two containers pointing at the same path
still share the per-path file lock.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..core.config_store import SettingsStore, store_from_settings
from ..core.logger import LogSink, LogSinkFactory
from ..core.settings import Settings
from ..metrics.metrics import MetricsCollector
from ..plugins.sinks.bounded_file import BoundedFileSink


class SinkContainer:
    """Wires settings into ready-to-use sink components."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        settings_store: SettingsStore | None = None,
        original_factory: Callable[[str], Any] = logging.getLogger,
        **sink_options: Any,
    ) -> None:
        self.settings = settings if settings is not None else Settings()
        self.metrics = MetricsCollector(enabled=self.settings.core.enable_metrics)
        self.file = BoundedFileSink(self.settings.file.path, metrics=self.metrics)
        self.settings_store = (
            settings_store
            if settings_store is not None
            else store_from_settings(self.settings)
        )
        sink_options.setdefault(
            "anonymous_label", self.settings.identity.anonymous_label
        )
        sink_options.setdefault("metrics", self.metrics)
        self.factory = LogSinkFactory(
            self.file,
            settings_store=self.settings_store,
            original_factory=original_factory,
            **sink_options,
        )

    def get_logger(self, channel: str = "app") -> LogSink:
        return self.factory.get(channel)
