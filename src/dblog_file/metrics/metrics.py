"""
Metrics collection for the bounded log file.

Implements minimal Prometheus-compatible counters for the sink's write path.

Design goals:
- Zero global state; each collector owns an isolated registry
- Safe no-op exporter behavior when metrics are disabled by settings
- In-memory counters are always kept so tests can assert on them
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from prometheus_client import CollectorRegistry, Counter


@dataclass
class SinkMetrics:
    """Captured runtime metrics for quick assertions in tests."""

    lines_written: int = 0
    lines_trimmed: int = 0
    records_gated: int = 0
    write_failures: int = 0


class MetricsCollector:
    """Sink-scoped metrics collector.

    If metrics are disabled, all exporter calls are skipped while basic
    in-memory counters are still tracked.
    """

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._lock = threading.Lock()
        self._state = SinkMetrics()

        self._c_written: Any | None = None
        self._c_trimmed: Any | None = None
        self._c_gated: Any | None = None
        self._c_failures: Any | None = None
        self._registry: CollectorRegistry | None = None

        if self._enabled:
            # Isolated registry avoids duplicate registration across instances
            self._registry = CollectorRegistry()
            self._c_written = Counter(
                "dblog_file_lines_written_total",
                "Total number of lines appended to the log file",
                registry=self._registry,
            )
            self._c_trimmed = Counter(
                "dblog_file_lines_trimmed_total",
                "Total number of oldest lines dropped to respect the line cap",
                registry=self._registry,
            )
            self._c_gated = Counter(
                "dblog_file_records_gated_total",
                "Records not written because the sink is disabled or the level is filtered",
                ["reason"],
                registry=self._registry,
            )
            self._c_failures = Counter(
                "dblog_file_write_failures_total",
                "Contained failures while formatting or writing a record",
                ["stage"],
                registry=self._registry,
            )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    def record_line_written(self, *, trimmed: int = 0) -> None:
        with self._lock:
            self._state.lines_written += 1
            self._state.lines_trimmed += trimmed
        if not self._enabled:
            return
        if self._c_written is not None:
            self._c_written.inc()
        if trimmed and self._c_trimmed is not None:
            self._c_trimmed.inc(trimmed)

    def record_gated(self, *, reason: str) -> None:
        with self._lock:
            self._state.records_gated += 1
        if self._enabled and self._c_gated is not None:
            self._c_gated.labels(reason=reason).inc()

    def record_failure(self, *, stage: str) -> None:
        with self._lock:
            self._state.write_failures += 1
        if self._enabled and self._c_failures is not None:
            self._c_failures.labels(stage=stage).inc()

    def snapshot(self) -> SinkMetrics:
        with self._lock:
            return SinkMetrics(
                lines_written=self._state.lines_written,
                lines_trimmed=self._state.lines_trimmed,
                records_gated=self._state.records_gated,
                write_failures=self._state.write_failures,
            )
