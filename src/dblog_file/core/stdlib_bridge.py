"""
Bridge from the stdlib ``logging`` module into the bounded log file.

Attach ``BoundedFileHandler`` to any stdlib logger and its records are gated,
formatted and appended exactly like records passed to ``LogSink``. The
handler calls ``LogSink.persist`` directly, so nothing is delegated again.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .delegates import FORWARDED_ATTR
from .levels import level_from_stdlib
from .logger import LogSink

# Attributes every LogRecord carries; anything else came from ``extra``
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Collect ``extra`` fields (and a nested ``context`` mapping) of ``record``."""
    ctx: dict[str, Any] = {}
    nested = record.__dict__.get("context")
    if isinstance(nested, Mapping):
        ctx.update(nested)
    for key, value in record.__dict__.items():
        if key in _STANDARD_ATTRS or key in ("context", FORWARDED_ATTR):
            continue
        ctx[key] = value
    if record.exc_info and record.exc_info[1] is not None:
        exc = record.exc_info[1]
        ctx["exception"] = f"{type(exc).__name__}: {exc}"
    return ctx


class BoundedFileHandler(logging.Handler):
    """``logging.Handler`` that persists records through a ``LogSink``."""

    def __init__(self, sink: LogSink, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._sink = sink

    @property
    def sink(self) -> LogSink:
        return self._sink

    def emit(self, record: logging.LogRecord) -> None:
        if getattr(record, FORWARDED_ATTR, False):
            return
        try:
            self._sink.persist(
                level_from_stdlib(record.levelno),
                record.getMessage(),
                record_context(record),
            )
        except Exception:
            self.handleError(record)


def enable_stdlib_bridge(
    sink: LogSink,
    *,
    logger: logging.Logger | None = None,
    level: int = logging.INFO,
    remove_existing_handlers: bool = False,
) -> BoundedFileHandler:
    """Attach a ``BoundedFileHandler`` to ``logger`` (root by default)."""
    target = logger if logger is not None else logging.getLogger()
    if remove_existing_handlers:
        for existing in list(target.handlers):
            target.removeHandler(existing)
    handler = BoundedFileHandler(sink, level=level)
    target.addHandler(handler)
    if target.level == logging.NOTSET or target.level > level:
        target.setLevel(level)
    return handler
