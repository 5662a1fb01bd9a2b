"""
Internal diagnostics for contained, non-fatal errors.

The logging path swallows its own failures so that logging can never break
the application. ``warn()`` is where those failures become visible: when
``DBLOG_FILE_CORE__INTERNAL_LOGGING_ENABLED`` is true a single JSON line is
written to stderr. Diagnostics never go through the sink itself and never
raise.
"""

from __future__ import annotations

import sys
import threading
import time
from typing import Any

import orjson

# Resolved lazily from Settings on first use; tests reset it to None
_internal_logging_enabled: bool | None = None
_lock = threading.Lock()


def _is_enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        try:
            from .settings import Settings

            _internal_logging_enabled = bool(Settings().core.internal_logging_enabled)
        except Exception:
            _internal_logging_enabled = False
    return _internal_logging_enabled


def set_enabled(enabled: bool) -> None:
    """Override the environment setting for the rest of the process."""
    global _internal_logging_enabled
    _internal_logging_enabled = bool(enabled)


def _emit(level: str, component: str, message: str, fields: dict[str, Any]) -> None:
    if not _is_enabled():
        return
    payload: dict[str, Any] = {
        "timestamp": time.time(),
        "level": level,
        "logger": "dblog_file.diagnostics",
        "component": component,
        "message": message,
    }
    payload.update(fields)
    try:
        data = orjson.dumps(payload, default=str)
        with _lock:
            sys.stderr.write(data.decode("utf-8") + "\n")
            sys.stderr.flush()
    except Exception:
        # Diagnostics must never raise into the logging path
        return


def warn(component: str, message: str, **fields: Any) -> None:
    """Report a contained failure in ``component``."""
    _emit("WARN", component, message, fields)


def debug(component: str, message: str, **fields: Any) -> None:
    _emit("DEBUG", component, message, fields)
