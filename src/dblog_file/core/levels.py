"""
Severity levels understood by the sink.

The set is fixed to the eight syslog-style severities. Each level carries a
priority on the stdlib ``logging`` scale (lower = more verbose) so records
coming through the stdlib bridge can be mapped onto it. Gating never uses the
ordering; it is an exact-match membership test.

Example:
    >>> LogLevel.parse("WARNING")
    <LogLevel.WARNING: 'warning'>
    >>> level_from_stdlib(25)
    <LogLevel.NOTICE: 'notice'>
"""

from __future__ import annotations

from enum import Enum
from typing import Final

from .errors import UnknownLevelError


class LogLevel(str, Enum):
    """The eight supported severities, most severe first."""

    EMERGENCY = "emergency"
    ALERT = "alert"
    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    NOTICE = "notice"
    INFO = "info"
    DEBUG = "debug"

    @property
    def label(self) -> str:
        """Human readable label, e.g. ``Emergency``."""
        return self.value.capitalize()

    @property
    def priority(self) -> int:
        return _PRIORITIES[self]

    @classmethod
    def parse(cls, value: LogLevel | str) -> LogLevel:
        """Return the level for ``value`` (case-insensitive).

        Raises:
            UnknownLevelError: If ``value`` names no supported level.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise UnknownLevelError(f"Unknown log level '{value}'", level=value) from e

    def __str__(self) -> str:
        return self.value


_PRIORITIES: Final[dict[LogLevel, int]] = {
    LogLevel.DEBUG: 10,
    LogLevel.INFO: 20,
    LogLevel.NOTICE: 25,
    LogLevel.WARNING: 30,
    LogLevel.ERROR: 40,
    LogLevel.CRITICAL: 50,
    LogLevel.ALERT: 60,
    LogLevel.EMERGENCY: 70,
}


def level_from_stdlib(levelno: int) -> LogLevel:
    """Map a stdlib ``logging`` level number to the closest severity.

    Numbers between two known priorities round down to the less severe
    level; anything below DEBUG is treated as DEBUG.
    """
    chosen = LogLevel.DEBUG
    for level in sorted(_PRIORITIES, key=_PRIORITIES.__getitem__):
        if levelno >= _PRIORITIES[level]:
            chosen = level
    return chosen


def level_options() -> dict[str, str]:
    """Return ``{value: label}`` for every level, most severe first."""
    return {level.value: level.label for level in LogLevel}


def get_level_priority(level: LogLevel | str) -> int:
    """Return the stdlib-scale priority for ``level``.

    Raises:
        UnknownLevelError: If ``level`` names no supported level.
    """
    return LogLevel.parse(level).priority
