"""
Exception hierarchy for dblog-file.

Errors are raised at API edges (settings persistence, file download, level
parsing). On the logging path they are contained by the sink and reported
through diagnostics instead.
"""

from __future__ import annotations

from typing import Any


class DblogFileError(Exception):
    """Base class for all dblog-file errors."""

    def __init__(self, message: str, *, cause: BaseException | None = None, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.context: dict[str, Any] = dict(context)

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v!r}" for k, v in sorted(self.context.items()))
        return f"{self.message} ({details})"


class ConfigurationError(DblogFileError):
    """Stored configuration is missing required structure or fails validation."""


class ReadOnlySettingsError(ConfigurationError):
    """The configuration store does not support saving."""


class LogFileNotFoundError(DblogFileError):
    """The backing log file is absent or cannot be read."""


class UnknownLevelError(DblogFileError, ValueError):
    """A level name is not one of the eight supported severities."""
