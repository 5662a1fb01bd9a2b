"""
Adapters for the logging facility wrapped by ``LogSink``.

Every record reaches the wrapped facility before the sink does anything
else, so installing the sink never suppresses existing logging.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Protocol, runtime_checkable

from .errors import UnknownLevelError
from .levels import LogLevel

# Set on stdlib records produced by StdlibDelegate so the stdlib bridge does
# not persist them a second time
FORWARDED_ATTR = "dblog_file_forwarded"


@runtime_checkable
class LoggerDelegate(Protocol):
    def log(self, level: str, message: str, context: Mapping[str, Any]) -> None:
        ...  # pragma: no cover - structural protocol


class StdlibDelegate:
    """Forward records to a ``logging.Logger``.

    The level is mapped onto the stdlib scale (unknown names become INFO),
    the message template is passed through unformatted and the context is
    attached as ``record.context``.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def log(self, level: str, message: str, context: Mapping[str, Any]) -> None:
        try:
            levelno = LogLevel.parse(level).priority
        except UnknownLevelError:
            levelno = logging.INFO
        self._logger.log(
            levelno,
            message,
            extra={"context": dict(context), FORWARDED_ATTR: True},
        )


class FanOutDelegate:
    """Forward to several delegates in order; the first failure propagates."""

    def __init__(self, delegates: Iterable[LoggerDelegate]) -> None:
        self._delegates = tuple(delegates)

    @property
    def delegates(self) -> tuple[LoggerDelegate, ...]:
        return self._delegates

    def log(self, level: str, message: str, context: Mapping[str, Any]) -> None:
        for delegate in self._delegates:
            delegate.log(level, message, context)


class NullDelegate:
    def log(self, level: str, message: str, context: Mapping[str, Any]) -> None:
        return None


def as_delegate(target: Any) -> LoggerDelegate:
    """Wrap ``target`` as a delegate.

    Accepts a ``logging.Logger`` (or ``LoggerAdapter``), an object that
    already has ``log(level, message, context)``, or None.
    """
    if target is None:
        return NullDelegate()
    if isinstance(target, (logging.Logger, logging.LoggerAdapter)):
        return StdlibDelegate(target)  # type: ignore[arg-type]
    if callable(getattr(target, "log", None)):
        return target  # type: ignore[no-any-return]
    raise TypeError(f"Cannot use {type(target).__name__} as a logger delegate")
