from __future__ import annotations

from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict

from ...core.errors import UnknownLevelError
from ...core.levels import LogLevel
from ...core.settings import SinkSettings


class LevelFilterConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    enabled: bool = False
    allowed_levels: frozenset[LogLevel] = frozenset()


class LevelFilter:
    """Gate records on the master switch and an exact-match level set.

    Severity ordering is deliberately ignored: allowing ``error`` does not
    allow ``critical``.
    """

    name = "level"

    def __init__(
        self,
        *,
        enabled: bool = False,
        allowed_levels: Iterable[LogLevel | str] = (),
    ) -> None:
        self._config = LevelFilterConfig(
            enabled=enabled,
            allowed_levels=frozenset(LogLevel.parse(v) for v in allowed_levels),
        )

    @classmethod
    def from_settings(cls, settings: SinkSettings) -> LevelFilter:
        return cls(enabled=settings.enabled, allowed_levels=settings.allowed_levels)

    @property
    def config(self) -> LevelFilterConfig:
        return self._config

    def reject_reason(self, level: LogLevel | str) -> str | None:
        """Return why ``level`` is rejected, or None if it passes."""
        if not self._config.enabled:
            return "disabled"
        try:
            parsed = LogLevel.parse(level)
        except UnknownLevelError:
            return "unknown_level"
        if parsed not in self._config.allowed_levels:
            return "level"
        return None

    def allows(self, level: LogLevel | str) -> bool:
        return self.reject_reason(level) is None

    def filter(self, event: dict[str, Any]) -> dict[str, Any] | None:
        """Return ``event`` when its ``level`` passes, else None."""
        return event if self.allows(str(event.get("level", ""))) else None
