from __future__ import annotations

from .level import LevelFilter, LevelFilterConfig

__all__ = ["LevelFilter", "LevelFilterConfig"]
