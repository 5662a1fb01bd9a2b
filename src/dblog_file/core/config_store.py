"""
Configuration stores for the operator-facing sink settings.

The sink never caches settings: it calls ``load()`` on every record so that
changes made through the settings endpoint or the CLI apply immediately.
"""

from __future__ import annotations

import os
import tempfile
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

import orjson
from pydantic import ValidationError

from .errors import ConfigurationError, ReadOnlySettingsError
from .settings import Settings, SinkSettings


@runtime_checkable
class SettingsStore(Protocol):
    """Source of ``SinkSettings``; ``save`` may be unsupported."""

    def load(self) -> SinkSettings:  # pragma: no cover - structural protocol
        ...

    def save(self, settings: SinkSettings) -> None:  # pragma: no cover
        ...


class EnvSettingsStore:
    """Read-only store that re-reads the process environment on every load."""

    read_only = True

    def load(self) -> SinkSettings:
        try:
            return Settings().sink
        except ValueError as e:  # ValidationError and SettingsError
            raise ConfigurationError("Invalid sink settings in environment", cause=e) from e

    def save(self, settings: SinkSettings) -> None:
        raise ReadOnlySettingsError(
            "Environment-backed settings cannot be saved; configure a store path"
        )


class StaticSettingsStore:
    """In-memory store, mostly useful for embedding and tests."""

    read_only = False

    def __init__(self, settings: SinkSettings | None = None) -> None:
        self._settings = settings if settings is not None else SinkSettings()
        self._lock = threading.Lock()

    def load(self) -> SinkSettings:
        with self._lock:
            return self._settings

    def save(self, settings: SinkSettings) -> None:
        with self._lock:
            self._settings = settings


class JsonFileSettingsStore:
    """Settings persisted as a small JSON document.

    A missing file yields the defaults (feature disabled). Saves go through a
    temporary file and ``os.replace`` so readers never see a partial document.
    """

    read_only = False

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> SinkSettings:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return SinkSettings()
        except OSError as e:
            raise ConfigurationError(
                "Cannot read settings file", cause=e, path=str(self._path)
            ) from e
        try:
            data = orjson.loads(raw) if raw.strip() else {}
            return SinkSettings.model_validate(data)
        except (orjson.JSONDecodeError, ValidationError) as e:
            raise ConfigurationError(
                "Invalid settings file", cause=e, path=str(self._path)
            ) from e

    def save(self, settings: SinkSettings) -> None:
        payload = orjson.dumps(settings.model_dump(mode="json"), option=orjson.OPT_INDENT_2)
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(
                prefix=f".{self._path.name}.", dir=str(self._path.parent)
            )
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(payload)
                os.replace(tmp, self._path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise


def store_from_settings(settings: Settings) -> SettingsStore:
    """Pick the store configured by ``settings.store``."""
    if settings.store.path is not None:
        return JsonFileSettingsStore(settings.store.path)
    return EnvSettingsStore()
