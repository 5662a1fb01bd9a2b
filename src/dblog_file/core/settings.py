"""
Configuration models for dblog-file using Pydantic v2 Settings.

Settings are read from the environment with the ``DBLOG_FILE_`` prefix and
``__`` as the nested delimiter, for example::

    DBLOG_FILE_SINK__ENABLED=true
    DBLOG_FILE_SINK__COUNT=500
    DBLOG_FILE_SINK__TYPES='["error", "warning"]'
    DBLOG_FILE_FILE__PATH=/var/log/app/dblog-file.log
"""

from __future__ import annotations

from pathlib import Path
from typing import Final

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .levels import LogLevel

MIN_LINE_COUNT: Final[int] = 1
MAX_LINE_COUNT: Final[int] = 25_000
DEFAULT_FILENAME: Final[str] = "dblog-file.log"


class SinkSettings(BaseModel):
    """Operator-facing switches read by the sink on every call."""

    enabled: bool = Field(
        default=False,
        description="Enable saving log records into the file",
    )
    count: int = Field(
        default=1000,
        ge=MIN_LINE_COUNT,
        le=MAX_LINE_COUNT,
        description="Maximum number of lines kept in the file",
    )
    types: list[LogLevel] = Field(
        default_factory=list,
        description="Levels written to the file (exact match)",
    )

    @field_validator("types", mode="before")
    @classmethod
    def _normalize_types(cls, value: object) -> object:
        if isinstance(value, str):
            value = [part for part in value.split(",") if part.strip()]
        if isinstance(value, (list, tuple, set, frozenset)):
            return [str(v).strip().lower() for v in value]
        return value

    @field_validator("types")
    @classmethod
    def _dedupe_types(cls, value: list[LogLevel]) -> list[LogLevel]:
        seen: list[LogLevel] = []
        for level in value:
            if level not in seen:
                seen.append(level)
        return seen

    @property
    def allowed_levels(self) -> frozenset[LogLevel]:
        return frozenset(self.types)


class FileSettings(BaseModel):
    path: Path = Field(
        default=Path(DEFAULT_FILENAME),
        description="Location of the bounded log file",
    )
    download_filename: str = Field(
        default=DEFAULT_FILENAME,
        description="Filename offered in the download Content-Disposition",
    )

    @field_validator("download_filename")
    @classmethod
    def _ensure_plain_filename(cls, value: str) -> str:
        value = value.strip()
        if not value or any(c in value for c in '/\\"'):
            raise ValueError("download_filename must be a plain file name")
        return value


class StoreSettings(BaseModel):
    path: Path | None = Field(
        default=None,
        description=(
            "JSON file holding operator settings; when unset the sink "
            "settings come from the environment and are read-only"
        ),
    )


class IdentitySettings(BaseModel):
    anonymous_label: str = Field(
        default="Anonymous",
        description="Actor shown when no user is bound to the request",
    )
    trust_forwarded_for: bool = Field(
        default=False,
        description="Take the client address from the first X-Forwarded-For hop",
    )


class CoreSettings(BaseModel):
    enable_metrics: bool = Field(
        default=False,
        description="Enable Prometheus-compatible metrics",
    )
    internal_logging_enabled: bool = Field(
        default=False,
        description="Emit diagnostics for contained internal errors to stderr",
    )


class Settings(BaseSettings):
    """Top-level configuration model."""

    sink: SinkSettings = Field(default_factory=SinkSettings)
    file: FileSettings = Field(default_factory=FileSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    identity: IdentitySettings = Field(default_factory=IdentitySettings)
    core: CoreSettings = Field(default_factory=CoreSettings)

    model_config = SettingsConfigDict(
        env_prefix="DBLOG_FILE_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    def to_dict(self) -> dict[str, object]:
        return self.model_dump(mode="json", exclude_none=True)
