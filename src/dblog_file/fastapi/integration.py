"""
FastAPI router exposing the log file to operators.

- ``GET  {prefix}/download`` streams the file as a ``text/plain`` attachment
- ``GET  {prefix}/settings`` returns the sink settings and level options
- ``PUT  {prefix}/settings`` validates and saves new sink settings
"""

from __future__ import annotations

from typing import Sequence

from fastapi import APIRouter, HTTPException, Request, Response, params, status
from pydantic import BaseModel, Field

from ..containers.container import SinkContainer
from ..core.errors import ConfigurationError, LogFileNotFoundError, ReadOnlySettingsError
from ..core.levels import LogLevel, level_options
from ..core.settings import SinkSettings

DOWNLOAD_ROUTE = "dblog_file.download"
SETTINGS_ROUTE = "dblog_file.settings"


class SettingsView(BaseModel):
    enabled: bool
    count: int
    types: list[LogLevel]
    levels: dict[str, str] = Field(
        default_factory=level_options,
        description="Selectable levels, value -> label",
    )
    download_url: str | None = Field(
        default=None,
        description="Present only when the log file exists",
    )


def get_router(
    container: SinkContainer,
    *,
    prefix: str = "/dblog-file",
    dependencies: Sequence[params.Depends] | None = None,
) -> APIRouter:
    """Return a router bound to ``container``'s file and settings store.

    ``dependencies`` run before every route, typically an authentication
    guard such as ``Depends(require_admin)``.
    """
    router = APIRouter(
        prefix=prefix, tags=["dblog-file"], dependencies=list(dependencies or ())
    )
    download_filename = container.settings.file.download_filename

    def _view(request: Request, current: SinkSettings) -> SettingsView:
        url = (
            str(request.url_for(DOWNLOAD_ROUTE)) if container.file.exists() else None
        )
        return SettingsView(
            enabled=current.enabled,
            count=current.count,
            types=list(current.types),
            download_url=url,
        )

    @router.get("/download", name=DOWNLOAD_ROUTE)
    def download() -> Response:
        try:
            content = container.file.read_bytes()
        except LogFileNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
        return Response(
            content=content,
            headers={
                "Content-Type": "text/plain; charset=UTF-8",
                "Content-Disposition": f'attachment; filename="{download_filename}"',
                "Content-Length": str(len(content)),
            },
        )

    @router.get("/settings", name=SETTINGS_ROUTE, response_model=SettingsView)
    def read_settings(request: Request) -> SettingsView:
        try:
            current = container.settings_store.load()
        except ConfigurationError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message
            ) from e
        return _view(request, current)

    @router.put("/settings", response_model=SettingsView)
    def update_settings(request: Request, new: SinkSettings) -> SettingsView:
        try:
            container.settings_store.save(new)
        except ReadOnlySettingsError as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
        # Apply a lowered cap right away instead of on the next write
        container.file.trim(new.count)
        return _view(request, new)

    return router
