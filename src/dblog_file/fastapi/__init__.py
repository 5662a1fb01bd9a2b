"""
FastAPI integration: download/settings routes and request identity.

Example:
    >>> from fastapi import Depends, FastAPI
    >>> from dblog_file.fastapi import setup_dblog_file
    >>> app = FastAPI()
    >>> container = setup_dblog_file(
    ...     app,
    ...     actor_resolver=lambda r: r.headers.get("x-user"),
    ...     dependencies=[Depends(require_admin)],
    ... )
    >>> logger = container.get_logger("api")
"""

from __future__ import annotations

from typing import Any, Sequence

from fastapi import FastAPI, params

from ..containers.container import SinkContainer
from .integration import SettingsView, get_router
from .middleware import ActorResolver, RequestContextMiddleware

__all__ = [
    "RequestContextMiddleware",
    "SettingsView",
    "get_router",
    "setup_dblog_file",
]


def setup_dblog_file(
    app: FastAPI,
    container: SinkContainer | None = None,
    *,
    prefix: str = "/dblog-file",
    actor_resolver: ActorResolver | None = None,
    dependencies: Sequence[params.Depends] | None = None,
    **container_options: Any,
) -> SinkContainer:
    """Mount the routes and middleware on ``app``; returns the container.

    ``dependencies`` guard every mounted route (see ``get_router``).
    """
    if container is None:
        container = SinkContainer(**container_options)
    app.add_middleware(
        RequestContextMiddleware,
        actor_resolver=actor_resolver,
        trust_forwarded_for=container.settings.identity.trust_forwarded_for,
    )
    app.include_router(get_router(container, prefix=prefix, dependencies=dependencies))
    app.state.dblog_file = container
    return container
