"""
ASGI middleware binding the request identity used in log lines.

The client address comes from the ASGI scope (or the first
``X-Forwarded-For`` hop when trusted); the actor comes from an optional
resolver, typically reading ``request.state.user``.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, MutableMapping

from starlette.requests import Request

from ..context import bind_request, reset_request
from ..core import diagnostics

Scope = MutableMapping[str, Any]
Receive = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send = Callable[[MutableMapping[str, Any]], Awaitable[None]]
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]
ActorResolver = Callable[[Request], "str | None"]


def _forwarded_for(scope: Scope) -> str | None:
    for name, value in scope.get("headers") or ():
        if name.lower() == b"x-forwarded-for":
            first = value.decode("latin-1").split(",")[0].strip()
            return first or None
    return None


class RequestContextMiddleware:
    def __init__(
        self,
        app: ASGIApp,
        *,
        actor_resolver: ActorResolver | None = None,
        trust_forwarded_for: bool = False,
    ) -> None:
        self.app = app
        self._actor_resolver = actor_resolver
        self._trust_forwarded_for = trust_forwarded_for

    def _client_ip(self, scope: Scope) -> str | None:
        if self._trust_forwarded_for:
            forwarded = _forwarded_for(scope)
            if forwarded:
                return forwarded
        client = scope.get("client")
        return client[0] if client else None

    def _actor(self, scope: Scope) -> str | None:
        if self._actor_resolver is None:
            return None
        try:
            return self._actor_resolver(Request(scope))
        except Exception as e:
            diagnostics.warn(
                "middleware",
                "actor resolver failed",
                error=type(e).__name__,
                detail=str(e),
            )
            return None

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        tokens = bind_request(actor=self._actor(scope), client_ip=self._client_ip(scope))
        try:
            await self.app(scope, receive, send)
        finally:
            reset_request(tokens)
