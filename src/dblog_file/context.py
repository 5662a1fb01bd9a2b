"""Request-scoped identity for log lines.

Each line names the acting user and the client address of the request that
produced it. Both live in contextvars so they follow the request through
async code and ``asyncio.to_thread`` without being passed around.

Example:
    >>> from dblog_file.context import request_scope
    >>> with request_scope(actor="admin", client_ip="10.0.0.1"):
    ...     logger.error("Payment failed for {order}", {"order": 42})
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import Iterator

__all__ = [
    "bind_request",
    "current_actor",
    "current_client_ip",
    "request_scope",
    "reset_request",
]

_actor: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "dblog_file_actor", default=None
)
_client_ip: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "dblog_file_client_ip", default=None
)

_Tokens = tuple[contextvars.Token, contextvars.Token]


def current_actor() -> str | None:
    """Display name bound to the current request, if any."""
    return _actor.get()


def current_client_ip() -> str | None:
    """Client address bound to the current request, if any."""
    return _client_ip.get()


def bind_request(*, actor: str | None = None, client_ip: str | None = None) -> _Tokens:
    """Bind identity for the current context; pass the result to ``reset_request``."""
    return (_actor.set(actor or None), _client_ip.set(client_ip or None))


def reset_request(tokens: _Tokens) -> None:
    actor_token, ip_token = tokens
    _actor.reset(actor_token)
    _client_ip.reset(ip_token)


@contextmanager
def request_scope(
    *, actor: str | None = None, client_ip: str | None = None
) -> Iterator[None]:
    """Bind identity for the duration of a ``with`` block."""
    tokens = bind_request(actor=actor, client_ip=client_ip)
    try:
        yield
    finally:
        reset_request(tokens)
