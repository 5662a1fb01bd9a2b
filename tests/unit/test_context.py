from __future__ import annotations

import asyncio

from dblog_file.context import (
    bind_request,
    current_actor,
    current_client_ip,
    request_scope,
    reset_request,
)


def test_defaults_are_unset() -> None:
    assert current_actor() is None
    assert current_client_ip() is None


def test_request_scope_binds_and_restores() -> None:
    with request_scope(actor="admin", client_ip="10.1.1.1"):
        assert current_actor() == "admin"
        assert current_client_ip() == "10.1.1.1"
        with request_scope(actor="nested"):
            assert current_actor() == "nested"
            assert current_client_ip() is None
        assert current_actor() == "admin"
    assert current_actor() is None


def test_empty_values_bind_as_none() -> None:
    tokens = bind_request(actor="", client_ip="")
    try:
        assert current_actor() is None
        assert current_client_ip() is None
    finally:
        reset_request(tokens)


def test_identity_follows_to_thread() -> None:
    seen: list[str | None] = []

    async def main() -> None:
        with request_scope(actor="async-user"):
            await asyncio.to_thread(lambda: seen.append(current_actor()))

    asyncio.run(main())
    assert seen == ["async-user"]

