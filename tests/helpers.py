# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Shared test helpers for toolkit server tests."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import anyio
from mcp import types
from mcp.client.session import ClientSession
from mcp.shared.session import RequestResponder

from maintainer_toolkit.server import MCPServer


class RecordingChannel:
    """Stands in for the SDK ``ServerSession`` and records outbound traffic."""

    def __init__(self, name: str = "recording") -> None:
        self.name = name
        self.broken = False
        self.events: list[tuple[str, dict[str, Any]]] = []

    @property
    def progress_events(self) -> list[dict[str, Any]]:
        return [payload for kind, payload in self.events if kind == "progress"]

    @property
    def updated_uris(self) -> list[str]:
        return [payload["uri"] for kind, payload in self.events if kind == "resource_updated"]

    async def send_progress_notification(
        self, progress_token, progress, total=None, message=None, related_request_id=None
    ) -> None:
        await anyio.lowlevel.checkpoint()
        if self.broken:
            raise anyio.ClosedResourceError
        self.events.append(
            (
                "progress",
                {
                    "token": progress_token,
                    "progress": progress,
                    "total": total,
                    "message": message,
                    "related_request_id": related_request_id,
                },
            )
        )

    async def send_resource_updated(self, uri) -> None:
        await anyio.lowlevel.checkpoint()
        if self.broken:
            raise anyio.BrokenResourceError
        self.events.append(("resource_updated", {"uri": str(uri)}))


class NotificationLog:
    """Client-side message handler that keeps every server notification."""

    def __init__(self) -> None:
        self.notifications: list[types.ServerNotification] = []

    async def __call__(
        self,
        message: RequestResponder[types.ServerRequest, types.ClientResult] | types.ServerNotification | Exception,
    ) -> None:
        if isinstance(message, RequestResponder):
            await message.respond(
                types.ErrorData(code=types.INVALID_REQUEST, message="Test client does not handle server requests")
            )
            return
        if isinstance(message, Exception):  # pragma: no cover - defensive
            raise message
        self.notifications.append(message)

    def methods(self) -> list[str]:
        return [note.root.method for note in self.notifications]

    def count(self, method: str) -> int:
        return self.methods().count(method)


@asynccontextmanager
async def memory_streams() -> AsyncIterator[tuple[Any, Any, Any, Any]]:
    """Yield ``(server_read, server_write, client_read, client_write)`` memory streams."""

    client_to_server_send, client_to_server_recv = anyio.create_memory_object_stream(0)
    server_to_client_send, server_to_client_recv = anyio.create_memory_object_stream(0)
    try:
        yield client_to_server_recv, server_to_client_send, server_to_client_recv, client_to_server_send
    finally:
        for stream in (client_to_server_send, client_to_server_recv, server_to_client_send, server_to_client_recv):
            await stream.aclose()


@asynccontextmanager
async def connected_client(
    server: MCPServer,
    *,
    log: NotificationLog | None = None,
) -> AsyncIterator[ClientSession]:
    """Run ``server`` on in-memory streams and yield an initialized client.

    Leaving the block disconnects the client, which ends the server session.
    """

    existing = {session.id for session in server.active_sessions()}

    async with memory_streams() as (server_read, server_write, client_read, client_write):
        async with anyio.create_task_group() as tg:
            tg.start_soon(server.run, server_read, server_write, server.create_initialization_options())

            async with ClientSession(
                client_read,
                client_write,
                message_handler=log,
                client_info=types.Implementation(name="toolkit-test-client", version="0.0.1"),
            ) as client:
                await client.initialize()
                opened = [session for session in server.active_sessions() if session.id not in existing]
                yield client

            await client_write.aclose()
            await wait_for(lambda: all(session.closed for session in opened), timeout=5)
            tg.cancel_scope.cancel()


async def wait_for(predicate, *, timeout: float = 2.0) -> None:
    with anyio.fail_after(timeout):
        while not predicate():
            await anyio.sleep(0.01)
