# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Push-event binding over Server-Sent Events.

A ``GET`` on the stream path opens one session and holds an event stream for
server-to-client traffic; client requests arrive as ``POST`` on the message
path carrying the ``session_id`` query parameter.  The session ends when the
event stream disconnects.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from mcp.server.sse import SseServerTransport
from starlette.routing import Mount, Route

from ._http import HttpBinding, SessionEndpoint


if TYPE_CHECKING:
    from mcp.server.transport_security import TransportSecuritySettings
    from starlette.types import Receive, Scope, Send

    from ..core import MCPServer


class SseSessionManager:
    """Route SSE ``GET`` and message ``POST`` requests to one SDK transport."""

    def __init__(
        self,
        server: MCPServer,
        *,
        message_path: str = "/messages/",
        security_settings: TransportSecuritySettings | None = None,
    ) -> None:
        self._server = server
        self.message_path = message_path
        self._transport = SseServerTransport(message_path, security_settings=security_settings)

    @asynccontextmanager
    async def run(self) -> AsyncIterator[None]:
        # Each GET runs its own session to completion; nothing to start up.
        yield

    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("method") == "GET":
            async with self._transport.connect_sse(scope, receive, send) as (read_stream, write_stream):
                await self._server.run(read_stream, write_stream, self._server.create_initialization_options())
            return
        await self._transport.handle_post_message(scope, receive, send)


class SseTransport(HttpBinding):
    """Serve an :class:`~maintainer_toolkit.server.MCPServer` over SSE."""

    TRANSPORT = ("sse", "SSE", "Server-Sent Events")
    DEFAULT_PATH = "/sse"
    MESSAGE_PATH = "/messages/"

    def _session_manager(self) -> SseSessionManager:
        return SseSessionManager(self.server, message_path=self.MESSAGE_PATH, security_settings=self.security_settings)

    def _routes(self, path: str, endpoint: SessionEndpoint) -> list[Route | Mount]:
        return [Route(path, endpoint, methods=["GET"]), Mount(self.MESSAGE_PATH, app=endpoint)]


__all__ = ["SseSessionManager", "SseTransport"]
