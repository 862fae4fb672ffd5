# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Request-stream binding over Streamable HTTP.

Each logical session is keyed by the ``mcp-session-id`` header; the SDK's
session manager multiplexes them and runs one ``MCPServer.run`` per session, so
closing one never touches the others.
"""

from __future__ import annotations

from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.routing import Route

from ._http import HttpBinding, SessionEndpoint


class StreamableHTTPTransport(HttpBinding):
    """Serve an :class:`~maintainer_toolkit.server.MCPServer` over Streamable HTTP."""

    TRANSPORT = ("streamableHttp", "Streamable HTTP", "streamable-http", "shttp")

    def _session_manager(self) -> StreamableHTTPSessionManager:
        return StreamableHTTPSessionManager(
            self.server, security_settings=self.security_settings, stateless=self.stateless
        )

    def _routes(self, path: str, endpoint: SessionEndpoint) -> list[Route]:
        return [Route(path, endpoint)]


__all__ = ["StreamableHTTPTransport"]
