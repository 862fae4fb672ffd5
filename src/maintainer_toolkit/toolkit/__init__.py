# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""The maintainer toolkit server: demo tools, resources and prompts for testing MCP clients."""

from __future__ import annotations

from ..config import ServerSettings
from ..server import MCPServer
from .prompts import register_prompts
from .resources import register_resources
from .tools import register_tools


def create_server(settings: ServerSettings | None = None) -> MCPServer:
    """Build a server exposing the full demo capability set."""

    settings = settings or ServerSettings()
    server = MCPServer(
        settings.server_name,
        version=settings.server_version,
        transport=settings.transport,
        resource_update_interval=settings.resource_update_interval,
        streamable_http_stateless=settings.streamable_http_stateless,
    )
    register_tools(server)
    register_resources(server)
    register_prompts(server)
    return server


__all__ = ["create_server"]
