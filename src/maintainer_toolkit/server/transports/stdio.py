# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Persistent-stream binding over STDIO.

Delegates framing to the SDK's ``stdio_server`` helper, which handles
newline-delimited JSON-RPC over ``stdin``/``stdout``.  One process serves one
session; the session ends when stdin closes.
"""

from __future__ import annotations

from mcp.server.stdio import stdio_server

from .base import BaseTransport


def get_stdio_server():
    """Return the SDK's stdio context manager.

    Separated into a helper so tests can patch it with in-memory transports.
    """
    return stdio_server


class StdioTransport(BaseTransport):
    """Run an :class:`~maintainer_toolkit.server.MCPServer` over STDIO."""

    TRANSPORT = ("stdio", "STDIO", "Standard IO")

    async def run(self, *, raise_exceptions: bool = False, stateless: bool = False) -> None:
        self._announce_binding()
        stdio_ctx = get_stdio_server()
        init_options = self.server.create_initialization_options()

        async with stdio_ctx() as (read_stream, write_stream):
            await self.server.run(
                read_stream, write_stream, init_options, raise_exceptions=raise_exceptions, stateless=stateless
            )


__all__ = ["StdioTransport", "get_stdio_server"]
