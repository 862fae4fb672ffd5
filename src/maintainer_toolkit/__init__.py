# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""MCP maintainer toolkit: a multi-binding MCP server and its capability primitives."""

from __future__ import annotations

from . import schema
from .context import Context, get_context
from .errors import DuplicateNameError, HandlerFault, NotFoundError, ToolkitError, TransportFault, ValidationError
from .prompt import prompt
from .resource import resource
from .server import MCPServer
from .tool import tool


__version__ = "0.1.0"

__all__ = [
    "MCPServer",
    "tool",
    "resource",
    "prompt",
    "schema",
    "Context",
    "get_context",
    "ToolkitError",
    "DuplicateNameError",
    "NotFoundError",
    "ValidationError",
    "HandlerFault",
    "TransportFault",
]
