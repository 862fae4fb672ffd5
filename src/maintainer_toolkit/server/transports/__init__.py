# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Transport bindings for toolkit servers.

These thin wrappers isolate the reference SDK's transport primitives so that
applications can swap or extend them without touching the core server class.
"""

from __future__ import annotations

from ._http import HttpBinding, SessionEndpoint
from .base import BaseTransport, TransportFactory
from .sse import SseSessionManager, SseTransport
from .stdio import StdioTransport
from .streamable_http import StreamableHTTPTransport


__all__ = [
    "BaseTransport",
    "HttpBinding",
    "SessionEndpoint",
    "SseSessionManager",
    "SseTransport",
    "StdioTransport",
    "StreamableHTTPTransport",
    "TransportFactory",
]
