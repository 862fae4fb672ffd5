# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Public server-side surface.

The heavy lifting lives in :mod:`maintainer_toolkit.server.core`; this module
re-exports the primitives host applications are expected to import.
"""

from __future__ import annotations

from .core import MCPServer, TransportLiteral
from .dispatcher import ExecutionDispatcher, Result
from .registry import CapabilityRegistry
from .sessions import Session, SessionManager, current_session
from .subscriptions import SubscriptionManager


__all__ = [
    "MCPServer",
    "TransportLiteral",
    "ExecutionDispatcher",
    "Result",
    "CapabilityRegistry",
    "Session",
    "SessionManager",
    "SubscriptionManager",
    "current_session",
]
