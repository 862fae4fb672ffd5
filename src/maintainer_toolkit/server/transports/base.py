# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Shared transport primitives for :mod:`maintainer_toolkit.server`.

Provides a minimal base class that bindings subclass and a factory signature
that ``MCPServer`` uses to instantiate transports lazily.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable


if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from ..core import MCPServer


class BaseTransport(ABC):
    """Common base for server bindings.

    ``TRANSPORT`` holds the canonical binding name first and a display name
    second.  :meth:`run` returns only when the binding shuts down.
    """

    TRANSPORT: ClassVar[tuple[str, ...]] = ("custom", "Custom")

    def __init__(self, server: "MCPServer") -> None:
        self._server = server

    @property
    def server(self) -> "MCPServer":
        return self._server

    @property
    def transport_name(self) -> str:
        return self.TRANSPORT[0]

    @property
    def transport_display_name(self) -> str:
        return self.TRANSPORT[1] if len(self.TRANSPORT) > 1 else self.TRANSPORT[0]

    def _announce_binding(self) -> None:
        """Tag sessions opened from now on with this binding's name."""

        self.server._use_transport(self.transport_name)

    @abstractmethod
    async def run(self, **kwargs) -> None:
        """Start the transport; parameters depend on the concrete binding."""


@runtime_checkable
class TransportFactory(Protocol):
    """Callable that produces a configured transport for an ``MCPServer``."""

    def __call__(self, server: "MCPServer") -> BaseTransport:  # pragma: no cover - protocol
        ...


__all__ = ["BaseTransport", "TransportFactory"]
