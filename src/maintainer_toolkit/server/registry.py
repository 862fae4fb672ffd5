# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Ordered capability registry.

One registry exists per capability kind.  Registration happens while the
server is being built; afterwards the registry is only read, so concurrent
sessions may list and resolve without synchronization.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Generic, TypeVar

from ..capability import Capability, CapabilityKind
from ..errors import DuplicateNameError, NotFoundError


CapabilityT = TypeVar("CapabilityT", bound=Capability)


class CapabilityRegistry(Generic[CapabilityT]):
    """Maps capability keys to specs, preserving registration order."""

    def __init__(self, kind: CapabilityKind) -> None:
        self.kind = kind
        self._entries: dict[str, CapabilityT] = {}

    def register(self, capability: CapabilityT) -> CapabilityT:
        if capability.kind != self.kind:
            raise TypeError(f"Cannot register a {capability.kind} in the {self.kind} registry")
        if capability.key in self._entries:
            raise DuplicateNameError(self.kind, capability.key)
        self._entries[capability.key] = capability
        return capability

    def resolve(self, name: str) -> CapabilityT:
        try:
            return self._entries[name]
        except KeyError:
            raise NotFoundError(self.kind, name) from None

    def list(self) -> tuple[CapabilityT, ...]:
        return tuple(self._entries.values())

    @property
    def names(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[CapabilityT]:
        return iter(self.list())

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["CapabilityRegistry"]
