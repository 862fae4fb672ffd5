# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Resource registration utilities.

Resources are keyed by URI.  Usage mirrors the :mod:`maintainer_toolkit.tool`
ambient registration pattern; the decorated function takes no arguments and
returns ``str`` (text) or ``bytes`` (binary) content.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar

from mcp import types

from .adapters import normalize_resource_contents
from .capability import ActiveServer, Capability, CapabilityKind, attach_spec, extract_spec


ResourceFn = Callable[[], Any]


@dataclass(frozen=True, slots=True)
class ResourceSpec(Capability):
    """A readable resource.  ``name`` holds the URI."""

    title: str | None = None
    mime_type: str | None = None

    kind: ClassVar[CapabilityKind] = "resource"

    @property
    def uri(self) -> str:
        return self.name

    def shape(self, value: Any) -> tuple[types.TextResourceContents | types.BlobResourceContents, ...]:
        return normalize_resource_contents(self.uri, value, mime_type=self.mime_type)

    def describe(self) -> types.Resource:
        return types.Resource(
            uri=self.uri,  # type: ignore[arg-type]
            name=self.title or self.uri,
            description=self.description or None,
            mimeType=self.mime_type,
        )


_RESOURCE_ATTR = "__toolkit_resource__"
_ACTIVE_SERVER = ActiveServer("resource")

get_active_server = _ACTIVE_SERVER.get
set_active_server = _ACTIVE_SERVER.set
reset_active_server = _ACTIVE_SERVER.reset


def resource(
    uri: str,
    *,
    name: str | None = None,
    description: str | None = None,
    mime_type: str | None = None,
) -> Callable[[ResourceFn], ResourceFn]:
    """Register a resource-producing callable under ``uri``."""

    def decorator(fn: ResourceFn) -> ResourceFn:
        spec = ResourceSpec(
            name=uri,
            fn=fn,
            description=(description if description is not None else (fn.__doc__ or "")).strip(),
            title=name,
            mime_type=mime_type,
        )
        attach_spec(fn, _RESOURCE_ATTR, spec)

        server = get_active_server()
        if server is not None:
            server.register_resource(spec)
        return fn

    return decorator


def extract_resource_spec(fn: ResourceFn) -> ResourceSpec | None:
    return extract_spec(fn, _RESOURCE_ATTR, ResourceSpec)  # type: ignore[return-value]


__all__ = [
    "ResourceSpec",
    "resource",
    "extract_resource_spec",
    "get_active_server",
    "set_active_server",
    "reset_active_server",
]
