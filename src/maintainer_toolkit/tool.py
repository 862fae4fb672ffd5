# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Tool registration utilities.

When a :class:`~maintainer_toolkit.server.MCPServer` instance enters its
:meth:`binding <maintainer_toolkit.server.MCPServer.binding>` context,
functions decorated with :func:`tool` are registered as MCP tools in
declaration order.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar

from mcp import types

from .adapters import normalize_tool_content
from .capability import ActiveServer, Capability, CapabilityKind, HandlerFn, attach_spec, extract_spec
from .schema import Object, SchemaNode


@dataclass(frozen=True, slots=True)
class ToolSpec(Capability):
    """In-memory representation of a tool definition."""

    title: str | None = None
    annotations: dict[str, Any] | None = None

    kind: ClassVar[CapabilityKind] = "tool"

    def shape(self, value: Any) -> tuple[types.ContentBlock, ...]:
        return normalize_tool_content(value)

    def describe(self) -> types.Tool:
        annotations = None
        if self.annotations or self.title is not None:
            payload = dict(self.annotations or {})
            if self.title is not None:
                payload.setdefault("title", self.title)
            annotations = types.ToolAnnotations.model_validate(payload)
        return types.Tool(
            name=self.name,
            title=self.title,
            description=self.description or None,
            inputSchema=self.json_schema(),
            annotations=annotations,
        )


_TOOL_ATTR = "__toolkit_tool__"
_ACTIVE_SERVER = ActiveServer("tool")

get_active_server = _ACTIVE_SERVER.get
set_active_server = _ACTIVE_SERVER.set
reset_active_server = _ACTIVE_SERVER.reset


def tool(
    name: str | None = None,
    *,
    description: str | None = None,
    input_schema: SchemaNode | None = None,
    title: str | None = None,
    annotations: dict[str, Any] | None = None,
) -> Callable[[HandlerFn], HandlerFn]:
    """Decorator that marks a callable as an MCP tool.

    Validated arguments are passed to the function as keyword arguments.  The
    function may be sync or async and may return anything
    :func:`~maintainer_toolkit.adapters.normalize_tool_content` understands.
    """

    def decorator(fn: HandlerFn) -> HandlerFn:
        spec = ToolSpec(
            name=name or fn.__name__,
            fn=fn,
            description=(description if description is not None else (fn.__doc__ or "")).strip(),
            input_schema=input_schema if input_schema is not None else Object(),
            title=title,
            annotations=annotations,
        )
        attach_spec(fn, _TOOL_ATTR, spec)

        server = get_active_server()
        if server is not None:
            server.register_tool(spec)
        return fn

    return decorator


def extract_tool_spec(fn: HandlerFn) -> ToolSpec | None:
    """Return the attached :class:`ToolSpec` for *fn*, if present."""

    return extract_spec(fn, _TOOL_ATTR, ToolSpec)  # type: ignore[return-value]


__all__ = [
    "ToolSpec",
    "tool",
    "extract_tool_spec",
    "get_active_server",
    "set_active_server",
    "reset_active_server",
]
