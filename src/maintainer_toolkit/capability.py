# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Shared capability model.

A capability is a named, schema-described operation.  Tools, resources and
prompts subclass :class:`Capability`; each knows how to validate its
arguments, how to shape its handler's output, and how to describe itself in a
listing response.  Instances are immutable once built.
"""

from __future__ import annotations

from collections.abc import Callable
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
import inspect
from typing import TYPE_CHECKING, Any, ClassVar, Literal

from .schema import Object, SchemaNode, to_json_schema, validate


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .server import MCPServer

CapabilityKind = Literal["tool", "resource", "prompt"]
HandlerFn = Callable[..., Any]


@dataclass(frozen=True, slots=True)
class Capability:
    name: str
    fn: HandlerFn
    description: str = ""
    input_schema: SchemaNode = field(default_factory=Object)

    kind: ClassVar[CapabilityKind]

    @property
    def key(self) -> str:
        """Registry key; unique within the capability's kind."""

        return self.name

    def validate(self, arguments: Any) -> dict[str, Any]:
        return validate(self.input_schema, arguments if arguments is not None else {})

    def json_schema(self) -> dict[str, Any]:
        return to_json_schema(self.input_schema)

    def shape(self, value: Any) -> tuple[Any, ...]:
        """Convert handler output into ordered protocol payload items."""

        raise NotImplementedError

    def describe(self) -> Any:
        """Return the protocol listing entry for this capability."""

        raise NotImplementedError


class ActiveServer:
    """Per-kind context variable used for ambient registration.

    While :meth:`MCPServer.binding` is active, decorators register the
    capabilities they build on the bound server.
    """

    def __init__(self, kind: CapabilityKind) -> None:
        self._var: ContextVar[MCPServer | None] = ContextVar(f"_toolkit_active_{kind}_server", default=None)

    def get(self) -> MCPServer | None:
        return self._var.get()

    def set(self, server: MCPServer) -> Token[MCPServer | None]:
        return self._var.set(server)

    def reset(self, token: Token[MCPServer | None]) -> None:
        self._var.reset(token)


def attach_spec(fn: HandlerFn, attr: str, spec: Capability) -> None:
    setattr(fn, attr, spec)


def extract_spec(fn: HandlerFn, attr: str, spec_type: type[Capability]) -> Capability | None:
    spec = getattr(fn, attr, None)
    if isinstance(spec, spec_type):
        return spec
    return None


def undecorated_spec(fn: HandlerFn, spec_type: type[Capability]) -> Capability:
    """Build a schema-less capability for a plain callable.

    An empty schema passes no arguments through, so only callables without
    required parameters qualify.

    Raises:
        TypeError: ``fn`` has a required parameter.
    """

    name = getattr(fn, "__name__", "anonymous")
    required = [
        param.name
        for param in inspect.signature(fn).parameters.values()
        if param.default is param.empty and param.kind not in (param.VAR_POSITIONAL, param.VAR_KEYWORD)
    ]
    if required:
        raise TypeError(
            f"{name} takes required parameters ({', '.join(required)}); declare an input schema with the decorator"
        )
    return spec_type(name=name, fn=fn)


__all__ = [
    "ActiveServer",
    "Capability",
    "CapabilityKind",
    "HandlerFn",
    "attach_spec",
    "extract_spec",
    "undecorated_spec",
]
