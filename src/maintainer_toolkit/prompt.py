# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Prompt registration utilities.

Prompt arguments are declared as an :class:`~maintainer_toolkit.schema.Object`
whose fields become the advertised ``PromptArgument`` entries.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar

from mcp import types

from .adapters import normalize_prompt_messages
from .capability import ActiveServer, Capability, CapabilityKind, HandlerFn, attach_spec, extract_spec
from .schema import Object, SchemaNode


@dataclass(frozen=True, slots=True)
class PromptSpec(Capability):
    title: str | None = None

    kind: ClassVar[CapabilityKind] = "prompt"

    def shape(self, value: Any) -> tuple[types.PromptMessage, ...]:
        return normalize_prompt_messages(value)

    def arguments(self) -> list[types.PromptArgument]:
        fields = self.input_schema.fields if isinstance(self.input_schema, Object) else {}
        return [
            types.PromptArgument(name=name, description=node.description, required=node.required)
            for name, node in fields.items()
        ]

    def describe(self) -> types.Prompt:
        return types.Prompt(
            name=self.name,
            title=self.title,
            description=self.description or None,
            arguments=self.arguments() or None,
        )


_PROMPT_ATTR = "__toolkit_prompt__"
_ACTIVE_SERVER = ActiveServer("prompt")

get_active_server = _ACTIVE_SERVER.get
set_active_server = _ACTIVE_SERVER.set
reset_active_server = _ACTIVE_SERVER.reset


def prompt(
    name: str | None = None,
    *,
    description: str | None = None,
    arguments: SchemaNode | None = None,
    title: str | None = None,
) -> Callable[[HandlerFn], HandlerFn]:
    """Register a prompt renderer.

    The function receives validated arguments and returns a string, a
    ``PromptMessage``, a ``{"role", "content"}`` mapping, or a list of those.
    """

    def decorator(fn: HandlerFn) -> HandlerFn:
        spec = PromptSpec(
            name=name or fn.__name__,
            fn=fn,
            description=(description if description is not None else (fn.__doc__ or "")).strip(),
            input_schema=arguments if arguments is not None else Object(),
            title=title,
        )
        attach_spec(fn, _PROMPT_ATTR, spec)

        server = get_active_server()
        if server is not None:
            server.register_prompt(spec)
        return fn

    return decorator


def extract_prompt_spec(fn: HandlerFn) -> PromptSpec | None:
    return extract_spec(fn, _PROMPT_ATTR, PromptSpec)  # type: ignore[return-value]


__all__ = [
    "PromptSpec",
    "prompt",
    "extract_prompt_spec",
    "get_active_server",
    "set_active_server",
    "reset_active_server",
]
