# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Demo prompts: one without arguments, one with a required and an optional argument."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp import types

from ..prompt import prompt
from ..schema import Object, String


if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..server import MCPServer


@prompt("simple_prompt", description="A prompt without arguments")
def simple_prompt() -> str:
    return "This is a simple prompt without arguments."


@prompt(
    "complex_prompt",
    description="A prompt with arguments",
    arguments=Object(
        fields={
            "temperature": String(description="Temperature setting"),
            "style": String(optional=True, description="Output style"),
        }
    ),
)
def complex_prompt(temperature: str, style: str | None = None) -> list[types.PromptMessage]:
    return [
        types.PromptMessage(
            role="user",
            content=types.TextContent(
                type="text",
                text=f"This is a complex prompt with arguments: temperature={temperature}, style={style}",
            ),
        ),
        types.PromptMessage(
            role="assistant",
            content=types.TextContent(
                type="text",
                text=(
                    "I understand. You've provided a complex prompt with temperature and style arguments. "
                    "How would you like me to proceed?"
                ),
            ),
        ),
    ]


PROMPTS = (simple_prompt, complex_prompt)


def register_prompts(server: MCPServer) -> None:
    for fn in PROMPTS:
        server.register_prompt(fn)


__all__ = ["PROMPTS", "register_prompts"]
