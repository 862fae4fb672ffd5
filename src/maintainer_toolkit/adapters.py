# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Normalize handler return values into MCP payload shapes.

Handlers may return plain strings, content blocks, mappings or lists of
these.  The helpers below flatten them into ordered protocol items while
keeping the handler's production order.
"""

from __future__ import annotations

import base64
from collections.abc import Iterable, Mapping
from typing import Any

from mcp import types
import orjson
from pydantic import TypeAdapter


_CONTENT_ADAPTER: TypeAdapter[types.ContentBlock] = TypeAdapter(types.ContentBlock)
_CONTENT_TYPES = (
    types.TextContent,
    types.ImageContent,
    types.AudioContent,
    types.ResourceLink,
    types.EmbeddedResource,
)


def text_block(
    text: str,
    *,
    priority: float | None = None,
    audience: Iterable[types.Role] | None = None,
    **extra: Any,
) -> types.TextContent:
    """Build a text block, attaching annotations when any are given.

    ``priority`` must lie in ``[0, 1]``; extra keyword arguments are carried
    as additional annotation metadata.
    """

    payload: dict[str, Any] = dict(extra)
    if priority is not None:
        payload["priority"] = priority
    if audience is not None:
        payload["audience"] = list(audience)
    annotations = types.Annotations.model_validate(payload) if payload else None
    return types.TextContent(type="text", text=text, annotations=annotations)


def normalize_tool_content(value: Any) -> tuple[types.ContentBlock, ...]:
    if value is None:
        return ()
    if isinstance(value, types.CallToolResult):
        return tuple(value.content)
    if isinstance(value, _CONTENT_TYPES):
        return (value,)
    if isinstance(value, str):
        return (types.TextContent(type="text", text=value),)
    if isinstance(value, Mapping):
        if "type" in value:
            return (_CONTENT_ADAPTER.validate_python(dict(value)),)
        return (types.TextContent(type="text", text=_dump_json(value)),)
    if isinstance(value, (list, tuple)):
        blocks: list[types.ContentBlock] = []
        for item in value:
            blocks.extend(normalize_tool_content(item))
        return tuple(blocks)
    return (types.TextContent(type="text", text=str(value)),)


def normalize_prompt_messages(value: Any) -> tuple[types.PromptMessage, ...]:
    if value is None:
        return ()
    if isinstance(value, types.PromptMessage):
        return (value,)
    if isinstance(value, str):
        return (types.PromptMessage(role="user", content=types.TextContent(type="text", text=value)),)
    if isinstance(value, Mapping):
        return (types.PromptMessage.model_validate(dict(value)),)
    if isinstance(value, (list, tuple)):
        messages: list[types.PromptMessage] = []
        for item in value:
            messages.extend(normalize_prompt_messages(item))
        return tuple(messages)
    raise TypeError(f"Unsupported prompt message type: {type(value)!r}")


def normalize_resource_contents(
    uri: str,
    value: Any,
    *,
    mime_type: str | None = None,
) -> tuple[types.TextResourceContents | types.BlobResourceContents, ...]:
    if isinstance(value, (types.TextResourceContents, types.BlobResourceContents)):
        return (value,)
    if isinstance(value, str):
        return (types.TextResourceContents(uri=uri, text=value, mimeType=mime_type or "text/plain"),)
    if isinstance(value, (bytes, bytearray)):
        blob = base64.b64encode(bytes(value)).decode("ascii")
        return (
            types.BlobResourceContents(uri=uri, blob=blob, mimeType=mime_type or "application/octet-stream"),
        )
    raise TypeError(f"Unsupported resource content type: {type(value)!r}")


def _dump_json(value: Any) -> str:
    return orjson.dumps(value, option=orjson.OPT_INDENT_2, default=str).decode()


__all__ = [
    "normalize_prompt_messages",
    "normalize_resource_contents",
    "normalize_tool_content",
    "text_block",
]
