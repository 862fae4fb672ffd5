# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Tool capability service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp import types

from ...capability import undecorated_spec
from ...tool import ToolSpec, extract_tool_spec
from ..dispatcher import ExecutionDispatcher


if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..sessions import Session


class ToolsService:
    """Maps ``tools/list`` and ``tools/call`` onto the dispatcher."""

    def __init__(self, dispatcher: ExecutionDispatcher, *, logger) -> None:
        self._dispatcher = dispatcher
        self._logger = logger

    @property
    def tool_names(self) -> list[str]:
        return self._dispatcher.registry("tool").names

    def register(self, target: ToolSpec | Any) -> ToolSpec:
        spec = target if isinstance(target, ToolSpec) else extract_tool_spec(target)
        if spec is None:
            spec = undecorated_spec(target, ToolSpec)
        self._dispatcher.register(spec)
        return spec

    async def list_tools(self, request: types.ListToolsRequest | None = None) -> types.ListToolsResult:
        specs = self._dispatcher.list_capabilities("tool")
        return types.ListToolsResult(tools=[spec.describe() for spec in specs])

    async def call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None,
        *,
        progress_token: types.ProgressToken | None = None,
        session: Session | None = None,
        request_id: types.RequestId | None = None,
    ) -> types.CallToolResult:
        result = await self._dispatcher.invoke(
            "tool",
            name,
            arguments,
            progress_token=progress_token,
            session=session,
            request_id=request_id,
        )
        if not result.ok:
            return types.CallToolResult(
                content=[types.TextContent(type="text", text=result.message or "Tool execution failed")],
                isError=True,
            )
        return types.CallToolResult(content=list(result.content))


__all__ = ["ToolsService"]
