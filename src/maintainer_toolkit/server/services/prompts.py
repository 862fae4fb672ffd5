# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Prompt capability service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp import types
from mcp.shared.exceptions import McpError

from ...capability import undecorated_spec
from ...prompt import PromptSpec, extract_prompt_spec
from ..dispatcher import ExecutionDispatcher


if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..sessions import Session


class PromptsService:
    def __init__(self, dispatcher: ExecutionDispatcher, *, logger) -> None:
        self._dispatcher = dispatcher
        self._logger = logger

    @property
    def names(self) -> list[str]:
        return self._dispatcher.registry("prompt").names

    def register(self, target: PromptSpec | Any) -> PromptSpec:
        spec = target if isinstance(target, PromptSpec) else extract_prompt_spec(target)
        if spec is None:
            spec = undecorated_spec(target, PromptSpec)
        self._dispatcher.register(spec)
        return spec

    async def list_prompts(self, request: types.ListPromptsRequest | None = None) -> types.ListPromptsResult:
        specs = self._dispatcher.list_capabilities("prompt")
        return types.ListPromptsResult(prompts=[spec.describe() for spec in specs])

    async def get_prompt(
        self,
        name: str,
        arguments: dict[str, str] | None,
        *,
        session: Session | None = None,
        request_id: types.RequestId | None = None,
    ) -> types.GetPromptResult:
        """Render prompt ``name``.

        Raises:
            McpError: ``INVALID_PARAMS`` for unknown prompts, invalid arguments
                and renderer failures.  The session stays open.
        """

        result = await self._dispatcher.invoke("prompt", name, arguments, session=session, request_id=request_id)
        if not result.ok:
            raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=result.message or "Prompt failed"))

        spec = self._dispatcher.registry("prompt").resolve(name)
        return types.GetPromptResult(description=spec.description or None, messages=list(result.content))


__all__ = ["PromptsService"]
