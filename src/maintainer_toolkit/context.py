# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Request context helpers for capability handlers.

The dispatcher activates a :class:`Context` around every handler call so
application code can reach its session and report progress without importing
SDK internals.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .progress import ProgressEmitter


if TYPE_CHECKING:  # pragma: no cover - typing only
    from mcp.types import ProgressToken, RequestId

    from .capability import CapabilityKind
    from .server.sessions import Session


_CURRENT_CONTEXT: ContextVar["Context | None"] = ContextVar("toolkit_current_context", default=None)


def get_context() -> "Context":
    """Return the active :class:`Context`.

    Raises:
        LookupError: If called outside of a capability handler.

    Example::

        from maintainer_toolkit import get_context, tool

        @tool(description="Counts to three")
        async def count() -> str:
            ctx = get_context()
            for step in range(1, 4):
                await ctx.report_progress(step, total=3)
            return "done"
    """

    ctx = _CURRENT_CONTEXT.get()
    if ctx is None:
        raise LookupError("No active context; use get_context() from within a capability handler")
    return ctx


@dataclass(slots=True)
class Context:
    """Per-invocation view handed to handlers."""

    kind: "CapabilityKind"
    name: str
    progress: ProgressEmitter
    session: "Session | None" = None
    request_id: "RequestId | None" = None

    @property
    def progress_token(self) -> "ProgressToken | None":
        return self.progress.token

    @property
    def session_id(self) -> str | None:
        return None if self.session is None else self.session.id

    async def report_progress(
        self,
        progress: float,
        *,
        total: float | None = None,
        message: str | None = None,
    ) -> None:
        """Emit a progress notification if the caller supplied a token."""

        await self.progress.emit(progress, total, message)


@contextmanager
def context_scope(context: Context) -> Iterator[Context]:
    """Activate ``context`` for the duration of the block."""

    token = _CURRENT_CONTEXT.set(context)
    try:
        yield context
    finally:
        _CURRENT_CONTEXT.reset(token)


__all__ = ["Context", "get_context", "context_scope"]
