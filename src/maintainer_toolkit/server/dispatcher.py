# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Name-based dispatch of capability invocations.

The dispatcher owns one :class:`~maintainer_toolkit.server.registry.CapabilityRegistry`
per capability kind.  :meth:`ExecutionDispatcher.invoke` resolves, validates,
runs and shapes; every failure short of cancellation comes back as a
:class:`Result` carrying the error, so a bad call never takes its session down.

The dispatcher keeps no per-call state of its own and may be used from any
number of sessions concurrently.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any

from ..capability import Capability, CapabilityKind
from ..context import Context, context_scope
from ..errors import HandlerFault, NotFoundError, ToolkitError, ValidationError
from ..progress import ProgressEmitter
from ..utils import get_logger, maybe_await_with_args
from .registry import CapabilityRegistry


if TYPE_CHECKING:  # pragma: no cover - typing only
    from mcp.types import ProgressToken, RequestId

    from .sessions import Session


@dataclass(frozen=True, slots=True)
class Result:
    """Outcome of one invocation: ordered content, or an error."""

    content: tuple[Any, ...] = ()
    error: ToolkitError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str | None:
        return None if self.error is None else str(self.error)

    @classmethod
    def success(cls, content: tuple[Any, ...]) -> Result:
        return cls(content=content)

    @classmethod
    def failure(cls, error: ToolkitError) -> Result:
        return cls(error=error)


class ExecutionDispatcher:
    """Resolve, validate, execute and shape capability invocations."""

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_logger("maintainer_toolkit.dispatcher")
        self._registries: dict[str, CapabilityRegistry[Any]] = {
            kind: CapabilityRegistry(kind) for kind in ("tool", "resource", "prompt")
        }

    def registry(self, kind: CapabilityKind) -> CapabilityRegistry[Any]:
        try:
            return self._registries[kind]
        except KeyError:
            raise ValueError(f"Unknown capability kind: {kind}") from None

    def register(self, capability: Capability) -> Capability:
        return self.registry(capability.kind).register(capability)

    def list_capabilities(self, kind: CapabilityKind) -> tuple[Capability, ...]:
        return self.registry(kind).list()

    async def invoke(
        self,
        kind: CapabilityKind,
        name: str,
        arguments: Any = None,
        *,
        progress_token: ProgressToken | None = None,
        session: Session | None = None,
        request_id: RequestId | None = None,
    ) -> Result:
        """Run capability ``name`` of ``kind`` with ``arguments``.

        Progress emitted by the handler is delivered before this coroutine
        returns.  Progress already delivered when the handler fails stays
        delivered; the error result follows it.
        """

        try:
            capability = self.registry(kind).resolve(name)
            validated = capability.validate(arguments)
        except (NotFoundError, ValidationError) as exc:
            self._logger.info("Rejected %s %s: %s", kind, name, exc)
            return Result.failure(exc)
        except Exception as exc:
            self._logger.exception("Error validating arguments for %s %s", kind, name)
            return Result.failure(HandlerFault(kind, name, exc))

        claimed = False
        if progress_token is not None and session is not None:
            if not session.claim_progress_token(progress_token):
                error = ValidationError(("_meta", "progressToken"), "a progress token not already in use", progress_token)
                self._logger.info("Rejected %s %s: %s", kind, name, error)
                return Result.failure(error)
            claimed = True

        emitter = ProgressEmitter(progress_token, session, request_id=request_id)
        context = Context(kind=kind, name=name, progress=emitter, session=session, request_id=request_id)
        try:
            with context_scope(context):
                value = await maybe_await_with_args(capability.fn, **validated)
            content = capability.shape(value)
            await emitter.complete()
        except ToolkitError as exc:
            self._logger.info("%s %s failed: %s", kind.capitalize(), name, exc)
            return Result.failure(exc)
        except Exception as exc:
            self._logger.exception("Error executing %s %s", kind, name)
            return Result.failure(HandlerFault(kind, name, exc))
        finally:
            if claimed:
                assert session is not None and progress_token is not None
                session.release_progress_token(progress_token)

        return Result.success(content)


__all__ = ["ExecutionDispatcher", "Result"]
