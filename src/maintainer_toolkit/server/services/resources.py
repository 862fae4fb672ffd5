# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Resource capability service.

Covers ``resources/list``, ``resources/read``, ``resources/subscribe`` and
``resources/unsubscribe`` plus the change fan-out behind
:meth:`ResourcesService.notify_updated`.  Subscriptions belong to the session
that made them; :meth:`attach_session` ties their removal to session close.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp import types
from mcp.shared.exceptions import McpError

from ...errors import NotFoundError, TransportFault
from ...resource import ResourceSpec, extract_resource_spec
from ..dispatcher import ExecutionDispatcher
from ..sessions import SessionManager, current_session
from ..subscriptions import SubscriptionManager


if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..sessions import Session

RESOURCE_NOT_FOUND = -32002
UPDATE_TIMER = "resource-updates"


class ResourcesService:
    def __init__(
        self,
        dispatcher: ExecutionDispatcher,
        *,
        subscription_manager: SubscriptionManager,
        sessions: SessionManager,
        logger,
        update_interval: float | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._subscriptions = subscription_manager
        self._sessions = sessions
        self._logger = logger
        self._update_interval = update_interval

    # ------------------------------------------------------------------
    # Registration and listing
    # ------------------------------------------------------------------

    @property
    def uris(self) -> list[str]:
        return self._dispatcher.registry("resource").names

    def register_resource(self, target: ResourceSpec | Any) -> ResourceSpec:
        spec = target if isinstance(target, ResourceSpec) else extract_resource_spec(target)
        if spec is None:
            raise TypeError("Resources must be registered with @resource(uri) or as a ResourceSpec")
        self._dispatcher.register(spec)
        return spec

    async def list_resources(self, request: types.ListResourcesRequest | None = None) -> types.ListResourcesResult:
        specs = self._dispatcher.list_capabilities("resource")
        return types.ListResourcesResult(resources=[spec.describe() for spec in specs])

    async def read(
        self,
        uri: str,
        *,
        session: Session | None = None,
        request_id: types.RequestId | None = None,
    ) -> types.ReadResourceResult:
        """Read ``uri``.

        Raises:
            McpError: ``-32002`` when no resource has that URI, ``INTERNAL_ERROR``
                when its producer fails.
        """

        result = await self._dispatcher.invoke("resource", uri, None, session=session, request_id=request_id)
        if isinstance(result.error, NotFoundError):
            raise McpError(types.ErrorData(code=RESOURCE_NOT_FOUND, message="Resource not found", data={"uri": uri}))
        if not result.ok:
            raise McpError(types.ErrorData(code=types.INTERNAL_ERROR, message=result.message or "Read failed"))
        return types.ReadResourceResult(contents=list(result.content))

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def attach_session(self, session: Session) -> None:
        """Release ``session``'s subscriptions when it closes."""

        session.on_close(lambda: self._subscriptions.prune_session(session.id))

    async def subscribe_current(self, uri: str) -> None:
        session = self._require_session()
        if session.closed:
            self._logger.debug("Ignoring subscribe to %s from closed session %s", uri, session.id)
            return
        added = await self._subscriptions.subscribe(uri, session.id)
        # The session may have closed (and been pruned) while we waited for the lock.
        if session.closed:
            await self._subscriptions.unsubscribe(uri, session.id)
            return
        if added:
            self._logger.debug("Session %s subscribed to %s", session.id, uri)
        if self._update_interval and UPDATE_TIMER not in session.timers:
            session.start_timer(UPDATE_TIMER, self._update_interval, lambda: self._push_updates(session))

    async def unsubscribe_current(self, uri: str) -> None:
        session = self._require_session()
        removed = await self._subscriptions.unsubscribe(uri, session.id)
        if removed:
            self._logger.debug("Session %s unsubscribed from %s", session.id, uri)
        if not self._subscriptions.subscriptions(session.id):
            session.cancel_timer(UPDATE_TIMER)

    async def notify_updated(self, uri: str) -> int:
        """Send one ``notifications/resources/updated`` per subscriber of ``uri``.

        Returns the number of notifications delivered.  A subscriber whose
        channel has broken has its session closed.
        """

        delivered = 0
        for session_id in self._subscriptions.subscribers(uri):
            session = self._sessions.get(session_id)
            if session is None or session.closed:
                continue
            if await self._deliver(session, uri):
                delivered += 1
        return delivered

    async def _push_updates(self, session: Session) -> None:
        for uri in sorted(self._subscriptions.subscriptions(session.id)):
            if not await self._deliver(session, uri):
                return

    async def _deliver(self, session: Session, uri: str) -> bool:
        try:
            await session.send_resource_updated(uri)
        except TransportFault as exc:
            self._logger.warning("Closing session %s: %s", session.id, exc)
            await self._sessions.close(session)
            return False
        except Exception:
            self._logger.exception("Failed to notify session %s about %s", session.id, uri)
            return False
        return True

    def _require_session(self) -> Session:
        session = current_session()
        if session is None:
            raise McpError(
                types.ErrorData(code=types.INVALID_REQUEST, message="Subscriptions require an active session")
            )
        return session


__all__ = ["ResourcesService", "RESOURCE_NOT_FOUND"]
