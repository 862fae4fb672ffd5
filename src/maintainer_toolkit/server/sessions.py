# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Session lifetime management shared by every transport binding.

A :class:`Session` wraps the SDK's per-connection ``ServerSession`` (the
*channel*) and owns everything created under it: subscriptions, periodic
timers and in-flight progress tokens.  :meth:`Session.close` is the single
teardown path.  It runs at most once, whichever way the connection ends:
normal close, client disconnect, error, or an explicit
:meth:`SessionManager.close` from outside the session.

Handlers reach their session through :func:`current_session`, which reads a
context variable populated by :meth:`SessionManager.scope`.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from contextvars import ContextVar
import logging
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import anyio
import anyio.abc

from ..errors import TransportFault
from ..utils import get_logger, maybe_await


if TYPE_CHECKING:  # pragma: no cover - typing only
    from mcp.server.session import ServerSession
    from mcp.types import ProgressToken, RequestId

CleanupFn = Callable[[], Awaitable[None] | None]
TimerFn = Callable[[], Awaitable[None] | None]
OpenHook = Callable[["Session"], None]

_CHANNEL_ERRORS = (anyio.ClosedResourceError, anyio.BrokenResourceError, anyio.EndOfStream)

_CURRENT_SESSION: ContextVar["Session | None"] = ContextVar("toolkit_current_session", default=None)


def current_session() -> "Session | None":
    """Return the session serving the running request, if any."""

    return _CURRENT_SESSION.get()


class Session:
    """Lifetime-scoped state for one transport connection."""

    def __init__(
        self,
        channel: "ServerSession | Any",
        *,
        binding: str,
        session_id: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.id = session_id or uuid4().hex
        self.binding = binding
        self.transport_id: str | None = None
        self._channel = channel
        self._logger = logger or get_logger("maintainer_toolkit.sessions")
        self._closed = False
        self._cleanups: list[CleanupFn] = []
        self._timers: dict[str, anyio.CancelScope] = {}
        self._task_group: anyio.abc.TaskGroup | None = None
        self._progress_tokens: set[ProgressToken] = set()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Session {self.id} binding={self.binding} {state}>"

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def channel(self) -> "ServerSession | Any":
        return self._channel

    @property
    def timers(self) -> tuple[str, ...]:
        return tuple(self._timers)

    def remember_transport_id(self, transport_id: str | None) -> None:
        if transport_id and self.transport_id is None:
            self.transport_id = transport_id

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------

    def attach_task_group(self, task_group: anyio.abc.TaskGroup) -> None:
        self._task_group = task_group

    def on_close(self, callback: CleanupFn) -> None:
        """Register a cleanup callback; callbacks run in reverse order on close."""

        if self._closed:
            raise RuntimeError(f"Session {self.id} is already closed")
        self._cleanups.append(callback)

    def start_timer(self, name: str, interval: float, callback: TimerFn) -> None:
        """Run ``callback`` every ``interval`` seconds until the session closes.

        Starting a timer under an existing name replaces the previous one.
        """

        if self._closed:
            raise RuntimeError(f"Session {self.id} is already closed")
        if self._task_group is None:
            raise RuntimeError(f"Session {self.id} has no task group; timers need a running session")
        self.cancel_timer(name)
        scope = anyio.CancelScope()
        self._timers[name] = scope
        self._task_group.start_soon(self._run_timer, name, scope, interval, callback)

    def cancel_timer(self, name: str) -> bool:
        scope = self._timers.pop(name, None)
        if scope is None:
            return False
        scope.cancel()
        return True

    async def _run_timer(self, name: str, scope: anyio.CancelScope, interval: float, callback: TimerFn) -> None:
        with scope:
            while True:
                await anyio.sleep(interval)
                try:
                    await maybe_await(callback())
                except Exception:
                    self._logger.exception("Timer %s failed on session %s", name, self.id)
        if self._timers.get(name) is scope:
            del self._timers[name]

    def claim_progress_token(self, token: "ProgressToken") -> bool:
        """Reserve ``token`` for one invocation; ``False`` if it is already in flight."""

        if token in self._progress_tokens:
            return False
        self._progress_tokens.add(token)
        return True

    def release_progress_token(self, token: "ProgressToken") -> None:
        self._progress_tokens.discard(token)

    # ------------------------------------------------------------------
    # Outbound notifications
    # ------------------------------------------------------------------

    async def send_progress(
        self,
        token: "ProgressToken",
        progress: float,
        *,
        total: float | None = None,
        message: str | None = None,
        related_request_id: "RequestId | None" = None,
    ) -> bool:
        """Deliver a progress notification; returns ``False`` if it was dropped."""

        if self._closed:
            self._logger.debug("Dropping progress %s for closed session %s", token, self.id)
            return False
        try:
            await self._channel.send_progress_notification(
                progress_token=token,
                progress=progress,
                total=total,
                message=message,
                related_request_id=related_request_id,
            )
        except _CHANNEL_ERRORS:
            self._logger.debug("Dropping progress %s; channel for session %s is gone", token, self.id)
            return False
        return True

    async def send_resource_updated(self, uri: str) -> None:
        """Notify the peer that ``uri`` changed.

        Raises:
            TransportFault: The channel is closed or broken.
        """

        if self._closed:
            return
        try:
            await self._channel.send_resource_updated(uri)
        except _CHANNEL_ERRORS as exc:
            raise TransportFault(self.id, exc) from exc

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def close(self) -> bool:
        """Run the cleanup procedure.  Returns ``False`` if already closed."""

        if self._closed:
            return False
        self._closed = True

        for scope in self._timers.values():
            scope.cancel()
        self._timers.clear()
        self._progress_tokens.clear()

        # A timer may close its own session; the cleanups must still run to the end.
        with anyio.CancelScope(shield=True):
            while self._cleanups:
                callback = self._cleanups.pop()
                try:
                    await maybe_await(callback())
                except Exception:
                    self._logger.exception("Cleanup callback failed for session %s", self.id)
        return True


class SessionManager:
    """Registry of live sessions across all connections of one server."""

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_logger("maintainer_toolkit.sessions")
        self._sessions: dict[str, Session] = {}
        self._open_hooks: list[OpenHook] = []

    def on_open(self, hook: OpenHook) -> None:
        """Call ``hook`` for every session opened from now on."""

        self._open_hooks.append(hook)

    def open(self, channel: "ServerSession | Any", *, binding: str, session_id: str | None = None) -> Session:
        session = Session(channel, binding=binding, session_id=session_id, logger=self._logger)
        session.on_close(lambda: self._forget(session))
        for hook in self._open_hooks:
            hook(session)
        self._sessions[session.id] = session
        self._logger.info("Session %s opened (%s)", session.id, binding)
        return session

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def active(self) -> tuple[Session, ...]:
        return tuple(self._sessions.values())

    async def close(self, session: Session | str) -> bool:
        """Close ``session`` (or the session with that id); idempotent."""

        if isinstance(session, str):
            found = self._sessions.get(session)
            if found is None:
                return False
            session = found
        return await session.close()

    def _forget(self, session: Session) -> None:
        if self._sessions.get(session.id) is session:
            del self._sessions[session.id]
            self._logger.info("Session %s closed", session.id)

    @asynccontextmanager
    async def scope(self, channel: "ServerSession | Any", *, binding: str) -> AsyncIterator[Session]:
        """Open a session for the duration of the block.

        The session is published through :func:`current_session` to every task
        started inside the block and is closed on exit, including on error or
        cancellation.
        """

        session = self.open(channel, binding=binding)
        token = _CURRENT_SESSION.set(session)
        try:
            async with anyio.create_task_group() as tg:
                session.attach_task_group(tg)
                try:
                    yield session
                finally:
                    with anyio.CancelScope(shield=True):
                        await self.close(session)
        finally:
            _CURRENT_SESSION.reset(token)


__all__ = ["Session", "SessionManager", "current_session"]
