# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Resource subscription bookkeeping.

Subscriptions are stored as a per-resource set of session ids plus the
reverse index used for teardown.  Mutations for one URI are serialized by a
per-URI lock, so subscribe, unsubscribe and session pruning cannot lose
updates.  A URI's lock exists only while some task holds or awaits it.
Reads return snapshots without taking any lock.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio


class _UriLock:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = anyio.Lock()
        self.users = 0


class SubscriptionManager:
    """Tracks which sessions are subscribed to which resource URIs."""

    def __init__(self) -> None:
        self._by_uri: dict[str, set[str]] = {}
        self._by_session: dict[str, set[str]] = {}
        self._locks: dict[str, _UriLock] = {}

    async def subscribe(self, uri: str, session_id: str) -> bool:
        """Add ``session_id`` to ``uri``.  Returns ``False`` if already present."""

        async with self._locked(uri):
            subscribers = self._by_uri.setdefault(uri, set())
            if session_id in subscribers:
                return False
            subscribers.add(session_id)
            self._by_session.setdefault(session_id, set()).add(uri)
            return True

    async def unsubscribe(self, uri: str, session_id: str) -> bool:
        """Remove ``session_id`` from ``uri``.  Returns ``False`` if it was absent."""

        async with self._locked(uri):
            return self._discard(uri, session_id)

    async def prune_session(self, session_id: str) -> set[str]:
        """Drop every subscription owned by ``session_id``; returns the URIs removed."""

        uris = set(self._by_session.get(session_id, ()))
        for uri in sorted(uris):
            async with self._locked(uri):
                self._discard(uri, session_id)
        return uris

    def subscribers(self, uri: str) -> frozenset[str]:
        return frozenset(self._by_uri.get(uri, ()))

    def subscriptions(self, session_id: str) -> frozenset[str]:
        return frozenset(self._by_session.get(session_id, ()))

    def snapshot(self) -> tuple[dict[str, frozenset[str]], dict[str, frozenset[str]]]:
        by_uri = {uri: frozenset(ids) for uri, ids in self._by_uri.items()}
        by_session = {sid: frozenset(uris) for sid, uris in self._by_session.items()}
        return by_uri, by_session

    @asynccontextmanager
    async def _locked(self, uri: str) -> AsyncIterator[None]:
        entry = self._locks.get(uri)
        if entry is None:
            entry = self._locks[uri] = _UriLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if not entry.users:
                del self._locks[uri]

    def _discard(self, uri: str, session_id: str) -> bool:
        subscribers = self._by_uri.get(uri)
        if subscribers is None or session_id not in subscribers:
            return False
        subscribers.discard(session_id)
        if not subscribers:
            del self._by_uri[uri]

        owned = self._by_session.get(session_id)
        if owned is not None:
            owned.discard(uri)
            if not owned:
                del self._by_session[session_id]
        return True


__all__ = ["SubscriptionManager"]
