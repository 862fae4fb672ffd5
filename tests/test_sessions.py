# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Session lifetime: single teardown, owned timers, subscriptions and faults."""

from __future__ import annotations

import anyio
import pytest

from maintainer_toolkit.errors import TransportFault
from maintainer_toolkit.server import MCPServer, Session, SessionManager, current_session
from tests.helpers import RecordingChannel, wait_for


URI = "test://static/resource/3"


@pytest.mark.anyio
async def test_close_is_idempotent_and_runs_cleanups_once_in_reverse() -> None:
    session = Session(RecordingChannel(), binding="test")
    calls: list[str] = []

    async def async_cleanup() -> None:
        calls.append("async")

    session.on_close(lambda: calls.append("first"))
    session.on_close(async_cleanup)

    assert await session.close() is True
    assert await session.close() is False
    assert calls == ["async", "first"]
    assert session.closed


@pytest.mark.anyio
async def test_failing_cleanup_does_not_stop_the_rest() -> None:
    session = Session(RecordingChannel(), binding="test")
    calls: list[str] = []

    def boom() -> None:
        raise RuntimeError("cleanup failed")

    session.on_close(lambda: calls.append("survivor"))
    session.on_close(boom)

    await session.close()

    assert calls == ["survivor"]


@pytest.mark.anyio
async def test_on_close_after_close_raises() -> None:
    session = Session(RecordingChannel(), binding="test")
    await session.close()

    with pytest.raises(RuntimeError):
        session.on_close(lambda: None)


@pytest.mark.anyio
async def test_manager_tracks_and_forgets_sessions() -> None:
    manager = SessionManager()
    opened: list[Session] = []
    manager.on_open(opened.append)

    session = manager.open(RecordingChannel(), binding="stdio")

    assert opened == [session]
    assert manager.get(session.id) is session
    assert manager.active() == (session,)

    # Closing directly, not through the manager, still deregisters.
    await session.close()
    assert manager.active() == ()
    assert await manager.close(session.id) is False


@pytest.mark.anyio
async def test_concurrent_closes_run_cleanup_once() -> None:
    manager = SessionManager()
    session = manager.open(RecordingChannel(), binding="sse")
    counter = {"n": 0}
    session.on_close(lambda: counter.__setitem__("n", counter["n"] + 1))

    async with anyio.create_task_group() as tg:
        for _ in range(5):
            tg.start_soon(manager.close, session)

    assert counter["n"] == 1


@pytest.mark.anyio
async def test_scope_publishes_current_session_and_closes_on_exit() -> None:
    manager = SessionManager()

    assert current_session() is None
    async with manager.scope(RecordingChannel(), binding="stdio") as session:
        assert current_session() is session
        assert manager.active() == (session,)

    assert current_session() is None
    assert session.closed
    assert manager.active() == ()


@pytest.mark.anyio
async def test_scope_closes_on_error() -> None:
    manager = SessionManager()

    # The error surfaces through the session's task group.
    with pytest.raises((RuntimeError, BaseExceptionGroup)):
        async with manager.scope(RecordingChannel(), binding="stdio") as session:
            raise RuntimeError("connection reset")

    assert session.closed


@pytest.mark.anyio
async def test_timers_fire_until_close() -> None:
    manager = SessionManager()
    ticks: list[int] = []

    async with manager.scope(RecordingChannel(), binding="stdio") as session:
        session.start_timer("tick", 0.01, lambda: ticks.append(1))
        await wait_for(lambda: len(ticks) >= 3)
        assert session.timers == ("tick",)
        await session.close()
        assert session.timers == ()
        count = len(ticks)
        await anyio.sleep(0.05)
        assert len(ticks) == count


@pytest.mark.anyio
async def test_cancel_timer() -> None:
    async with SessionManager().scope(RecordingChannel(), binding="stdio") as session:
        session.start_timer("tick", 10, lambda: None)

        assert session.cancel_timer("tick") is True
        assert session.cancel_timer("tick") is False


@pytest.mark.anyio
async def test_start_timer_requires_running_session() -> None:
    session = Session(RecordingChannel(), binding="test")

    with pytest.raises(RuntimeError):
        session.start_timer("tick", 1, lambda: None)


@pytest.mark.anyio
async def test_send_on_broken_channel_raises_transport_fault() -> None:
    channel = RecordingChannel()
    channel.broken = True
    session = Session(channel, binding="test", session_id="broken-1")

    with pytest.raises(TransportFault) as excinfo:
        await session.send_resource_updated(URI)

    assert excinfo.value.session_id == "broken-1"


@pytest.mark.anyio
async def test_notify_closes_broken_session_and_spares_others() -> None:
    server = MCPServer("fanout")
    healthy_channel = RecordingChannel("healthy")
    broken_channel = RecordingChannel("broken")

    healthy = server.sessions.open(healthy_channel, binding="test")
    broken = server.sessions.open(broken_channel, binding="test")
    await server.subscriptions.subscribe(URI, healthy.id)
    await server.subscriptions.subscribe(URI, broken.id)
    broken_channel.broken = True

    delivered = await server.notify_resource_updated(URI)

    assert delivered == 1
    assert healthy_channel.updated_uris == [URI]
    assert broken.closed
    assert server.subscriptions.subscribers(URI) == frozenset({healthy.id})
    assert server.active_sessions() == (healthy,)


@pytest.mark.anyio
async def test_close_prunes_subscriptions() -> None:
    server = MCPServer("prune")
    session = server.sessions.open(RecordingChannel(), binding="test")
    await server.subscriptions.subscribe(URI, session.id)

    assert await server.close_session(session.id) is True

    assert server.subscriptions.subscribers(URI) == frozenset()
    assert server.subscriptions.subscriptions(session.id) == frozenset()
    assert await server.notify_resource_updated(URI) == 0


@pytest.mark.anyio
async def test_subscribe_after_close_leaves_nothing_behind() -> None:
    server = MCPServer("late-subscribe", resource_update_interval=0.01)

    async with server.sessions.scope(RecordingChannel(), binding="test") as session:
        assert await server.close_session(session.id) is True

        await server.resources.subscribe_current(URI)

        assert session.timers == ()
    assert server.subscriptions.snapshot() == ({}, {})


@pytest.mark.anyio
async def test_subscribe_racing_close_is_undone(monkeypatch: pytest.MonkeyPatch) -> None:
    server = MCPServer("racing-subscribe")
    subscribe = server.subscriptions.subscribe

    async def close_while_waiting(uri: str, session_id: str) -> bool:
        await server.close_session(session_id)
        return await subscribe(uri, session_id)

    monkeypatch.setattr(server.subscriptions, "subscribe", close_while_waiting)

    async with server.sessions.scope(RecordingChannel(), binding="test") as session:
        await server.resources.subscribe_current(URI)

        assert session.closed
    assert server.subscriptions.snapshot() == ({}, {})
