# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import pytest

from maintainer_toolkit.progress import ProgressEmitter
from maintainer_toolkit.server import Session
from tests.helpers import RecordingChannel


def _emitter(token="tok", *, channel: RecordingChannel | None = None) -> tuple[ProgressEmitter, RecordingChannel]:
    channel = channel or RecordingChannel()
    session = Session(channel, binding="test")
    return ProgressEmitter(token, session, request_id=1), channel


@pytest.mark.anyio
async def test_emit_sends_in_order() -> None:
    emitter, channel = _emitter()

    await emitter.emit(1, 3, "one")
    await emitter.emit(2)
    await emitter.emit(2)

    assert [(e["progress"], e["total"], e["message"]) for e in channel.progress_events] == [
        (1, 3, "one"),
        (2, 3, None),
        (2, 3, None),
    ]
    assert emitter.sent == 3
    assert emitter.last == 2


@pytest.mark.anyio
async def test_emit_rejects_regression_and_overflow() -> None:
    emitter, _ = _emitter()
    await emitter.emit(2, 5)

    with pytest.raises(ValueError, match="decrease"):
        await emitter.emit(1)
    with pytest.raises(ValueError, match="exceeds"):
        await emitter.emit(6)
    with pytest.raises(ValueError, match="total changed"):
        await emitter.emit(3, 10)


@pytest.mark.anyio
async def test_disabled_without_token_still_tracks_state() -> None:
    emitter, channel = _emitter(token=None)

    await emitter.emit(1, 2)

    assert not emitter.enabled
    assert emitter.last == 1
    assert channel.progress_events == []
    with pytest.raises(ValueError):
        await emitter.emit(0)


@pytest.mark.anyio
async def test_complete_tops_up_once() -> None:
    emitter, channel = _emitter()
    await emitter.emit(1, 3)

    await emitter.complete()
    await emitter.complete()

    assert [e["progress"] for e in channel.progress_events] == [1, 3]


@pytest.mark.anyio
async def test_complete_without_total_is_noop() -> None:
    emitter, channel = _emitter()
    await emitter.emit(4)

    await emitter.complete()

    assert [e["progress"] for e in channel.progress_events] == [4]


@pytest.mark.anyio
async def test_broken_channel_drops_progress() -> None:
    channel = RecordingChannel()
    channel.broken = True
    emitter, _ = _emitter(channel=channel)

    await emitter.emit(1, 2)

    assert emitter.sent == 0
    assert emitter.last == 1


@pytest.mark.anyio
async def test_closed_session_drops_progress() -> None:
    channel = RecordingChannel()
    session = Session(channel, binding="test")
    emitter = ProgressEmitter("late", session)
    await session.close()

    await emitter.emit(1)

    assert channel.progress_events == []
