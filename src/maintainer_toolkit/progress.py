# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Out-of-band progress notifications for a single invocation.

An :class:`ProgressEmitter` is bound to the progress token of one request.
Each :meth:`~ProgressEmitter.emit` awaits delivery to the session channel
before returning, and the dispatcher only sends the terminal result after the
handler returns, so callers never see a result ahead of its progress.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import anyio


if TYPE_CHECKING:  # pragma: no cover - typing only
    from mcp.types import ProgressToken, RequestId

    from .server.sessions import Session


class ProgressEmitter:
    """Emit monotonically non-decreasing progress for one progress token."""

    def __init__(
        self,
        token: ProgressToken | None,
        session: Session | None,
        *,
        request_id: RequestId | None = None,
    ) -> None:
        self.token = token
        self._session = session
        self._request_id = request_id
        self._last: float | None = None
        self._total: float | None = None
        self._sent = 0
        self._lock = anyio.Lock()

    @property
    def enabled(self) -> bool:
        return self.token is not None and self._session is not None

    @property
    def last(self) -> float | None:
        return self._last

    @property
    def total(self) -> float | None:
        return self._total

    @property
    def sent(self) -> int:
        """Number of notifications actually delivered."""

        return self._sent

    async def emit(self, progress: float, total: float | None = None, message: str | None = None) -> None:
        """Report ``progress`` (optionally out of ``total``).

        Raises:
            ValueError: ``progress`` is lower than the previous value, exceeds
                the declared total, or ``total`` changes mid-invocation.
        """

        async with self._lock:
            if total is not None:
                if self._total is not None and total != self._total:
                    raise ValueError(f"Progress total changed from {self._total} to {total}")
                self._total = total
            if self._last is not None and progress < self._last:
                raise ValueError(f"Progress must not decrease (was {self._last}, got {progress})")
            if self._total is not None and progress > self._total:
                raise ValueError(f"Progress {progress} exceeds total {self._total}")
            self._last = progress

            if not self.enabled:
                return
            assert self._session is not None and self.token is not None
            delivered = await self._session.send_progress(
                self.token,
                progress,
                total=self._total,
                message=message,
                related_request_id=self._request_id,
            )
            if delivered:
                self._sent += 1

    async def complete(self) -> None:
        """Top up to the declared total if the handler stopped short of it."""

        if self._total is None:
            return
        if self._last is None or self._last < self._total:
            await self.emit(self._total)


__all__ = ["ProgressEmitter"]
