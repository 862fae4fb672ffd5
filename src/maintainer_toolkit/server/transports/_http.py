# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Plumbing shared by the SSE and Streamable HTTP bindings.

Both bindings delegate every request on their routes to an SDK-backed session
manager that owns one ``MCPServer.run`` per client session.  The manager is
kept running by the Starlette lifespan, and the app is served with uvicorn.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from mcp.server.transport_security import TransportSecuritySettings
from starlette.applications import Starlette
import uvicorn

from .base import BaseTransport


if TYPE_CHECKING:
    from collections.abc import Sequence

    from starlette.routing import BaseRoute
    from starlette.types import Receive, Scope, Send

    from ..core import MCPServer


class SessionEndpoint:
    """ASGI endpoint that hands HTTP requests to a binding's session manager.

    ``manager`` needs ``handle_request(scope, receive, send)`` and a ``run()``
    async context manager, as the SDK's Streamable HTTP manager provides.
    """

    def __init__(self, manager: Any, *, binding: str) -> None:
        self.manager = manager
        self.binding = binding

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            raise TypeError(f"The {self.binding} binding only serves HTTP requests (got {scope.get('type')!r})")
        await self.manager.handle_request(scope, receive, send)

    @asynccontextmanager
    async def lifespan(self, _app: Starlette) -> AsyncIterator[None]:
        async with self.manager.run():
            yield


class HttpBinding(BaseTransport):
    """A binding served as a Starlette app under uvicorn."""

    DEFAULT_PATH: str = "/mcp"

    def __init__(
        self,
        server: MCPServer,
        *,
        security_settings: TransportSecuritySettings | Mapping[str, Any] | None = None,
        stateless: bool = False,
    ) -> None:
        super().__init__(server)
        if security_settings is not None and not isinstance(security_settings, TransportSecuritySettings):
            security_settings = TransportSecuritySettings.model_validate(security_settings)
        self._security_settings: TransportSecuritySettings | None = security_settings
        self._stateless = stateless

    @property
    def security_settings(self) -> TransportSecuritySettings | None:
        return self._security_settings

    @property
    def stateless(self) -> bool:
        return self._stateless

    async def run(
        self,
        *,
        host: str = "127.0.0.1",
        port: int = 3001,
        path: str | None = None,
        log_level: str = "info",
        **uvicorn_options: Any,
    ) -> None:
        await self._serve(host, port, path or self.DEFAULT_PATH, log_level, uvicorn_options)

    def build_app(self, path: str | None = None) -> Starlette:
        """Return the Starlette app serving this binding at ``path``."""

        self._announce_binding()
        endpoint = SessionEndpoint(self._session_manager(), binding=self.transport_display_name)
        return Starlette(routes=list(self._routes(path or self.DEFAULT_PATH, endpoint)), lifespan=endpoint.lifespan)

    async def _serve(self, host: str, port: int, path: str, log_level: str, uvicorn_options: dict[str, Any]) -> None:
        config = uvicorn.Config(self.build_app(path), host=host, port=port, log_level=log_level, **uvicorn_options)
        await uvicorn.Server(config).serve()

    @abstractmethod
    def _session_manager(self) -> Any: ...

    @abstractmethod
    def _routes(self, path: str, endpoint: SessionEndpoint) -> Sequence[BaseRoute]: ...


__all__ = ["HttpBinding", "SessionEndpoint"]
