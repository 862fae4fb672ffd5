from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import pytest

from maintainer_toolkit.config import ServerSettings
from maintainer_toolkit.server import MCPServer
from maintainer_toolkit.toolkit import create_server


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def toolkit_server() -> MCPServer:
    # No periodic resource pushes unless a test opts in.
    return create_server(ServerSettings(resource_update_interval=None))


@pytest.fixture
def httpx_async_client():
    @asynccontextmanager
    async def factory(app, *, base_url: str = "http://127.0.0.1:3001") -> AsyncIterator[httpx.AsyncClient]:
        async with app.router.lifespan_context(app):
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url=base_url) as client:
                yield client

    return factory
