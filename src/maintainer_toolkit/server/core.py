# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Composable MCP server built on the reference SDK.

:class:`MCPServer` keeps the SDK's JSON-RPC session machinery and replaces the
capability surface: tools, resources and prompts are dispatched through one
:class:`~maintainer_toolkit.server.dispatcher.ExecutionDispatcher`, and every
connection, whichever binding accepted it, runs inside a
:class:`~maintainer_toolkit.server.sessions.Session` that is torn down exactly
once.
"""

from __future__ import annotations

from contextlib import AsyncExitStack, contextmanager
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator, Literal, Mapping

import anyio
from mcp import types
from mcp.server.lowlevel.server import NotificationOptions, Server, request_ctx
from mcp.server.lowlevel.server import lifespan as default_lifespan
from mcp.server.session import ServerSession
from mcp.server.transport_security import TransportSecuritySettings

from .dispatcher import ExecutionDispatcher
from .services import PromptsService, ResourcesService, ToolsService
from .sessions import Session, SessionManager, current_session
from .subscriptions import SubscriptionManager
from .transports import BaseTransport, SseTransport, StdioTransport, StreamableHTTPTransport, TransportFactory
from ..prompt import PromptSpec
from ..prompt import reset_active_server as reset_prompt_server
from ..prompt import set_active_server as set_prompt_server
from ..resource import ResourceSpec
from ..resource import reset_active_server as reset_resource_server
from ..resource import set_active_server as set_resource_server
from ..tool import ToolSpec
from ..tool import reset_active_server as reset_tool_server
from ..tool import set_active_server as set_tool_server
from ..utils import get_logger


if TYPE_CHECKING:  # pragma: no cover - typing only
    from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
    from mcp.server.models import InitializationOptions
    from mcp.shared.message import SessionMessage

TransportLiteral = Literal["stdio", "sse", "streamableHttp"]


class MCPServer(Server[Any, Any]):
    """Protocol endpoint serving tools, resources and prompts over any binding."""

    def __init__(
        self,
        name: str,
        *,
        version: str | None = None,
        instructions: str | None = None,
        lifespan: Callable[[Server[Any, Any]], Any] = default_lifespan,
        transport: str | None = None,
        http_security: TransportSecuritySettings | None = None,
        streamable_http_stateless: bool = False,
        resource_update_interval: float | None = None,
    ) -> None:
        super().__init__(name, version=version, instructions=instructions, lifespan=lifespan)
        self._default_transport = transport or "stdio"
        self._active_transport = "direct"
        self._logger = get_logger(f"maintainer_toolkit.server.{name}")

        self.dispatcher = ExecutionDispatcher(logger=get_logger("maintainer_toolkit.dispatcher"))
        self.sessions = SessionManager(logger=get_logger("maintainer_toolkit.sessions"))
        self.subscriptions = SubscriptionManager()

        self.tools: ToolsService = ToolsService(self.dispatcher, logger=self._logger)
        self.prompts: PromptsService = PromptsService(self.dispatcher, logger=self._logger)
        self.resources: ResourcesService = ResourcesService(
            self.dispatcher,
            subscription_manager=self.subscriptions,
            sessions=self.sessions,
            logger=self._logger,
            update_interval=resource_update_interval,
        )
        self.sessions.on_open(self.resources.attach_session)

        self._http_security_settings = (
            http_security if http_security is not None else self._default_http_security_settings()
        )
        self._streamable_http_stateless = streamable_http_stateless

        self._transport_factories: dict[str, TransportFactory] = {}
        self.register_transport("stdio", lambda server: StdioTransport(server))
        self.register_transport(
            "sse",
            lambda server: SseTransport(server, security_settings=self._http_security_settings),
        )
        self.register_transport(
            "streamableHttp",
            lambda server: StreamableHTTPTransport(
                server, security_settings=self._http_security_settings, stateless=self._streamable_http_stateless
            ),
            aliases=("streamable-http", "streamable_http", "http"),
        )

        # //////////////////////////////////////////////////////////////////
        # Request handlers
        # //////////////////////////////////////////////////////////////////

        self.request_handlers[types.ListToolsRequest] = self._list_tools
        self.request_handlers[types.CallToolRequest] = self._call_tool
        self.request_handlers[types.ListResourcesRequest] = self._list_resources
        self.request_handlers[types.ReadResourceRequest] = self._read_resource
        self.request_handlers[types.SubscribeRequest] = self._subscribe
        self.request_handlers[types.UnsubscribeRequest] = self._unsubscribe
        self.request_handlers[types.ListPromptsRequest] = self._list_prompts
        self.request_handlers[types.GetPromptRequest] = self._get_prompt

    # //////////////////////////////////////////////////////////////////
    # Registration
    # //////////////////////////////////////////////////////////////////

    @property
    def tool_names(self) -> list[str]:
        return self.tools.tool_names

    @property
    def prompt_names(self) -> list[str]:
        return self.prompts.names

    @property
    def resource_uris(self) -> list[str]:
        return self.resources.uris

    def register_tool(self, target: ToolSpec | Callable[..., Any]) -> ToolSpec:
        return self.tools.register(target)

    def register_resource(self, target: ResourceSpec | Callable[[], str | bytes]) -> ResourceSpec:
        return self.resources.register_resource(target)

    def register_prompt(self, target: PromptSpec | Callable[..., Any]) -> PromptSpec:
        return self.prompts.register(target)

    @contextmanager
    def binding(self) -> Iterator["MCPServer"]:
        """Register every decorated tool, resource and prompt on this server."""

        tool_token = set_tool_server(self)
        resource_token = set_resource_server(self)
        prompt_token = set_prompt_server(self)
        try:
            yield self
        finally:
            reset_tool_server(tool_token)
            reset_resource_server(resource_token)
            reset_prompt_server(prompt_token)

    # //////////////////////////////////////////////////////////////////
    # Direct invocation (bypasses the wire; used by hosts and tests)
    # //////////////////////////////////////////////////////////////////

    async def invoke_tool(self, name: str, **arguments: Any) -> types.CallToolResult:
        return await self.tools.call_tool(name, arguments, session=current_session())

    async def invoke_resource(self, uri: str) -> types.ReadResourceResult:
        return await self.resources.read(uri, session=current_session())

    async def invoke_prompt(self, name: str, *, arguments: dict[str, str] | None = None) -> types.GetPromptResult:
        return await self.prompts.get_prompt(name, arguments, session=current_session())

    # //////////////////////////////////////////////////////////////////
    # Sessions and notifications
    # //////////////////////////////////////////////////////////////////

    def active_sessions(self) -> tuple[Session, ...]:
        return self.sessions.active()

    async def close_session(self, session_id: str) -> bool:
        """Tear down a session from outside its connection."""

        return await self.sessions.close(session_id)

    async def notify_resource_updated(self, uri: str) -> int:
        return await self.resources.notify_updated(uri)

    async def run(
        self,
        read_stream: MemoryObjectReceiveStream[SessionMessage | Exception],
        write_stream: MemoryObjectSendStream[SessionMessage],
        initialization_options: InitializationOptions,
        raise_exceptions: bool = False,
        stateless: bool = False,
    ) -> None:
        """Serve one connection until its message stream ends.

        Handlers run concurrently.  When the stream ends, or the session is
        closed from outside, the session is closed first and in-flight handlers
        are then allowed to finish; anything they emit afterwards is dropped.
        """

        async with AsyncExitStack() as stack:
            lifespan_context = await stack.enter_async_context(self.lifespan(self))
            channel = await stack.enter_async_context(
                ServerSession(read_stream, write_stream, initialization_options, stateless=stateless)
            )

            async with self.sessions.scope(channel, binding=self._active_transport) as session:
                async with anyio.create_task_group() as tg:
                    with anyio.CancelScope() as reader:
                        session.on_close(reader.cancel)
                        async for message in channel.incoming_messages:
                            tg.start_soon(self._handle_message, message, channel, lifespan_context, raise_exceptions)
                    await self.sessions.close(session)

    # //////////////////////////////////////////////////////////////////
    # Initialization & capability negotiation
    # //////////////////////////////////////////////////////////////////

    def create_initialization_options(
        self,
        notification_options: NotificationOptions | None = None,
        experimental_capabilities: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> InitializationOptions:
        return super().create_initialization_options(
            notification_options=notification_options or NotificationOptions(),
            experimental_capabilities={key: dict(value) for key, value in (experimental_capabilities or {}).items()},
        )

    def get_capabilities(
        self, notification_options: NotificationOptions, experimental_capabilities: Mapping[str, Mapping[str, Any]]
    ) -> types.ServerCapabilities:
        experimental_dict = {key: dict(value) for key, value in experimental_capabilities.items()}
        caps = super().get_capabilities(notification_options, experimental_dict)
        if caps.resources is not None:
            caps.resources.subscribe = True
        return caps

    # //////////////////////////////////////////////////////////////////
    # Transport registry
    # //////////////////////////////////////////////////////////////////

    @staticmethod
    def _default_http_security_settings() -> TransportSecuritySettings:
        """Accept loopback hosts only."""

        return TransportSecuritySettings(
            enable_dns_rebinding_protection=True,
            allowed_hosts=["127.0.0.1:*", "localhost:*", "[::1]:*"],
            allowed_origins=["http://127.0.0.1:*", "http://localhost:*", "http://[::1]:*"],
        )

    def register_transport(self, name: str, factory: TransportFactory, *, aliases: Iterable[str] | None = None) -> None:
        self._transport_factories[name.lower()] = factory
        for alias in aliases or ():
            self._transport_factories[alias.lower()] = factory

    @property
    def transport_names(self) -> list[str]:
        return sorted({factory(self).TRANSPORT[0] for factory in self._transport_factories.values()})

    def _transport_for_name(self, name: str) -> BaseTransport:
        factory = self._transport_factories.get(name.lower())
        if factory is None:
            raise ValueError(f"Unsupported transport '{name}'.")
        transport = factory(self)
        if not isinstance(transport, BaseTransport):  # pragma: no cover - defensive
            raise TypeError("Transport factory must return a BaseTransport instance")
        return transport

    def _use_transport(self, name: str) -> None:
        self._active_transport = name

    # //////////////////////////////////////////////////////////////////
    # Transport helpers
    # //////////////////////////////////////////////////////////////////

    async def serve_stdio(self, *, raise_exceptions: bool = False, announce: bool = True) -> None:
        transport = self._transport_for_name("stdio")
        if announce:
            self._logger.info("Serving %s via STDIO", self.name)
        await transport.run(raise_exceptions=raise_exceptions)

    async def serve_sse(
        self,
        host: str = "127.0.0.1",
        port: int = 3001,
        path: str = "/sse",
        log_level: str = "info",
        *,
        announce: bool = True,
        **uvicorn_options: Any,
    ) -> None:
        transport = self._transport_for_name("sse")
        if announce:
            self._logger.info("Serving %s via SSE at http://%s:%s%s", self.name, host, port, path)
        await transport.run(host=host, port=port, path=path, log_level=log_level, **uvicorn_options)

    async def serve_streamable_http(
        self,
        host: str = "127.0.0.1",
        port: int = 3001,
        path: str = "/mcp",
        log_level: str = "info",
        *,
        announce: bool = True,
        **uvicorn_options: Any,
    ) -> None:
        transport = self._transport_for_name("streamableHttp")
        if announce:
            mode = " (stateless)" if self._streamable_http_stateless else ""
            self._logger.info(
                "Serving %s via Streamable HTTP%s at http://%s:%s%s", self.name, mode, host, port, path
            )
        await transport.run(host=host, port=port, path=path, log_level=log_level, **uvicorn_options)

    async def serve(
        self,
        *,
        transport: str | None = None,
        host: str = "127.0.0.1",
        port: int = 3001,
        path: str | None = None,
        log_level: str = "info",
        raise_exceptions: bool = False,
        uvicorn_options: Mapping[str, Any] | None = None,
        **transport_kwargs: Any,
    ) -> None:
        """Serve on exactly one binding until shutdown.

        ``host`` and ``port`` are ignored by stdio.  Extra keyword arguments are
        only accepted by custom transports registered via
        :meth:`register_transport`.
        """

        selected = self._transport_for_name(transport or self._default_transport)
        name = selected.TRANSPORT[0]
        if name in {"stdio", "sse", "streamableHttp"} and transport_kwargs:
            unexpected = ", ".join(sorted(transport_kwargs))
            raise TypeError(f"Unsupported {selected.transport_display_name} serve() parameters: {unexpected}")
        extra = dict(uvicorn_options or {})

        if name == "stdio":
            await self.serve_stdio(raise_exceptions=raise_exceptions)
        elif name == "sse":
            await self.serve_sse(host, port, path or "/sse", log_level, **extra)
        elif name == "streamableHttp":
            await self.serve_streamable_http(host, port, path or "/mcp", log_level, **extra)
        else:
            self._logger.info("Serving %s via %s transport", self.name, selected.transport_display_name)
            await selected.run(**transport_kwargs)

    # //////////////////////////////////////////////////////////////////
    # Request handlers
    # //////////////////////////////////////////////////////////////////

    async def _list_tools(self, request: types.ListToolsRequest) -> types.ServerResult:
        return types.ServerResult(await self.tools.list_tools(request))

    async def _call_tool(self, request: types.CallToolRequest) -> types.ServerResult:
        session, request_id = self._request_scope()
        params = request.params
        token = params.meta.progressToken if params.meta is not None else None
        result = await self.tools.call_tool(
            params.name,
            params.arguments,
            progress_token=token,
            session=session,
            request_id=request_id,
        )
        return types.ServerResult(result)

    async def _list_resources(self, request: types.ListResourcesRequest) -> types.ServerResult:
        return types.ServerResult(await self.resources.list_resources(request))

    async def _read_resource(self, request: types.ReadResourceRequest) -> types.ServerResult:
        session, request_id = self._request_scope()
        result = await self.resources.read(str(request.params.uri), session=session, request_id=request_id)
        return types.ServerResult(result)

    async def _subscribe(self, request: types.SubscribeRequest) -> types.ServerResult:
        self._request_scope()
        await self.resources.subscribe_current(str(request.params.uri))
        return types.ServerResult(types.EmptyResult())

    async def _unsubscribe(self, request: types.UnsubscribeRequest) -> types.ServerResult:
        self._request_scope()
        await self.resources.unsubscribe_current(str(request.params.uri))
        return types.ServerResult(types.EmptyResult())

    async def _list_prompts(self, request: types.ListPromptsRequest) -> types.ServerResult:
        return types.ServerResult(await self.prompts.list_prompts(request))

    async def _get_prompt(self, request: types.GetPromptRequest) -> types.ServerResult:
        session, request_id = self._request_scope()
        result = await self.prompts.get_prompt(
            request.params.name, request.params.arguments, session=session, request_id=request_id
        )
        return types.ServerResult(result)

    def _request_scope(self) -> tuple[Session | None, types.RequestId | None]:
        """Return the current session and request id, noting the HTTP session id."""

        session = current_session()
        try:
            context = request_ctx.get()
        except LookupError:  # pragma: no cover - defensive
            return session, None

        if session is not None:
            session.remember_transport_id(_transport_session_id(context.request))
        return session, context.request_id


def _transport_session_id(request: Any) -> str | None:
    if request is None:
        return None
    headers = getattr(request, "headers", None)
    if headers is not None and headers.get("mcp-session-id"):
        return str(headers.get("mcp-session-id"))
    query = getattr(request, "query_params", None)
    if query is not None and query.get("session_id"):
        return str(query.get("session_id"))
    return None


__all__ = ["MCPServer", "TransportLiteral"]
