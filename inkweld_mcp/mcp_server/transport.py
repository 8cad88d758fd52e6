"""HTTP Streamable transport: one path, three verbs.

POST carries one JSON-RPC request and is the only authenticated verb. GET
opens a keep-alive event stream and DELETE acknowledges session teardown;
neither touches credentials.
"""

from __future__ import annotations

import asyncio
import secrets
from typing import AsyncIterator, Callable, Optional

from starlette.requests import Request
from starlette.responses import JSONResponse, Response, StreamingResponse

from inkweld_mcp.auth.tokens import extract_token
from inkweld_mcp.config import Config
from inkweld_mcp.exceptions import AuthenticationError
from inkweld_mcp.logger import Logger, session_logger
from inkweld_mcp.mcp_server.components import ServerComponents
from inkweld_mcp.mcp_server.dispatcher import Dispatcher
from inkweld_mcp.mcp_server.jsonrpc import (
    INVALID_REQUEST,
    PROTOCOL_VERSION,
    EnvelopeError,
    error_response,
    parse_request,
)

SESSION_HEADER = "Mcp-Session-Id"
PROTOCOL_HEADER = "mcp-protocol-version"
KEEPALIVE_FRAME = ": ping\n\n"

EVENT_STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def www_authenticate(config: Config) -> str:
    return f'Bearer realm="mcp", resource_metadata="{config.resource_metadata_url}"'


def new_session_id() -> str:
    return secrets.token_hex(16)


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


class McpTransport:
    """Starlette endpoints for the MCP path.

    Args:
        dispatcher: Routes parsed requests to method handlers
        components: Getter for the live server components (set during lifespan)
        config: Runtime configuration
        logger: Logger
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        components: Callable[[], ServerComponents],
        config: Config,
        logger: Optional[Logger] = None,
    ):
        self.dispatcher = dispatcher
        self.components = components
        self.config = config
        self.logger: Logger = logger or session_logger

    async def handle(self, request: Request) -> Response:
        if request.method == "POST":
            return await self.handle_post(request)
        if request.method == "GET":
            return self.handle_get(request)
        return self.handle_delete(request)

    def _unauthorized(self, message: str) -> JSONResponse:
        return JSONResponse(
            error_response(None, INVALID_REQUEST, message),
            status_code=401,
            headers={"WWW-Authenticate": www_authenticate(self.config)},
        )

    async def handle_post(self, request: Request) -> Response:
        client_version = request.headers.get(PROTOCOL_HEADER)
        if client_version and client_version != PROTOCOL_VERSION:
            self.logger.warning(
                "Client sent different MCP-Protocol-Version header",
                client_version=client_version,
                server_version=PROTOCOL_VERSION,
            )

        components = self.components()
        token = extract_token(request.headers)
        if token is None:
            self.logger.info("Unauthenticated MCP request rejected", client_ip=_client_ip(request))
            return self._unauthorized("Authentication required")
        try:
            ctx = await components.auth_service.authenticate(
                token, client_ip=_client_ip(request), services=components
            )
        except AuthenticationError as exc:
            self.logger.warning("MCP authentication failed", error=exc.message)
            return self._unauthorized(exc.message)

        try:
            rpc_request = parse_request(await request.body())
        except EnvelopeError as exc:
            self.logger.warning("Malformed JSON-RPC request", code=exc.code, error=exc.message)
            return JSONResponse(error_response(exc.request_id, exc.code, exc.message))

        response = await self.dispatcher.dispatch(rpc_request, ctx)
        if response is None:
            return Response(status_code=202)

        headers = {}
        if rpc_request.method == "initialize" and "result" in response:
            headers[SESSION_HEADER] = new_session_id()
        return JSONResponse(response, headers=headers)

    def handle_get(self, request: Request) -> StreamingResponse:
        self.logger.debug("Event stream opened", client_ip=_client_ip(request))
        return StreamingResponse(
            self._keepalive(request),
            media_type="text/event-stream",
            headers=EVENT_STREAM_HEADERS,
        )

    async def _keepalive(self, request: Request) -> AsyncIterator[str]:
        interval = self.config.sse_keepalive_seconds
        timeout = self.config.sse_timeout_seconds
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout else None
        try:
            while True:
                delay = interval
                if deadline is not None:
                    remaining = deadline - loop.time()
                    if remaining <= 0:
                        break
                    delay = min(interval, remaining)
                await asyncio.sleep(delay)
                if await request.is_disconnected():
                    break
                if deadline is not None and loop.time() >= deadline:
                    break
                yield KEEPALIVE_FRAME
        finally:
            self.logger.debug("Event stream closed")

    def handle_delete(self, request: Request) -> Response:
        return Response(status_code=204)
