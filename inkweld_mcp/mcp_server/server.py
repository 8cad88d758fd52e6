"""Server lifecycle and Starlette wiring for the MCP server."""

from __future__ import annotations

import contextlib
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from inkweld_mcp import SERVER_NAME
from inkweld_mcp.config import Config
from inkweld_mcp.logger import Logger, session_logger
from inkweld_mcp.mcp_server.components import ServerComponents, initialize_components
from inkweld_mcp.mcp_server.dispatcher import Dispatcher
from inkweld_mcp.mcp_server.registry import Registries
from inkweld_mcp.mcp_server.routing import create_registries
from inkweld_mcp.mcp_server.state import ensure_components, get_components, set_components
from inkweld_mcp.mcp_server.transport import McpTransport
from inkweld_mcp.permissions import ALL_PERMISSIONS

logger: Logger = session_logger


def protected_resource_metadata(config: Config) -> dict:
    """OAuth protected resource metadata (RFC 9728) for the MCP endpoint."""
    return {
        "resource": config.mcp_resource_url,
        "authorization_servers": [config.base_url],
        "bearer_methods_supported": ["header"],
        "scopes_supported": list(ALL_PERMISSIONS),
    }


def create_app(
    config: Optional[Config] = None,
    components: Optional[ServerComponents] = None,
    registries: Optional[Registries] = None,
    logger: Optional[Logger] = None,
) -> Starlette:
    """Build the Starlette application.

    Components passed in are installed as-is (tests); otherwise they are
    built from ``config`` when the application starts.
    """
    log: Logger = logger or session_logger
    if config is None:
        config = components.config if components is not None else Config.from_env()
    registries = registries or create_registries(log)
    dispatcher = Dispatcher(registries, logger=log)
    transport = McpTransport(dispatcher, ensure_components, config, logger=log)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        owned = components is None
        active = components or initialize_components(config, log)
        set_components(active)
        log.info(
            "MCP server ready",
            path=config.mcp_path,
            tools=len(registries.tools),
            resources=len(registries.resources),
        )
        try:
            yield
        finally:
            if owned:
                await active.close()
            if get_components() is active:
                set_components(None)
            log.info("MCP server stopped")

    async def well_known(request: Request) -> JSONResponse:
        return JSONResponse(protected_resource_metadata(config))

    async def ping(request: Request) -> JSONResponse:
        return JSONResponse(
            {
                "status": "ok",
                "service": SERVER_NAME,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )

    routes = [
        Route(config.mcp_path, transport.handle, methods=["POST", "GET", "DELETE"]),
        Route("/.well-known/oauth-protected-resource", well_known, methods=["GET"]),
        Route("/ping", ping, methods=["GET"]),
    ]
    return Starlette(routes=routes, lifespan=lifespan)


async def main(config: Optional[Config] = None, host: Optional[str] = None, port: Optional[int] = None) -> None:
    import uvicorn

    config = config or Config.from_env()
    host = host or config.host
    port = port or config.port

    logger.info("Starting Inkweld MCP server", host=host, port=port, path=config.mcp_path)
    app = create_app(config)
    uvicorn_config = uvicorn.Config(app, host=host, port=port, log_level=config.log_level.lower())
    server = uvicorn.Server(uvicorn_config)
    await server.serve()
