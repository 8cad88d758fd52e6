"""JSON-RPC method routing for the MCP server."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Optional

from mcp.types import CallToolResult, GetPromptResult
from pydantic import ValidationError as PydanticValidationError

from inkweld_mcp import SERVER_NAME, SERVER_VERSION
from inkweld_mcp.exceptions import InkweldError, McpProtocolError, PermissionDeniedError
from inkweld_mcp.logger import Logger, session_logger
from inkweld_mcp.mcp_server.context import McpContext, has_permission
from inkweld_mcp.mcp_server.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PROTOCOL_VERSION,
    RESOURCE_NOT_FOUND,
    JsonRpcRequest,
    error_response,
    success_response,
)
from inkweld_mcp.mcp_server.models import dump_model
from inkweld_mcp.mcp_server.registry import Registries, ToolHandler
from inkweld_mcp.mcp_server.responses import _error, _handle_validation_error, dump_result

MethodHandler = Callable[[McpContext, Dict[str, Any]], Awaitable[Any]]

CAPABILITIES: Dict[str, Any] = {
    "resources": {"subscribe": False, "listChanged": False},
    "tools": {"listChanged": False},
    "prompts": {"listChanged": False},
}


def tool_visible(ctx: McpContext, handler: ToolHandler) -> bool:
    if not handler.required_permissions:
        return True
    return has_permission(ctx, *handler.required_permissions)


class Dispatcher:
    """Route one parsed request to its method handler and build the reply."""

    def __init__(self, registries: Registries, logger: Optional[Logger] = None):
        self.registries = registries
        self.logger: Logger = logger or session_logger
        self.methods: Dict[str, MethodHandler] = {
            "initialize": self._initialize,
            "initialized": self._initialized,
            "notifications/initialized": self._initialized,
            "resources/list": self._resources_list,
            "resources/read": self._resources_read,
            "resources/templates/list": self._resource_templates_list,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
            "prompts/list": self._prompts_list,
            "prompts/get": self._prompts_get,
            "ping": self._ping,
        }

    async def dispatch(self, request: JsonRpcRequest, ctx: McpContext) -> Optional[Dict[str, Any]]:
        """Handle ``request``; notifications run for their effects and return None."""
        try:
            handler = self.methods.get(request.method)
            if handler is None:
                raise McpProtocolError(METHOD_NOT_FOUND, f"Unknown method: {request.method}")
            result = await handler(ctx, request.params)
            response = success_response(request.response_id, result)
        except McpProtocolError as exc:
            self.logger.warning(
                "Request failed", method=request.method, code=exc.code, error=exc.message
            )
            response = error_response(request.response_id, exc.code, exc.message, exc.data)
        except Exception as exc:
            self.logger.error(
                "Unexpected error handling request",
                method=request.method,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            response = error_response(request.response_id, INTERNAL_ERROR, str(exc))

        if request.is_notification:
            return None
        return response

    async def _initialize(self, ctx: McpContext, params: Dict[str, Any]) -> Dict[str, Any]:
        client_version = params.get("protocolVersion")
        if client_version and client_version != PROTOCOL_VERSION:
            self.logger.warning(
                "Client requested different protocol version",
                client_version=client_version,
                server_version=PROTOCOL_VERSION,
            )
        client_info = params.get("clientInfo")
        ctx.client_info = client_info if isinstance(client_info, dict) else None
        ctx.initialized = True
        self.logger.info(
            "Client initialized",
            kind=ctx.kind,
            client=(ctx.client_info or {}).get("name"),
            projects=len(ctx.accessible_projects),
        )
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
            "capabilities": CAPABILITIES,
        }

    async def _initialized(self, ctx: McpContext, params: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    async def _ping(self, ctx: McpContext, params: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    async def _resources_list(self, ctx: McpContext, params: Dict[str, Any]) -> Dict[str, Any]:
        resources = []
        for handler in self.registries.resources:
            resources.extend(dump_model(r) for r in await handler.list(ctx))
        return {"resources": resources}

    async def _resources_read(self, ctx: McpContext, params: Dict[str, Any]) -> Dict[str, Any]:
        uri = params.get("uri")
        if not isinstance(uri, str) or not uri:
            raise McpProtocolError(INVALID_PARAMS, "Missing required parameter: uri")
        for handler in self.registries.resources:
            contents = await handler.read(ctx, uri)
            if contents is not None:
                return {"contents": [dump_model(contents)]}
        raise McpProtocolError(RESOURCE_NOT_FOUND, f"Resource not found: {uri}")

    async def _resource_templates_list(
        self, ctx: McpContext, params: Dict[str, Any]
    ) -> Dict[str, Any]:
        return {"resourceTemplates": []}

    async def _tools_list(self, ctx: McpContext, params: Dict[str, Any]) -> Dict[str, Any]:
        tools = [
            handler.tool.model_dump(mode="json", by_alias=True, exclude_none=True)
            for handler in self.registries.tools.values()
            if tool_visible(ctx, handler)
        ]
        return {"tools": tools}

    async def _tools_call(self, ctx: McpContext, params: Dict[str, Any]) -> Dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise McpProtocolError(INVALID_PARAMS, "Missing required parameter: name")
        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            raise McpProtocolError(INVALID_PARAMS, "arguments must be an object")

        handler = self.registries.tools.get(name)
        if handler is None:
            raise McpProtocolError(METHOD_NOT_FOUND, f"Unknown tool: {name}")
        if not tool_visible(ctx, handler):
            denied = PermissionDeniedError(handler.required_permissions)
            raise McpProtocolError(INVALID_REQUEST, denied.message)

        self.logger.info("Tool invocation started", tool=name, args_keys=list(arguments.keys()))
        try:
            result: CallToolResult = await handler.execute(ctx, arguments)
        except PydanticValidationError as exc:
            self.logger.warning("Tool arguments failed validation", tool=name, errors=exc.error_count())
            result = _handle_validation_error(exc)
        except InkweldError as exc:
            self.logger.error(
                "Domain error",
                tool=name,
                error_code=exc.code,
                error_type=type(exc).__name__,
                error_message=exc.message,
            )
            result = _error(f"Error: {exc.message}")
        self.logger.info("Tool completed", tool=name, is_error=bool(result.isError))
        return dump_result(result)

    async def _prompts_list(self, ctx: McpContext, params: Dict[str, Any]) -> Dict[str, Any]:
        prompts = [
            handler.prompt.model_dump(mode="json", by_alias=True, exclude_none=True)
            for handler in self.registries.prompts.values()
        ]
        return {"prompts": prompts}

    async def _prompts_get(self, ctx: McpContext, params: Dict[str, Any]) -> Dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise McpProtocolError(INVALID_PARAMS, "Missing required parameter: name")
        handler = self.registries.prompts.get(name)
        if handler is None:
            raise McpProtocolError(METHOD_NOT_FOUND, f"Unknown prompt: {name}")
        arguments = params.get("arguments") or {}
        result: GetPromptResult = await handler.get_prompt(ctx, arguments)
        return result.model_dump(mode="json", by_alias=True, exclude_none=True)
