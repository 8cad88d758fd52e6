from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Union

from mcp.types import CallToolResult, EmbeddedResource, GetPromptResult, ImageContent, TextContent

from inkweld_mcp.mcp_server.context import McpContext

ContentPart = Union[TextContent, ImageContent, EmbeddedResource]
ToolResponse = CallToolResult
ToolExecute = Callable[[McpContext, Dict[str, Any]], Awaitable[ToolResponse]]
PromptRender = Callable[[McpContext, Dict[str, Any]], Awaitable[GetPromptResult]]
