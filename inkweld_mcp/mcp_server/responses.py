"""MCP tool response helpers.

This module holds low-level helpers used by tool handlers and the dispatcher:
- JSON serialization helpers
- success/error result formatting
- Pydantic validation error formatting
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

from mcp.types import CallToolResult, ImageContent, TextContent
from pydantic import ValidationError as PydanticValidationError

from inkweld_mcp.mcp_server.tool_types import ContentPart, ToolResponse


def _json_serializer(obj: Any) -> Any:
    """Custom JSON serializer for non-standard types."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    if hasattr(obj, "__dict__"):
        return obj.__dict__
    return str(obj)


def _json_dumps(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, default=_json_serializer)


def _text(text: str) -> TextContent:
    return TextContent(type="text", text=text)


def _json_text(payload: Any) -> TextContent:
    return _text(_json_dumps(payload))


def _image(data_b64: str, mime_type: str) -> ImageContent:
    return ImageContent(type="image", data=data_b64, mimeType=mime_type)


def _success(
    text: str,
    structured: Optional[Dict[str, Any]] = None,
    extra_content: Optional[Sequence[ContentPart]] = None,
) -> ToolResponse:
    content: List[ContentPart] = [_text(text)]
    if extra_content:
        content.extend(extra_content)
    return CallToolResult(content=content, structuredContent=structured)


def _error(text: str) -> ToolResponse:
    if not text.startswith("Error"):
        text = f"Error: {text}"
    return CallToolResult(content=[_text(text)], isError=True)


def _handle_validation_error(exc: PydanticValidationError) -> ToolResponse:
    errors = exc.errors()

    missing_fields = [_loc(e) for e in errors if e["type"] == "missing"]
    invalid_fields = [_loc(e) for e in errors if e["type"] != "missing"]

    message = f"Error: invalid arguments, {len(errors)} problem(s) found."
    if missing_fields:
        message += f" Missing required fields: {', '.join(missing_fields)}."
    if invalid_fields:
        details = "; ".join(f"{_loc(e)}: {e['msg']}" for e in errors if e["type"] != "missing")
        message += f" Invalid values: {details}."
    message += " Check the tool's inputSchema and retry."
    return _error(message)


def _loc(error: Dict[str, Any]) -> str:
    return ".".join(str(part) for part in error.get("loc", ())) or "arguments"


def dump_result(result: CallToolResult) -> Dict[str, Any]:
    """Wire form of a tool result: aliases on, unset optional fields dropped."""
    return result.model_dump(mode="json", by_alias=True, exclude_none=True)
