"""Project media listing and retrieval tool handlers."""

from __future__ import annotations

import base64
from typing import Any, Dict

from inkweld_mcp.logger import Logger, session_logger
from inkweld_mcp.mcp_server.context import McpContext, ProjectGrant
from inkweld_mcp.mcp_server.responses import _error, _image, _success
from inkweld_mcp.mcp_server.tool_types import ToolResponse
from inkweld_mcp.mcp_server.tools.common import get_services, reports_errors, resolve_project
from inkweld_mcp.permissions import READ_ELEMENTS
from inkweld_mcp.storage.media import (
    DEFAULT_MIME_TYPE,
    guess_mime_type,
    is_media_file,
    is_text_like_mime,
    media_url,
    parse_media_filename,
)
from inkweld_mcp.validation.tool_models import GetMediaContentInput, ListProjectMediaInput

logger: Logger = session_logger

DEFAULT_MAX_BYTES = 262144
MEDIA_MODES = ("auto", "image", "text", "base64")
LISTING_PREVIEW = 15


@reports_errors("listing project media")
async def _tool_list_project_media(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), READ_ELEMENTS)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = ListProjectMediaInput.model_validate(arguments)

    files = await get_services(ctx).blob_store.list_project_files(grant.owner, grant.slug, payload.prefix)
    if not payload.include_non_media:
        files = [f for f in files if is_media_file(f.filename, f.mime_type)]

    items = [
        {
            "filename": f.filename,
            "mediaUrl": media_url(f.filename),
            "size": f.size,
            "mimeType": f.mime_type,
            "uploadedAt": f.uploaded_at.isoformat() if f.uploaded_at else None,
        }
        for f in files
    ]

    scope = f"{grant.key}" + ("" if payload.include_non_media else " (media only)")
    lines = [f"Found {len(items)} file(s) in {scope}."]
    for item in items[:LISTING_PREVIEW]:
        lines.append(f"- {item['mediaUrl']} ({item['mimeType'] or 'unknown'}, {item['size']} bytes)")
    if len(items) > LISTING_PREVIEW:
        lines.append(f"... and {len(items) - LISTING_PREVIEW} more")

    return _success(
        "\n".join(lines),
        {
            "success": True,
            "project": grant.key,
            "prefix": payload.prefix,
            "includeNonMedia": payload.include_non_media,
            "total": len(items),
            "items": items,
        },
    )


def _max_bytes(value: Any):
    if value is None:
        return DEFAULT_MAX_BYTES
    if isinstance(value, bool):
        return None
    try:
        limit = int(float(value))
    except (TypeError, ValueError):
        return None
    return limit if limit > 0 else None


@reports_errors("reading media")
async def _tool_get_media_content(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), READ_ELEMENTS)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = GetMediaContentInput.model_validate(arguments)

    filename = parse_media_filename(payload.media_url, payload.filename)
    if filename is None:
        return _error("Error: provide a valid mediaUrl (media://...) or filename")

    mode = (payload.as_ or "auto").strip().lower()
    if mode not in MEDIA_MODES:
        return _error("Error: as must be one of auto, image, text, base64")

    max_bytes = _max_bytes(payload.max_bytes)
    if max_bytes is None:
        return _error("Error: maxBytes must be a positive number")

    data = await get_services(ctx).blob_store.read_project_file(grant.owner, grant.slug, filename)
    if data is None:
        return _error(f"Error: media file not found: {filename}")
    if not data:
        return _error(f"Error: media file is empty: {filename}")
    if len(data) > max_bytes:
        return _error(f"Error: media file is {len(data)} bytes, exceeding maxBytes={max_bytes}")

    mime_type = guess_mime_type(filename) or DEFAULT_MIME_TYPE
    if mode == "auto":
        if mime_type.startswith("image/"):
            mode = "image"
        elif is_text_like_mime(mime_type):
            mode = "text"
        else:
            mode = "base64"

    url = media_url(filename)
    structured: Dict[str, Any] = {
        "success": True,
        "filename": filename,
        "mediaUrl": url,
        "mimeType": mime_type,
        "sizeBytes": len(data),
        "mode": mode,
    }
    encoded = base64.b64encode(data).decode("ascii")

    logger.debug("Media read", project=grant.key, filename=filename, mode=mode, bytes=len(data))

    if mode == "image":
        if not mime_type.startswith("image/"):
            return _error(f"Error: file is {mime_type}, not an image")
        return _success(
            f"Loaded image {url} ({len(data)} bytes, {mime_type})",
            structured,
            extra_content=[_image(encoded, mime_type)],
        )

    if mode == "text":
        return _success(data.decode("utf-8", errors="replace"), structured)

    structured["base64"] = encoded
    return _success(f"Loaded binary {url} ({len(data)} bytes, {mime_type}) as base64", structured)
