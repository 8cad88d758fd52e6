"""Helpers shared by the resource handlers."""

from __future__ import annotations

import json
import re
from typing import Any, Optional, Tuple

from inkweld_mcp.mcp_server.context import McpContext, ProjectGrant, get_project_by_key
from inkweld_mcp.mcp_server.models import JSON_MIME_TYPE, TextResourceContents

SCHEME = "inkweld://"
PROJECTS_URI = f"{SCHEME}projects"

_PROJECT_PATH = re.compile(r"^inkweld://project/([^/]+)/([^/]+)(?:/(.*))?$")


def project_uri(grant: ProjectGrant, suffix: str = "") -> str:
    base = f"{SCHEME}project/{grant.owner}/{grant.slug}"
    return f"{base}/{suffix}" if suffix else base


def split_project_uri(uri: str) -> Optional[Tuple[str, str, str]]:
    """Split ``inkweld://project/{owner}/{slug}[/{path}]`` into its parts.

    The path is returned as an empty string for the bare project URI.
    """
    match = _PROJECT_PATH.match(uri)
    if not match:
        return None
    owner, slug, path = match.groups()
    return owner, slug, path or ""


def readable_grant(ctx: McpContext, owner: str, slug: str, permission: str) -> Optional[ProjectGrant]:
    grant = get_project_by_key(ctx, owner, slug)
    if grant is None or permission not in grant.permissions:
        return None
    return grant


def json_contents(uri: str, data: Any) -> TextResourceContents:
    return TextResourceContents(
        uri=uri,
        mimeType=JSON_MIME_TYPE,
        text=json.dumps(data, indent=2, ensure_ascii=False, default=str),
    )
