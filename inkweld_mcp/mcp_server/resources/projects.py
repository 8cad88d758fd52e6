"""Project listing and per-project metadata resources."""

from __future__ import annotations

from typing import List, Optional

from inkweld_mcp.mcp_server.context import McpContext
from inkweld_mcp.mcp_server.models import ResourceDescriptor, TextResourceContents
from inkweld_mcp.mcp_server.registry import ResourceHandler
from inkweld_mcp.mcp_server.resources.base import (
    PROJECTS_URI,
    json_contents,
    project_uri,
    readable_grant,
    split_project_uri,
)
from inkweld_mcp.mcp_server.tools.common import get_services
from inkweld_mcp.permissions import READ_PROJECT


class ProjectsResourceHandler(ResourceHandler):
    name = "projects"

    async def list(self, ctx: McpContext) -> List[ResourceDescriptor]:
        if not ctx.accessible_projects:
            return []

        resources = [
            ResourceDescriptor(
                uri=PROJECTS_URI,
                name="Projects",
                title="Accessible Projects",
                description="Every project this connection may access, with role and permissions.",
            )
        ]
        for grant in ctx.accessible_projects:
            if READ_PROJECT not in grant.permissions:
                continue
            resources.append(
                ResourceDescriptor(
                    uri=project_uri(grant),
                    name=f"Project ({grant.key})",
                    title=f"Project Metadata - {grant.key}",
                    description="Project title, description and timestamps.",
                )
            )
        return resources

    async def read(self, ctx: McpContext, uri: str) -> Optional[TextResourceContents]:
        if uri == PROJECTS_URI:
            if not ctx.accessible_projects:
                return None
            return json_contents(uri, [grant.to_dict() for grant in ctx.accessible_projects])

        parts = split_project_uri(uri)
        if parts is None or parts[2]:
            return None
        owner, slug, _ = parts

        grant = readable_grant(ctx, owner, slug, READ_PROJECT)
        if grant is None:
            return None

        record = await get_services(ctx).metadata.find_project(owner, slug)
        if record is None:
            return None
        payload = record.to_public()
        payload["role"] = grant.role
        payload["permissions"] = list(grant.permissions)
        return json_contents(uri, payload)
