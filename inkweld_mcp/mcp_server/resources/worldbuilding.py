"""Worldbuilding and relationship resources."""

from __future__ import annotations

import re
from typing import List, Optional

from inkweld_mcp.mcp_server.context import McpContext, projects_with_permission
from inkweld_mcp.mcp_server.models import ResourceDescriptor, TextResourceContents
from inkweld_mcp.mcp_server.registry import ResourceHandler
from inkweld_mcp.mcp_server.resources.base import json_contents, project_uri, readable_grant
from inkweld_mcp.mcp_server.tools.common import project_documents
from inkweld_mcp.permissions import READ_WORLDBUILDING

WORLDBUILDING_URI = re.compile(
    r"^inkweld://project/([^/]+)/([^/]+)/(worldbuilding(?:/.*)?|relationships)$"
)


class WorldbuildingResourceHandler(ResourceHandler):
    """Lists one worldbuilding summary and one relationships resource per project.

    Entries are reachable as ``.../worldbuilding/{id}`` but are never listed
    individually, since that would load every entry's document.
    """

    name = "worldbuilding"

    async def list(self, ctx: McpContext) -> List[ResourceDescriptor]:
        resources: List[ResourceDescriptor] = []
        for grant in projects_with_permission(ctx, READ_WORLDBUILDING):
            resources.append(
                ResourceDescriptor(
                    uri=project_uri(grant, "worldbuilding"),
                    name=f"Worldbuilding ({grant.key})",
                    title=f"All Worldbuilding Entries - {grant.key}",
                    description=(
                        "List of all worldbuilding elements (characters, locations, items, etc.). "
                        "Read this resource to discover individual entries."
                    ),
                )
            )
            resources.append(
                ResourceDescriptor(
                    uri=project_uri(grant, "relationships"),
                    name=f"Relationships ({grant.key})",
                    title=f"Element Relationships - {grant.key}",
                    description="All relationships between worldbuilding elements",
                )
            )
        return resources

    async def read(self, ctx: McpContext, uri: str) -> Optional[TextResourceContents]:
        match = WORLDBUILDING_URI.match(uri)
        if not match:
            return None
        owner, slug, path = match.groups()

        grant = readable_grant(ctx, owner, slug, READ_WORLDBUILDING)
        if grant is None:
            return None
        documents = project_documents(ctx, grant)

        if path == "relationships":
            return json_contents(uri, await documents.get_relationships())

        if path == "worldbuilding":
            summaries = []
            for element in await documents.get_elements():
                if element.get("type") != "WORLDBUILDING":
                    continue
                entry = await documents.get_worldbuilding(element["id"])
                summaries.append(
                    {
                        "id": element["id"],
                        "name": element.get("name"),
                        "type": element.get("type"),
                        "schemaId": element.get("schemaId"),
                        "description": entry["identity"].get("description"),
                    }
                )
            return json_contents(uri, summaries)

        element_id = path[len("worldbuilding/") :]
        if not element_id:
            return None
        entry = await documents.get_worldbuilding(element_id)
        return json_contents(uri, {"id": element_id, **entry})
