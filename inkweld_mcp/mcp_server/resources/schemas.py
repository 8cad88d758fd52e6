"""Worldbuilding schema resources."""

from __future__ import annotations

from typing import List, Optional

from inkweld_mcp.mcp_server.context import McpContext, projects_with_permission
from inkweld_mcp.mcp_server.models import ResourceDescriptor, TextResourceContents
from inkweld_mcp.mcp_server.registry import ResourceHandler
from inkweld_mcp.mcp_server.resources.base import json_contents, project_uri, readable_grant, split_project_uri
from inkweld_mcp.mcp_server.tools.common import project_documents
from inkweld_mcp.permissions import READ_SCHEMAS


class SchemasResourceHandler(ResourceHandler):
    name = "schemas"

    async def list(self, ctx: McpContext) -> List[ResourceDescriptor]:
        return [
            ResourceDescriptor(
                uri=project_uri(grant, "schemas"),
                name=f"Schemas ({grant.key})",
                title=f"Worldbuilding Schemas - {grant.key}",
                description="Field templates for worldbuilding entry types. Read .../schema/{id} for one schema.",
            )
            for grant in projects_with_permission(ctx, READ_SCHEMAS)
        ]

    async def read(self, ctx: McpContext, uri: str) -> Optional[TextResourceContents]:
        parts = split_project_uri(uri)
        if parts is None:
            return None
        owner, slug, path = parts
        if path != "schemas" and not path.startswith("schema/"):
            return None

        grant = readable_grant(ctx, owner, slug, READ_SCHEMAS)
        if grant is None:
            return None

        schemas = await project_documents(ctx, grant).get_schemas()
        if path == "schemas":
            return json_contents(uri, schemas)

        schema_id = path[len("schema/") :]
        for schema in schemas:
            if schema.get("id") == schema_id or schema.get("type") == schema_id:
                return json_contents(uri, schema)
        return None
