"""Element tree resources."""

from __future__ import annotations

from typing import List, Optional

from inkweld_mcp.mcp_server.context import McpContext, projects_with_permission
from inkweld_mcp.mcp_server.models import ResourceDescriptor, TextResourceContents
from inkweld_mcp.mcp_server.registry import ResourceHandler
from inkweld_mcp.mcp_server.resources.base import json_contents, project_uri, readable_grant, split_project_uri
from inkweld_mcp.mcp_server.tools.common import find_element, project_documents
from inkweld_mcp.permissions import READ_ELEMENTS


class ElementsResourceHandler(ResourceHandler):
    """Serves ``.../elements`` (the flat array) and ``.../element/{id}``.

    Individual elements are not listed; clients discover ids by reading the
    array.
    """

    name = "elements"

    async def list(self, ctx: McpContext) -> List[ResourceDescriptor]:
        return [
            ResourceDescriptor(
                uri=project_uri(grant, "elements"),
                name=f"Elements ({grant.key})",
                title=f"Project Elements - {grant.key}",
                description=(
                    "Flat, ordered array of folders, documents and worldbuilding entries. "
                    "Tree structure follows array position and level."
                ),
            )
            for grant in projects_with_permission(ctx, READ_ELEMENTS)
        ]

    async def read(self, ctx: McpContext, uri: str) -> Optional[TextResourceContents]:
        parts = split_project_uri(uri)
        if parts is None:
            return None
        owner, slug, path = parts
        if path != "elements" and not path.startswith("element/"):
            return None

        grant = readable_grant(ctx, owner, slug, READ_ELEMENTS)
        if grant is None:
            return None

        elements = await project_documents(ctx, grant).get_elements()
        if path == "elements":
            return json_contents(uri, elements)

        element_id = path[len("element/") :]
        _, element = find_element(elements, element_id)
        if element is None:
            return None
        return json_contents(uri, element)
