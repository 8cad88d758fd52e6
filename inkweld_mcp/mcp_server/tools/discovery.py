"""Read-only project discovery tool handlers."""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, List

from inkweld_mcp.documents.prosemirror import count_words, extract_text
from inkweld_mcp.mcp_server.context import McpContext, ProjectGrant
from inkweld_mcp.mcp_server.responses import _success
from inkweld_mcp.mcp_server.tool_types import ToolResponse
from inkweld_mcp.mcp_server.tools.common import (
    element_not_found,
    get_services,
    project_documents,
    reports_errors,
    resolve_project,
)
from inkweld_mcp.permissions import READ_ELEMENTS, READ_PROJECT, READ_WORLDBUILDING
from inkweld_mcp.tree import find_parent_by_position, get_direct_children, index_of
from inkweld_mcp.validation.tool_models import (
    ElementRefInput,
    GetDocumentContentInput,
    GetRelationshipsGraphInput,
    ToolInput,
)


def _summary(element: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": element.get("id"), "name": element.get("name"), "type": element.get("type")}


def _involves(relationship: Dict[str, Any], element_id: str) -> bool:
    return element_id in (relationship.get("sourceElementId"), relationship.get("targetElementId"))


@reports_errors("reading element")
async def _tool_get_element_full(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), READ_ELEMENTS)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = ElementRefInput.model_validate(arguments)

    docs = project_documents(ctx, grant)
    elements = await docs.get_elements()
    index = index_of(elements, payload.element_id)
    if index == -1:
        return element_not_found(payload.element_id)

    element = elements[index]
    parent = find_parent_by_position(elements, index)
    children = get_direct_children(elements, index)
    worldbuilding = None
    if element.get("type") == "WORLDBUILDING":
        worldbuilding = await docs.get_worldbuilding(payload.element_id)
    relationships = [r for r in await docs.get_relationships() if _involves(r, payload.element_id)]

    lines = [f'{element.get("type")} "{element.get("name")}" (ID {element.get("id")})']
    lines.append(f'Parent: {parent.get("name") if parent else "(root)"}')
    lines.append(f"Children: {len(children)}")
    if worldbuilding is not None:
        lines.append(f"Worldbuilding fields: {len(worldbuilding['data'])}")
    lines.append(f"Relationships: {len(relationships)}")
    return _success(
        "\n".join(lines),
        {
            "element": element,
            "parent": _summary(parent) if parent else None,
            "children": [_summary(c) for c in children],
            "worldbuilding": worldbuilding,
            "relationships": relationships,
        },
    )


@reports_errors("reading document")
async def _tool_get_document_content(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), READ_ELEMENTS)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = GetDocumentContentInput.model_validate(arguments)

    docs = project_documents(ctx, grant)
    elements = await docs.get_elements()
    index = index_of(elements, payload.element_id)
    if index == -1:
        return element_not_found(payload.element_id)

    xml = await docs.get_document_xml(payload.element_id)
    text = extract_text(xml)
    content = xml if payload.format == "xml" else text
    return _success(
        content or "(empty document)",
        {
            "elementId": payload.element_id,
            "elementName": elements[index].get("name"),
            "format": payload.format,
            "wordCount": count_words(text),
            "content": content,
        },
    )


@reports_errors("building relationship graph")
async def _tool_get_relationships_graph(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), READ_WORLDBUILDING)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = GetRelationshipsGraphInput.model_validate(arguments)

    docs = project_documents(ctx, grant)
    relationships = await docs.get_relationships()
    if payload.element_id:
        relationships = [r for r in relationships if _involves(r, payload.element_id)]

    by_id = {e.get("id"): e for e in await docs.get_elements()}
    node_ids: List[str] = []
    for relationship in relationships:
        for key in ("sourceElementId", "targetElementId"):
            if relationship.get(key) not in node_ids:
                node_ids.append(relationship.get(key))
    if payload.element_id and payload.element_id not in node_ids:
        node_ids.insert(0, payload.element_id)

    nodes = []
    for node_id in node_ids:
        element = by_id.get(node_id)
        nodes.append(
            {
                "id": node_id,
                "name": element.get("name") if element else "Unknown",
                "type": element.get("type") if element else "Unknown",
            }
        )
    edges = [
        {
            "id": r.get("id"),
            "source": r.get("sourceElementId"),
            "target": r.get("targetElementId"),
            "type": r.get("relationshipTypeId"),
            "note": r.get("note"),
        }
        for r in relationships
    ]
    return _success(
        f"Relationship graph: {len(nodes)} nodes, {len(edges)} edges",
        {"nodes": nodes, "edges": edges},
    )


@reports_errors("reading project metadata")
async def _tool_get_project_metadata(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), READ_PROJECT)
    if not isinstance(grant, ProjectGrant):
        return grant
    ToolInput.model_validate(arguments)

    docs = project_documents(ctx, grant)
    record = await get_services(ctx).metadata.find_project(grant.owner, grant.slug)
    project: Dict[str, Any] = (
        record.to_public()
        if record
        else {"id": grant.project_id, "owner": grant.owner, "slug": grant.slug}
    )
    elements = await docs.get_elements()
    counts = dict(Counter(e.get("type", "UNKNOWN") for e in elements))
    cover_media_id = (await docs.get_project_meta()).get("coverMediaId")

    lines = [f'Project "{project.get("title", grant.slug)}" ({grant.key})']
    if project.get("description"):
        lines.append(project["description"])
    lines.append(f"Elements: {len(elements)}")
    for element_type, count in sorted(counts.items()):
        lines.append(f"- {element_type}: {count}")
    if cover_media_id:
        lines.append(f"Cover: {cover_media_id}")
    return _success(
        "\n".join(lines),
        {
            "project": project,
            "elementCount": len(elements),
            "elementCounts": counts,
            "coverMediaId": cover_media_id,
            "role": grant.role,
            "permissions": list(grant.permissions),
        },
    )


@reports_errors("reading publish plans")
async def _tool_get_publish_plans(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), READ_PROJECT)
    if not isinstance(grant, ProjectGrant):
        return grant
    ToolInput.model_validate(arguments)

    plans = await project_documents(ctx, grant).get_publish_plans()
    lines = [f"Found {len(plans)} publish plan(s)."]
    for plan in plans:
        lines.append(f"- {plan.get('name', '(unnamed)')} ({plan.get('id')})")
    return _success("\n".join(lines), {"total": len(plans), "plans": plans})
