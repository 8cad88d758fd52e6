"""Tree and search tool handlers."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from inkweld_mcp.logger import Logger, session_logger
from inkweld_mcp.mcp_server.context import McpContext, ProjectGrant
from inkweld_mcp.mcp_server.responses import _success
from inkweld_mcp.mcp_server.tool_types import ToolResponse
from inkweld_mcp.mcp_server.tools.common import project_documents, reports_errors, resolve_project
from inkweld_mcp.permissions import READ_ELEMENTS, READ_WORLDBUILDING
from inkweld_mcp.search import capped_limit, dedupe_best, match_text, search_in_object, truncate_value
from inkweld_mcp.tree import build_visual_tree, limit_depth, nodes_to_text
from inkweld_mcp.validation.tool_models import (
    GetProjectTreeInput,
    SearchElementsInput,
    SearchRelationshipsInput,
    SearchWorldbuildingInput,
)

logger: Logger = session_logger

ELEMENT_LIMIT_DEFAULT, ELEMENT_LIMIT_CAP = 20, 100
WORLDBUILDING_LIMIT_DEFAULT, WORLDBUILDING_LIMIT_CAP = 10, 50


def _find_children(nodes: List[Dict[str, Any]], node_id: str) -> Optional[List[Dict[str, Any]]]:
    for node in nodes:
        if node["id"] == node_id:
            return node["children"]
        found = _find_children(node["children"], node_id)
        if found is not None:
            return found
    return None


@reports_errors("reading project tree")
async def _tool_get_project_tree(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), READ_ELEMENTS)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = GetProjectTreeInput.model_validate(arguments)

    elements = await project_documents(ctx, grant).get_elements()
    tree = build_visual_tree(elements)
    if payload.parent_id:
        tree = _find_children(tree, payload.parent_id) or []
    tree = limit_depth(tree, payload.max_depth)

    tree_text = nodes_to_text(tree)
    return _success(
        f"Project tree ({len(elements)} elements total):\n\n{tree_text or '(empty project)'}\n\n"
        "Note: Tree structure is determined by array position + level, not parentId.",
        {"total": len(elements), "tree": tree},
    )


@reports_errors("searching elements")
async def _tool_search_elements(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), READ_ELEMENTS)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = SearchElementsInput.model_validate(arguments)
    limit = capped_limit(payload.limit, ELEMENT_LIMIT_DEFAULT, ELEMENT_LIMIT_CAP)

    results = []
    for element in await project_documents(ctx, grant).get_elements():
        if payload.types and element.get("type") not in payload.types:
            continue
        score = match_text(element.get("name"), payload.query)
        if score > 0:
            results.append(
                {
                    "elementId": element.get("id"),
                    "elementName": element.get("name"),
                    "elementType": element.get("type"),
                    "score": score,
                }
            )
    results.sort(key=lambda r: r["score"], reverse=True)

    text = f'Found {len(results)} elements matching "{payload.query}"'
    if payload.types:
        text += f" (filtered by: {', '.join(payload.types)})"
    return _success(text, {"total": len(results), "results": results[:limit]})


@reports_errors("searching worldbuilding")
async def _tool_search_worldbuilding(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), READ_WORLDBUILDING)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = SearchWorldbuildingInput.model_validate(arguments)
    limit = capped_limit(payload.limit, WORLDBUILDING_LIMIT_DEFAULT, WORLDBUILDING_LIMIT_CAP)

    docs = project_documents(ctx, grant)
    entries = [
        e
        for e in await docs.get_elements()
        if e.get("type") == "WORLDBUILDING"
        and (not payload.schema_types or e.get("schemaId") in payload.schema_types)
    ]

    results: List[Dict[str, Any]] = []
    for element in entries:
        base = {
            "elementId": element.get("id"),
            "elementName": element.get("name"),
            "elementType": element.get("type"),
        }
        name_score = match_text(element.get("name"), payload.query)
        if name_score > 0:
            results.append(
                dict(base, matchedField="name", matchedValue=element.get("name"), score=name_score)
            )

        worldbuilding = await docs.get_worldbuilding(element["id"])
        data: Dict[str, Any] = dict(worldbuilding["data"])
        for key, value in worldbuilding["identity"].items():
            data[f"identity.{key}"] = value

        for match in search_in_object(data, payload.query):
            if payload.fields and not any(f in match.field for f in payload.fields):
                continue
            results.append(
                dict(
                    base,
                    matchedField=match.field,
                    matchedValue=truncate_value(match.value),
                    score=match.score,
                )
            )

    deduped = dedupe_best(results)
    logger.debug(
        "Worldbuilding search", project=grant.key, scanned=len(entries), matches=len(deduped)
    )
    return _success(
        f'Found {len(deduped)} worldbuilding entries matching "{payload.query}"',
        {"total": len(deduped), "results": deduped[:limit]},
    )


def _touches(relationship: Dict[str, Any], element_id: str, direction: str) -> bool:
    if direction == "source":
        return relationship.get("sourceElementId") == element_id
    if direction == "target":
        return relationship.get("targetElementId") == element_id
    return element_id in (relationship.get("sourceElementId"), relationship.get("targetElementId"))


@reports_errors("searching relationships")
async def _tool_search_relationships(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), READ_WORLDBUILDING)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = SearchRelationshipsInput.model_validate(arguments)

    docs = project_documents(ctx, grant)
    matching = [
        r
        for r in await docs.get_relationships()
        if (not payload.relationship_type or r.get("relationshipTypeId") == payload.relationship_type)
        and _touches(r, payload.element_id, payload.direction)
    ]

    by_id = {e.get("id"): e for e in await docs.get_elements()}
    enriched = []
    for relationship in matching:
        source = by_id.get(relationship.get("sourceElementId")) or {}
        target = by_id.get(relationship.get("targetElementId")) or {}
        enriched.append(
            dict(
                relationship,
                sourceName=source.get("name", "Unknown"),
                sourceType=source.get("type", "Unknown"),
                targetName=target.get("name", "Unknown"),
                targetType=target.get("type", "Unknown"),
            )
        )

    return _success(
        f"Found {len(matching)} relationships for element {payload.element_id}",
        {"elementId": payload.element_id, "total": len(matching), "relationships": enriched},
    )
