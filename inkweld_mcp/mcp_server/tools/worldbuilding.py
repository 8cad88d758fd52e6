"""Worldbuilding, relationship and snapshot tool handlers."""

from __future__ import annotations

from typing import Any, Dict

from inkweld_mcp.documents.ids import new_relationship_id, utc_now_iso
from inkweld_mcp.documents.prosemirror import count_words, extract_text
from inkweld_mcp.logger import Logger, session_logger
from inkweld_mcp.mcp_server.context import McpContext, ProjectGrant
from inkweld_mcp.mcp_server.responses import _error, _success
from inkweld_mcp.mcp_server.tool_types import ToolResponse
from inkweld_mcp.mcp_server.tools.common import (
    element_not_found,
    find_element,
    get_services,
    project_documents,
    reports_errors,
    resolve_project,
)
from inkweld_mcp.permissions import WRITE_ELEMENTS, WRITE_WORLDBUILDING
from inkweld_mcp.validation.tool_models import (
    CreateRelationshipInput,
    CreateSnapshotInput,
    DeleteRelationshipInput,
    UpdateWorldbuildingInput,
)

logger: Logger = session_logger

IDENTITY_FIELDS = ("description", "image")
IDENTITY_PREFIX = "identity."


def split_worldbuilding_fields(fields: Dict[str, Any]):
    """Route ``description``, ``image`` and ``identity.*`` keys to the identity map.

    Returns:
        Tuple of (identity updates, worldbuilding updates)
    """
    identity: Dict[str, Any] = {}
    data: Dict[str, Any] = {}
    for key, value in fields.items():
        if key.startswith(IDENTITY_PREFIX):
            identity[key[len(IDENTITY_PREFIX) :]] = value
        elif key in IDENTITY_FIELDS:
            identity[key] = value
        else:
            data[key] = value
    return identity, data


@reports_errors("updating worldbuilding")
async def _tool_update_worldbuilding(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), WRITE_WORLDBUILDING)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = UpdateWorldbuildingInput.model_validate(arguments)

    docs = project_documents(ctx, grant)
    _, element = find_element(await docs.get_elements(), payload.element_id)
    if element is None:
        return element_not_found(payload.element_id)
    if not payload.fields:
        return _error("Error: fields must contain at least one entry")

    identity, data = split_worldbuilding_fields(payload.fields)
    if identity:
        await docs.update_worldbuilding(payload.element_id, identity, "identity")
    if data:
        await docs.update_worldbuilding(payload.element_id, data, "worldbuilding")

    updated_fields = list(payload.fields.keys())
    logger.info(
        "Worldbuilding updated",
        project=grant.key,
        element_id=payload.element_id,
        identity_fields=len(identity),
        data_fields=len(data),
    )
    return _success(
        f'Updated {len(updated_fields)} fields for element "{payload.element_id}": '
        f"{', '.join(updated_fields)}",
        {"success": True, "elementId": payload.element_id, "updatedFields": updated_fields},
    )


@reports_errors("creating relationship")
async def _tool_create_relationship(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), WRITE_WORLDBUILDING)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = CreateRelationshipInput.model_validate(arguments)

    now = utc_now_iso()
    relationship: Dict[str, Any] = {
        "id": new_relationship_id(),
        "sourceElementId": payload.source_id,
        "targetElementId": payload.target_id,
        "relationshipTypeId": payload.type,
        "createdAt": now,
        "updatedAt": now,
    }
    if payload.details:
        relationship["note"] = payload.details

    await project_documents(ctx, grant).add_relationship(relationship)
    return _success(
        f'Created "{payload.type}" relationship from {payload.source_id} to {payload.target_id}',
        {"success": True, "relationship": relationship},
    )


@reports_errors("deleting relationship")
async def _tool_delete_relationship(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), WRITE_WORLDBUILDING)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = DeleteRelationshipInput.model_validate(arguments)

    docs = project_documents(ctx, grant)
    relationships = await docs.get_relationships()
    remaining = [r for r in relationships if r.get("id") != payload.relationship_id]
    if len(remaining) == len(relationships):
        return _error(f'Error: relationship "{payload.relationship_id}" not found')

    await docs.replace_all_relationships(remaining)
    return _success(
        f'Deleted relationship "{payload.relationship_id}"',
        {"success": True, "deletedId": payload.relationship_id},
    )


@reports_errors("creating snapshot")
async def _tool_create_snapshot(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), WRITE_ELEMENTS)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = CreateSnapshotInput.model_validate(arguments)

    docs = project_documents(ctx, grant)
    _, element = find_element(await docs.get_elements(), payload.element_id)
    if element is None:
        return element_not_found(payload.element_id)

    xml_content = await docs.get_document_xml(payload.element_id)
    word_count = count_words(extract_text(xml_content))
    worldbuilding_data = None
    if element.get("type") == "WORLDBUILDING":
        data = (await docs.get_worldbuilding(payload.element_id))["data"]
        worldbuilding_data = data or None

    snapshot = await get_services(ctx).metadata.create_snapshot(
        project_id=grant.project_id,
        document_id=payload.element_id,
        user_id=ctx.actor,
        name=payload.name,
        description=payload.description,
        xml_content=xml_content,
        worldbuilding_data=worldbuilding_data,
        word_count=word_count,
        metadata={
            "createdBy": "mcp",
            "elementName": element.get("name"),
            "elementType": element.get("type"),
        },
    )
    logger.info(
        "Snapshot created",
        project=grant.key,
        element_id=payload.element_id,
        snapshot_id=snapshot.id,
        word_count=word_count,
    )
    return _success(
        f'Created snapshot "{payload.name}" for "{element.get("name")}" ({word_count} words)',
        {
            "success": True,
            "snapshotId": snapshot.id,
            "elementId": payload.element_id,
            "elementName": element.get("name"),
            "wordCount": word_count,
            "createdAt": snapshot.created_at.isoformat(),
        },
    )
