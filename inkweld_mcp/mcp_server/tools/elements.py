"""Element mutation tool handlers.

Every handler reads the whole element array, applies a pure tree helper and
writes the array back in one engine transaction, so the positional hierarchy
is preserved for every connected client.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from inkweld_mcp.documents.ids import new_element_id
from inkweld_mcp.exceptions import InkweldError
from inkweld_mcp.logger import Logger, session_logger
from inkweld_mcp.mcp_server.context import McpContext, ProjectGrant
from inkweld_mcp.mcp_server.responses import _error, _success
from inkweld_mcp.mcp_server.tool_types import ToolResponse
from inkweld_mcp.mcp_server.tools.common import (
    element_not_found,
    find_element,
    project_documents,
    reports_errors,
    resolve_project,
)
from inkweld_mcp.permissions import WRITE_ELEMENTS
from inkweld_mcp.tree import (
    ELEMENT_TYPES,
    find_parent_by_position,
    get_siblings,
    get_subtree,
    index_of,
    insert_element,
    make_element_comparator,
    move_element,
    normalize,
    remove_element,
    sort_children,
)
from inkweld_mcp.validation.tool_models import (
    CreateElementInput,
    ElementRefInput,
    MoveElementsInput,
    ReorderElementInput,
    ReplaceAllElementsInput,
    SortElementsInput,
    TagElementInput,
    UpdateElementInput,
)

logger: Logger = session_logger


@reports_errors("creating element")
async def _tool_create_element(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), WRITE_ELEMENTS)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = CreateElementInput.model_validate(arguments)

    docs = project_documents(ctx, grant)
    elements = await docs.get_elements()
    new_element = {
        "id": new_element_id(),
        "name": payload.name,
        "type": payload.type,
        "parentId": payload.parent_id,
        "level": 0,
        "expandable": payload.type == "FOLDER",
        "order": 0,
        "version": 0,
        "metadata": {},
    }
    updated = insert_element(elements, new_element, payload.parent_id)
    await docs.replace_all_elements(updated)

    _, inserted = find_element(updated, new_element["id"])
    logger.info("Element created", project=grant.key, element_id=new_element["id"], type=payload.type)
    return _success(
        f'Created {payload.type} "{payload.name}" with ID {new_element["id"]}',
        {"success": True, "element": inserted},
    )


@reports_errors("replacing elements")
async def _tool_replace_all_elements(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), WRITE_ELEMENTS)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = ReplaceAllElementsInput.model_validate(arguments)

    seen: set = set()
    previous_level = -1
    for index, spec in enumerate(payload.elements):
        if spec.id in seen:
            return _error(f'Error: duplicate element id "{spec.id}"')
        if spec.level > previous_level + 1:
            return _error(
                f'Error: element "{spec.id}" at index {index} has level {spec.level}; '
                f"levels may only increase by one (previous level {previous_level})"
            )
        seen.add(spec.id)
        previous_level = spec.level

    raw: List[Dict[str, Any]] = []
    for index, spec in enumerate(payload.elements):
        element: Dict[str, Any] = {
            "id": spec.id,
            "name": spec.name,
            "type": spec.type,
            "parentId": None,
            "level": spec.level,
            "expandable": spec.expandable if spec.expandable is not None else spec.type == "FOLDER",
            "order": index,
            "version": 0,
            "metadata": {},
        }
        if spec.schema_id:
            element["schemaId"] = spec.schema_id
        raw.append(element)
    elements = normalize(raw)

    await project_documents(ctx, grant).replace_all_elements(elements)
    logger.info("Elements replaced", project=grant.key, count=len(elements))
    return _success(
        f"Replaced all elements with {len(elements)} new elements",
        {"success": True, "count": len(elements)},
    )


@reports_errors("updating element")
async def _tool_update_element(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), WRITE_ELEMENTS)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = UpdateElementInput.model_validate(arguments)

    if payload.type is not None and payload.type not in ELEMENT_TYPES:
        return _error(f'Error: invalid type "{payload.type}"')
    if payload.name is None and payload.type is None:
        return _error("Error: at least one of name or type must be provided")

    docs = project_documents(ctx, grant)
    elements = await docs.get_elements()
    index, element = find_element(elements, payload.element_id)
    if element is None:
        return element_not_found(payload.element_id)

    new_type = payload.type or element.get("type")
    updated_element = dict(
        element,
        name=payload.name if payload.name is not None else element.get("name"),
        type=new_type,
        version=int(element.get("version", 0)) + 1,
        expandable=new_type == "FOLDER",
    )
    updated = list(elements)
    updated[index] = updated_element
    await docs.replace_all_elements(updated)

    changes = []
    if payload.name is not None:
        changes.append(f'name="{payload.name}"')
    if payload.type is not None:
        changes.append(f"type={payload.type}")
    return _success(
        f'Updated element "{element.get("name")}": {", ".join(changes)}',
        {"success": True, "element": updated_element},
    )


@reports_errors("deleting element")
async def _tool_delete_element(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), WRITE_ELEMENTS)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = ElementRefInput.model_validate(arguments)

    docs = project_documents(ctx, grant)
    elements = await docs.get_elements()
    index, element = find_element(elements, payload.element_id)
    if element is None:
        return element_not_found(payload.element_id)

    subtree = get_subtree(elements, index)
    await docs.replace_all_elements(remove_element(elements, payload.element_id))

    deleted_ids = [e["id"] for e in subtree]
    logger.info("Element deleted", project=grant.key, element_id=payload.element_id, count=len(subtree))
    return _success(
        f'Deleted element "{element.get("name")}" and {len(subtree) - 1} descendants',
        {"success": True, "deletedIds": deleted_ids, "deletedCount": len(subtree)},
    )


@reports_errors("moving elements")
async def _tool_move_elements(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), WRITE_ELEMENTS)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = MoveElementsInput.model_validate(arguments)
    new_parent_id = payload.new_parent_id

    docs = project_documents(ctx, grant)
    elements = await docs.get_elements()
    if new_parent_id is not None:
        _, parent = find_element(elements, new_parent_id)
        if parent is None:
            return _error(f'Error: parent "{new_parent_id}" not found')
        if parent.get("type") != "FOLDER":
            return _error(f'Error: parent "{new_parent_id}" is not a folder')

    moved: List[str] = []
    errors: List[str] = []
    for element_id in payload.element_ids:
        try:
            elements = move_element(elements, element_id, new_parent_id)
        except InkweldError as exc:
            errors.append(f"{element_id}: {exc.message}")
            continue
        _, element = find_element(elements, element_id)
        moved.append(element.get("name") if element else element_id)

    if not moved:
        return _error(f"Error: no elements moved. Errors: {', '.join(errors)}")

    await docs.replace_all_elements(elements)
    text = f"Moved {len(moved)} elements to {new_parent_id or 'root'}: {', '.join(moved)}"
    if errors:
        text += f" (errors: {', '.join(errors)})"
    return _success(
        text,
        {
            "success": True,
            "movedCount": len(moved),
            "movedElements": moved,
            "newParentId": new_parent_id,
            "errors": errors,
        },
    )


@reports_errors("reordering element")
async def _tool_reorder_element(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), WRITE_ELEMENTS)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = ReorderElementInput.model_validate(arguments)
    if payload.after_element_id is None and payload.position is None:
        return _error("Error: either afterElementId or position is required")

    docs = project_documents(ctx, grant)
    elements = await docs.get_elements()
    index = index_of(elements, payload.element_id)
    if index == -1:
        return element_not_found(payload.element_id)

    element = elements[index]
    parent = find_parent_by_position(elements, index)
    parent_id: Optional[str] = parent["id"] if parent is not None else None
    others = [e["id"] for e in get_siblings(elements, payload.element_id) if e["id"] != element["id"]]

    after_id: Optional[str] = None
    at_start = False
    if payload.after_element_id is not None:
        if payload.after_element_id not in others:
            return _error(
                f'Error: "{payload.after_element_id}" is not a sibling of "{payload.element_id}"'
            )
        after_id = payload.after_element_id
    else:
        position = payload.position
        if position == 0 or not others:
            at_start = True
        elif position < 0 or position >= len(others):
            after_id = others[-1]
        else:
            after_id = others[position - 1]

    updated = move_element(elements, payload.element_id, parent_id, after_id, at_start=at_start)
    await docs.replace_all_elements(updated)

    if payload.after_element_id is not None:
        where = f' after "{payload.after_element_id}"'
    else:
        where = f" to position {payload.position}"
    return _success(
        f'Reordered element "{element.get("name")}"{where}',
        {"success": True, "elementId": payload.element_id},
    )


@reports_errors("sorting elements")
async def _tool_sort_elements(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), WRITE_ELEMENTS)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = SortElementsInput.model_validate(arguments)

    docs = project_documents(ctx, grant)
    elements = await docs.get_elements()
    if payload.parent_id is not None and index_of(elements, payload.parent_id) == -1:
        return _error(f'Error: parent "{payload.parent_id}" not found')

    comparator = make_element_comparator(
        payload.sort_by, descending=payload.descending, folders_first=payload.folders_first
    )
    updated = sort_children(elements, payload.parent_id, comparator, recursive=payload.recursive)
    await docs.replace_all_elements(updated)

    description = payload.sort_by
    if payload.descending:
        description += " (descending)"
    if payload.folders_first:
        description += ", folders first"
    if payload.recursive:
        description += " (recursive)"
    return _success(
        f"Sorted elements by {description}",
        {
            "success": True,
            "sortBy": payload.sort_by,
            "descending": payload.descending,
            "foldersFirst": payload.folders_first,
            "recursive": payload.recursive,
        },
    )


def _current_tags(element: Dict[str, Any]) -> List[str]:
    raw = (element.get("metadata") or {}).get("tags")
    if not raw:
        return []
    try:
        tags = json.loads(raw)
    except (TypeError, ValueError):
        return []
    return [str(t) for t in tags] if isinstance(tags, list) else []


def _unique(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


@reports_errors("updating tags")
async def _tool_tag_element(ctx: McpContext, arguments: Dict[str, Any]) -> ToolResponse:
    grant = resolve_project(ctx, arguments.get("project"), WRITE_ELEMENTS)
    if not isinstance(grant, ProjectGrant):
        return grant
    payload = TagElementInput.model_validate(arguments)

    docs = project_documents(ctx, grant)
    elements = await docs.get_elements()
    index, element = find_element(elements, payload.element_id)
    if element is None:
        return element_not_found(payload.element_id)

    previous = _current_tags(element)
    if payload.action == "add":
        new_tags = _unique(previous + payload.tags)
    elif payload.action == "remove":
        new_tags = [t for t in previous if t not in payload.tags]
    else:
        new_tags = _unique(payload.tags)

    updated = list(elements)
    metadata = dict(element.get("metadata") or {})
    metadata["tags"] = json.dumps(new_tags, separators=(",", ":"))
    updated[index] = dict(element, metadata=metadata)
    await docs.replace_all_elements(updated)

    return _success(
        f'Updated tags for "{element.get("name")}": {", ".join(new_tags) if new_tags else "(no tags)"}',
        {
            "success": True,
            "elementId": payload.element_id,
            "elementName": element.get("name"),
            "previousTags": previous,
            "newTags": new_tags,
        },
    )
