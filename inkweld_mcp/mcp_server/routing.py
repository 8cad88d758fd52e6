"""Handler registration for the MCP server.

Everything is registered explicitly here, once, before the transport starts
accepting requests; the registries are frozen afterwards.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from inkweld_mcp.logger import Logger, session_logger
from inkweld_mcp.mcp_server.registry import Registries, ToolHandler
from inkweld_mcp.mcp_server.resources import (
    ElementsResourceHandler,
    ProjectsResourceHandler,
    SchemasResourceHandler,
    WorldbuildingResourceHandler,
)
from inkweld_mcp.mcp_server.tool_schemas import build_tools
from inkweld_mcp.mcp_server.tool_types import ToolExecute
from inkweld_mcp.mcp_server.tools.discovery import (
    _tool_get_document_content,
    _tool_get_element_full,
    _tool_get_project_metadata,
    _tool_get_publish_plans,
    _tool_get_relationships_graph,
)
from inkweld_mcp.mcp_server.tools.elements import (
    _tool_create_element,
    _tool_delete_element,
    _tool_move_elements,
    _tool_reorder_element,
    _tool_replace_all_elements,
    _tool_sort_elements,
    _tool_tag_element,
    _tool_update_element,
)
from inkweld_mcp.mcp_server.tools.images import (
    _tool_generate_and_set_element_image,
    _tool_generate_image,
    _tool_generate_project_cover,
    _tool_list_image_profiles,
    _tool_set_element_image,
    _tool_set_project_cover,
)
from inkweld_mcp.mcp_server.tools.media import _tool_get_media_content, _tool_list_project_media
from inkweld_mcp.mcp_server.tools.search import (
    _tool_get_project_tree,
    _tool_search_elements,
    _tool_search_relationships,
    _tool_search_worldbuilding,
)
from inkweld_mcp.mcp_server.tools.worldbuilding import (
    _tool_create_relationship,
    _tool_create_snapshot,
    _tool_delete_relationship,
    _tool_update_worldbuilding,
)
from inkweld_mcp.permissions import (
    GENERATE_IMAGES,
    READ_ELEMENTS,
    READ_PROJECT,
    READ_WORLDBUILDING,
    WRITE_ELEMENTS,
    WRITE_WORLDBUILDING,
)

HANDLERS: Dict[str, ToolExecute] = {
    # Discovery
    "get_project_tree": _tool_get_project_tree,
    "search_elements": _tool_search_elements,
    "search_worldbuilding": _tool_search_worldbuilding,
    "search_relationships": _tool_search_relationships,
    "get_element_full": _tool_get_element_full,
    "get_document_content": _tool_get_document_content,
    "get_relationships_graph": _tool_get_relationships_graph,
    "get_project_metadata": _tool_get_project_metadata,
    "get_publish_plans": _tool_get_publish_plans,
    # Element mutation
    "create_element": _tool_create_element,
    "replace_all_elements": _tool_replace_all_elements,
    "update_element": _tool_update_element,
    "delete_element": _tool_delete_element,
    "move_elements": _tool_move_elements,
    "reorder_element": _tool_reorder_element,
    "sort_elements": _tool_sort_elements,
    "tag_element": _tool_tag_element,
    # Worldbuilding mutation
    "update_worldbuilding": _tool_update_worldbuilding,
    "create_relationship": _tool_create_relationship,
    "delete_relationship": _tool_delete_relationship,
    "create_snapshot": _tool_create_snapshot,
    # Images and media
    "generate_image": _tool_generate_image,
    "set_element_image": _tool_set_element_image,
    "generate_and_set_element_image": _tool_generate_and_set_element_image,
    "set_project_cover": _tool_set_project_cover,
    "generate_project_cover": _tool_generate_project_cover,
    "list_image_profiles": _tool_list_image_profiles,
    "list_project_media": _tool_list_project_media,
    "get_media_content": _tool_get_media_content,
}

# Any one of these on any accessible project makes the tool visible and callable.
PERMISSIONS: Dict[str, List[str]] = {
    "get_project_tree": [READ_ELEMENTS],
    "search_elements": [READ_ELEMENTS],
    "search_worldbuilding": [READ_WORLDBUILDING],
    "search_relationships": [READ_WORLDBUILDING],
    "get_element_full": [READ_ELEMENTS],
    "get_document_content": [READ_ELEMENTS],
    "get_relationships_graph": [READ_WORLDBUILDING],
    "get_project_metadata": [READ_PROJECT],
    "get_publish_plans": [READ_PROJECT],
    "create_element": [WRITE_ELEMENTS],
    "replace_all_elements": [WRITE_ELEMENTS],
    "update_element": [WRITE_ELEMENTS],
    "delete_element": [WRITE_ELEMENTS],
    "move_elements": [WRITE_ELEMENTS],
    "reorder_element": [WRITE_ELEMENTS],
    "sort_elements": [WRITE_ELEMENTS],
    "tag_element": [WRITE_ELEMENTS],
    "update_worldbuilding": [WRITE_WORLDBUILDING],
    "create_relationship": [WRITE_WORLDBUILDING],
    "delete_relationship": [WRITE_WORLDBUILDING],
    "create_snapshot": [WRITE_ELEMENTS],
    "generate_image": [GENERATE_IMAGES],
    "set_element_image": [WRITE_WORLDBUILDING],
    "generate_and_set_element_image": [GENERATE_IMAGES],
    "set_project_cover": [WRITE_WORLDBUILDING],
    "generate_project_cover": [GENERATE_IMAGES],
    "list_image_profiles": [READ_PROJECT],
    "list_project_media": [READ_ELEMENTS],
    "get_media_content": [READ_ELEMENTS, READ_WORLDBUILDING],
}


def register_default_handlers(registries: Registries, logger: Optional[Logger] = None) -> Registries:
    """Register the standard resources and tools, then freeze ``registries``."""
    logger = logger or session_logger

    for resource in (
        ProjectsResourceHandler(),
        ElementsResourceHandler(),
        WorldbuildingResourceHandler(),
        SchemasResourceHandler(),
    ):
        registries.add_resource(resource)

    for tool in build_tools():
        execute = HANDLERS.get(tool.name)
        if execute is None:
            raise RuntimeError(f"No handler implemented for tool schema: {tool.name}")
        registries.add_tool(ToolHandler(tool, execute, list(PERMISSIONS[tool.name])))

    missing = set(HANDLERS) - set(registries.tools)
    if missing:
        raise RuntimeError(f"Tool handlers without a schema: {', '.join(sorted(missing))}")

    registries.freeze()
    logger.info(
        "MCP handlers registered",
        resources=len(registries.resources),
        tools=len(registries.tools),
        prompts=len(registries.prompts),
    )
    return registries


def create_registries(logger: Optional[Logger] = None) -> Registries:
    return register_default_handlers(Registries(), logger)
