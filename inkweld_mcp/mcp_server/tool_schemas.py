"""MCP tool schemas (tools/list) for the Inkweld workspace.

Kept apart from the handlers so the long Tool(...) definitions do not bury
the tool logic. Property names are the camelCase names clients send.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcp.types import Tool

from inkweld_mcp.mcp_server.tools.common import PROJECT_PROPERTY_SCHEMA

ELEMENT_TYPE_SCHEMA = {
    "type": "string",
    "enum": ["FOLDER", "ITEM", "WORLDBUILDING"],
    "description": "FOLDER groups other elements, ITEM is a prose document, WORLDBUILDING is a structured entry.",
}

ELEMENT_ID_SCHEMA = {"type": "string", "description": "Element id (from get_project_tree or search_elements)."}

PROFILE_ID_SCHEMA = {
    "type": "string",
    "description": "Image profile id from list_image_profiles. Defaults to the first enabled profile.",
}

MEDIA_URL_SCHEMA = {
    "type": "string",
    "description": "Existing project media file as media://filename.ext (see list_project_media).",
}

BASE64_SCHEMA = {
    "type": "string",
    "description": "Image bytes as raw base64 or a data:image/...;base64, URL. PNG, JPEG, GIF or WebP.",
}


def _project_schema(
    properties: Optional[Dict[str, Any]] = None, required: Optional[List[str]] = None
) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {"project": PROJECT_PROPERTY_SCHEMA, **(properties or {})},
        "required": ["project", *(required or [])],
    }


def build_tools() -> List[Tool]:
    return [
        # ------------------------------------------------------------------
        # Discovery
        # ------------------------------------------------------------------
        Tool(
            name="get_project_tree",
            title="Get Project Tree",
            description=(
                "Project Structure - Render the element tree (folders, documents, worldbuilding entries) as text. "
                "WORKFLOW: Call this first to learn element ids before reading or changing anything. "
                "Returns: an indented tree with ids and types, plus the flat element list in structuredContent. "
                "TREE MODEL: Structure is determined by array position + level, never by parentId. "
                "Use parentId to show one subtree and maxDepth to limit depth."
            ),
            inputSchema=_project_schema(
                {
                    "parentId": {"type": "string", "description": "Only show the subtree under this element."},
                    "maxDepth": {"type": "integer", "minimum": 0, "description": "Maximum depth to show (0 = top level only)."},
                }
            ),
        ),
        Tool(
            name="search_elements",
            title="Search Elements",
            description=(
                "Element Search - Find elements by name. "
                "Scoring: exact match 1.0, substring 0.8, partial word match 0.5 x matched words. Use '*' to match everything. "
                "Returns up to 20 results by default, 100 at most."
            ),
            inputSchema=_project_schema(
                {
                    "query": {"type": "string", "description": "Text to match against element names, or '*'."},
                    "types": {"type": "array", "items": ELEMENT_TYPE_SCHEMA, "description": "Only return these element types."},
                    "limit": {"type": "integer", "minimum": 1, "maximum": 100},
                },
                ["query"],
            ),
        ),
        Tool(
            name="search_worldbuilding",
            title="Search Worldbuilding",
            description=(
                "Worldbuilding Search - Find characters, locations, items and other entries by their names and field values. "
                "WORKFLOW: Use schemaTypes to restrict to particular schemas and fields to restrict which fields are matched. "
                "Returns up to 10 results by default, 50 at most, with the matching fields listed."
            ),
            inputSchema=_project_schema(
                {
                    "query": {"type": "string", "description": "Text to search for, or '*'."},
                    "schemaTypes": {"type": "array", "items": {"type": "string"}, "description": "Only entries using these schema ids."},
                    "fields": {"type": "array", "items": {"type": "string"}, "description": "Only match these worldbuilding fields."},
                    "limit": {"type": "integer", "minimum": 1, "maximum": 50},
                },
                ["query"],
            ),
        ),
        Tool(
            name="search_relationships",
            title="Search Relationships",
            description=(
                "Relationship Lookup - List relationships an element takes part in. "
                "direction='source' returns outgoing, 'target' incoming, 'both' (default) all of them."
            ),
            inputSchema=_project_schema(
                {
                    "elementId": ELEMENT_ID_SCHEMA,
                    "relationshipType": {"type": "string", "description": "Only relationships of this type."},
                    "direction": {"type": "string", "enum": ["source", "target", "both"], "default": "both"},
                },
                ["elementId"],
            ),
        ),
        Tool(
            name="get_element_full",
            title="Get Element Details",
            description=(
                "Element Inspection - Everything about one element in a single call: the element, its positional parent and "
                "children, its worldbuilding identity and data, and its relationships."
            ),
            inputSchema=_project_schema({"elementId": ELEMENT_ID_SCHEMA}, ["elementId"]),
        ),
        Tool(
            name="get_document_content",
            title="Get Document Content",
            description=(
                "Document Reading - Read a document's prose. format='text' (default) returns plain text with paragraph breaks; "
                "format='xml' returns the raw ProseMirror XML."
            ),
            inputSchema=_project_schema(
                {
                    "elementId": ELEMENT_ID_SCHEMA,
                    "format": {"type": "string", "enum": ["text", "xml"], "default": "text"},
                },
                ["elementId"],
            ),
        ),
        Tool(
            name="get_relationships_graph",
            title="Get Relationships Graph",
            description=(
                "Relationship Graph - Nodes and edges for every relationship in the project, "
                "or only those touching elementId when it is given."
            ),
            inputSchema=_project_schema({"elementId": {"type": "string", "description": "Focus on this element."}}),
        ),
        Tool(
            name="get_project_metadata",
            title="Get Project Metadata",
            description=(
                "Project Overview - Title, description, timestamps, element counts by type, cover and your role and permissions."
            ),
            inputSchema=_project_schema(),
        ),
        Tool(
            name="get_publish_plans",
            title="Get Publish Plans",
            description="Publishing - List the project's publish plans (export configurations).",
            inputSchema=_project_schema(),
        ),
        # ------------------------------------------------------------------
        # Element mutation
        # ------------------------------------------------------------------
        Tool(
            name="create_element",
            title="Create Element",
            description=(
                "Element Creation - Add a folder, document or worldbuilding entry. "
                "The new element is appended as the last child of parentId (or at the end of the root level). "
                "Returns the new element including its generated id."
            ),
            inputSchema=_project_schema(
                {
                    "name": {"type": "string", "description": "Display name."},
                    "type": ELEMENT_TYPE_SCHEMA,
                    "parentId": {"type": "string", "description": "Parent folder id. Omit for the root level."},
                },
                ["name", "type"],
            ),
        ),
        Tool(
            name="replace_all_elements",
            title="Replace All Elements",
            description=(
                "Bulk Restructure - Replace the whole element array in one transaction. "
                "CRITICAL: The array order plus each level defines the tree. Levels may only increase by one from one element to the next, "
                "and the first element must be level 0. Elements omitted from the array are removed."
            ),
            inputSchema=_project_schema(
                {
                    "elements": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "id": {"type": "string"},
                                "name": {"type": "string"},
                                "type": ELEMENT_TYPE_SCHEMA,
                                "level": {"type": "integer", "minimum": 0},
                                "expandable": {"type": "boolean"},
                                "schemaId": {"type": "string"},
                            },
                            "required": ["id", "name", "type", "level"],
                        },
                    }
                },
                ["elements"],
            ),
        ),
        Tool(
            name="update_element",
            title="Update Element",
            description="Element Update - Rename an element or change its type. Position in the tree is unchanged.",
            inputSchema=_project_schema(
                {"elementId": ELEMENT_ID_SCHEMA, "name": {"type": "string"}, "type": ELEMENT_TYPE_SCHEMA},
                ["elementId"],
            ),
        ),
        Tool(
            name="delete_element",
            title="Delete Element",
            description="Element Deletion - Delete an element and its entire subtree. This cannot be undone.",
            inputSchema=_project_schema({"elementId": ELEMENT_ID_SCHEMA}, ["elementId"]),
        ),
        Tool(
            name="move_elements",
            title="Move Elements",
            description=(
                "Element Move - Move one or more elements (with their subtrees) to the end of a new parent. "
                "Omit newParentId to move to the root level. An element cannot be moved into its own subtree."
            ),
            inputSchema=_project_schema(
                {
                    "elementIds": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                    "newParentId": {"type": "string", "description": "Target folder id. Omit for the root level."},
                },
                ["elementIds"],
            ),
        ),
        Tool(
            name="reorder_element",
            title="Reorder Element",
            description=(
                "Sibling Reorder - Change an element's position among its siblings without changing its parent. "
                "Give afterElementId to place it right after that sibling, or position (0 = first, -1 = last)."
            ),
            inputSchema=_project_schema(
                {
                    "elementId": ELEMENT_ID_SCHEMA,
                    "afterElementId": {"type": "string", "description": "Sibling to place the element after."},
                    "position": {"type": "integer", "description": "0-based position among siblings; -1 means last."},
                },
                ["elementId"],
            ),
        ),
        Tool(
            name="sort_elements",
            title="Sort Elements",
            description=(
                "Sibling Sort - Sort the children of parentId (or the root level). "
                "Folders come first unless foldersFirst is false; set recursive to sort every nested level too."
            ),
            inputSchema=_project_schema(
                {
                    "parentId": {"type": "string"},
                    "sortBy": {"type": "string", "enum": ["name", "type", "type-then-name"], "default": "name"},
                    "descending": {"type": "boolean", "default": False},
                    "foldersFirst": {"type": "boolean", "default": True},
                    "recursive": {"type": "boolean", "default": False},
                }
            ),
        ),
        Tool(
            name="tag_element",
            title="Tag Element",
            description="Element Tags - Add, remove or replace the tags of an element.",
            inputSchema=_project_schema(
                {
                    "elementId": ELEMENT_ID_SCHEMA,
                    "action": {"type": "string", "enum": ["add", "remove", "set"]},
                    "tags": {"type": "array", "items": {"type": "string"}},
                },
                ["elementId", "action", "tags"],
            ),
        ),
        # ------------------------------------------------------------------
        # Worldbuilding mutation
        # ------------------------------------------------------------------
        Tool(
            name="update_worldbuilding",
            title="Update Worldbuilding",
            description=(
                "Worldbuilding Update - Set fields on a worldbuilding entry. "
                "'description', 'image' and keys prefixed with 'identity.' go to the entry's identity; "
                "everything else is stored as worldbuilding data."
            ),
            inputSchema=_project_schema(
                {
                    "elementId": ELEMENT_ID_SCHEMA,
                    "fields": {"type": "object", "description": "Field name to value."},
                },
                ["elementId", "fields"],
            ),
        ),
        Tool(
            name="create_relationship",
            title="Create Relationship",
            description="Relationship Creation - Link two elements with a typed relationship, e.g. 'ally-of' or 'located-in'.",
            inputSchema=_project_schema(
                {
                    "sourceId": {"type": "string"},
                    "targetId": {"type": "string"},
                    "type": {"type": "string", "description": "Relationship type id."},
                    "details": {"type": "string", "description": "Optional note stored with the relationship."},
                },
                ["sourceId", "targetId", "type"],
            ),
        ),
        Tool(
            name="delete_relationship",
            title="Delete Relationship",
            description="Relationship Deletion - Remove a relationship by id (see search_relationships).",
            inputSchema=_project_schema({"relationshipId": {"type": "string"}}, ["relationshipId"]),
        ),
        Tool(
            name="create_snapshot",
            title="Create Snapshot",
            description=(
                "Document Snapshot - Save a named point-in-time copy of a document's content before making large changes."
            ),
            inputSchema=_project_schema(
                {
                    "elementId": ELEMENT_ID_SCHEMA,
                    "name": {"type": "string"},
                    "description": {"type": "string"},
                },
                ["elementId", "name"],
            ),
        ),
        # ------------------------------------------------------------------
        # Images and media
        # ------------------------------------------------------------------
        Tool(
            name="generate_image",
            title="Generate Image",
            description=(
                "Image Generation - Generate an image from a prompt and save it to project media. "
                "WORKFLOW: Call list_image_profiles to choose a profile, then pass the returned media:// URL to "
                "set_element_image or set_project_cover to use it."
            ),
            inputSchema=_project_schema(
                {
                    "prompt": {"type": "string"},
                    "profileId": PROFILE_ID_SCHEMA,
                    "size": {"type": "string", "description": "WIDTHxHEIGHT, e.g. 1024x1024. Defaults to the profile size."},
                },
                ["prompt"],
            ),
        ),
        Tool(
            name="set_element_image",
            title="Set Element Image",
            description=(
                "Element Image - Set a worldbuilding entry's image from base64Data or an existing mediaUrl. "
                "The image is stored in project media and referenced by media:// URL."
            ),
            inputSchema=_project_schema(
                {"elementId": ELEMENT_ID_SCHEMA, "base64Data": BASE64_SCHEMA, "mediaUrl": MEDIA_URL_SCHEMA},
                ["elementId"],
            ),
        ),
        Tool(
            name="generate_and_set_element_image",
            title="Generate Element Image",
            description="Element Image Generation - Generate an image from a prompt and set it as the element's image.",
            inputSchema=_project_schema(
                {
                    "elementId": ELEMENT_ID_SCHEMA,
                    "prompt": {"type": "string"},
                    "profileId": PROFILE_ID_SCHEMA,
                    "size": {"type": "string"},
                },
                ["elementId", "prompt"],
            ),
        ),
        Tool(
            name="set_project_cover",
            title="Set Project Cover",
            description=(
                "Project Cover - Set the project cover from base64Data or an existing mediaUrl. "
                "The previous cover file is removed and every connected client sees the new cover."
            ),
            inputSchema=_project_schema({"base64Data": BASE64_SCHEMA, "mediaUrl": MEDIA_URL_SCHEMA}),
        ),
        Tool(
            name="generate_project_cover",
            title="Generate Project Cover",
            description="Project Cover Generation - Generate a landscape cover (1248x832) from a prompt and set it as the project cover.",
            inputSchema=_project_schema({"prompt": {"type": "string"}, "profileId": PROFILE_ID_SCHEMA}, ["prompt"]),
        ),
        Tool(
            name="list_image_profiles",
            title="List Image Profiles",
            description="Image Profiles - List the enabled image generation profiles (provider, model, default size).",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="list_project_media",
            title="List Project Media",
            description=(
                "Media Listing - List files in project media with their media:// URLs. "
                "Only images, audio, video and publishable documents are shown unless includeNonMedia is true."
            ),
            inputSchema=_project_schema(
                {
                    "prefix": {"type": "string", "description": "Only files whose name starts with this prefix."},
                    "includeNonMedia": {"type": "boolean", "default": False},
                }
            ),
        ),
        Tool(
            name="get_media_content",
            title="Get Media Content",
            description=(
                "Media Reading - Load a project media file by mediaUrl or filename. "
                "as='auto' (default) returns images as image content, text files as text and anything else as base64."
            ),
            inputSchema=_project_schema(
                {
                    "mediaUrl": MEDIA_URL_SCHEMA,
                    "filename": {"type": "string"},
                    "as": {"type": "string", "enum": ["auto", "image", "text", "base64"], "default": "auto"},
                    "maxBytes": {"type": "integer", "minimum": 1, "default": 262144},
                }
            ),
        ),
    ]
