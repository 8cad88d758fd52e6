"""Project-level view over the document engine.

Knows where a project keeps its data:

* ``{owner}:{slug}:elements/`` holds the ``elements``, ``relationships``,
  ``schemas`` and ``publishPlans`` arrays plus the ``projectMeta`` map.
* ``{owner}:{slug}:{elementId}/`` holds an element's ``worldbuilding`` and
  ``identity`` maps and its ``prosemirror`` XML fragment.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal

from inkweld_mcp.documents.base import DocumentEngine
from inkweld_mcp.tree.positional import Element, element_doc_id, elements_doc_id

ELEMENTS = "elements"
RELATIONSHIPS = "relationships"
SCHEMAS = "schemas"
PUBLISH_PLANS = "publishPlans"
PROJECT_META = "projectMeta"
WORLDBUILDING = "worldbuilding"
IDENTITY = "identity"
PROSEMIRROR = "prosemirror"

WorldbuildingMap = Literal["worldbuilding", "identity"]


class ProjectDocuments:
    def __init__(self, engine: DocumentEngine, owner: str, slug: str):
        self.engine = engine
        self.owner = owner
        self.slug = slug

    @property
    def elements_doc(self) -> str:
        return elements_doc_id(self.owner, self.slug)

    def element_doc(self, element_id: str) -> str:
        return element_doc_id(self.owner, self.slug, element_id)

    async def get_elements(self) -> List[Element]:
        return await self.engine.get_array(self.elements_doc, ELEMENTS)

    async def replace_all_elements(self, elements: List[Element]) -> None:
        await self.engine.replace_array(self.elements_doc, ELEMENTS, elements)

    async def get_relationships(self) -> List[Dict[str, Any]]:
        return await self.engine.get_array(self.elements_doc, RELATIONSHIPS)

    async def add_relationship(self, relationship: Dict[str, Any]) -> None:
        await self.engine.append_to_array(self.elements_doc, RELATIONSHIPS, [relationship])

    async def replace_all_relationships(self, relationships: List[Dict[str, Any]]) -> None:
        await self.engine.replace_array(self.elements_doc, RELATIONSHIPS, relationships)

    async def get_schemas(self) -> List[Dict[str, Any]]:
        return await self.engine.get_array(self.elements_doc, SCHEMAS)

    async def get_publish_plans(self) -> List[Dict[str, Any]]:
        return await self.engine.get_array(self.elements_doc, PUBLISH_PLANS)

    async def get_project_meta(self) -> Dict[str, Any]:
        return await self.engine.get_map(self.elements_doc, PROJECT_META)

    async def set_cover_media_id(self, media_id: str) -> None:
        await self.engine.update_map(self.elements_doc, PROJECT_META, {"coverMediaId": media_id})

    async def get_worldbuilding(self, element_id: str) -> Dict[str, Dict[str, Any]]:
        doc_id = self.element_doc(element_id)
        return {
            "identity": await self.engine.get_map(doc_id, IDENTITY),
            "data": await self.engine.get_map(doc_id, WORLDBUILDING),
        }

    async def update_worldbuilding(
        self, element_id: str, updates: Dict[str, Any], map_name: WorldbuildingMap = "worldbuilding"
    ) -> None:
        await self.engine.update_map(self.element_doc(element_id), map_name, updates)

    async def get_document_xml(self, element_id: str) -> str:
        return await self.engine.get_xml_fragment(self.element_doc(element_id), PROSEMIRROR)

    async def set_document_xml(self, element_id: str, xml: str) -> None:
        await self.engine.replace_xml_fragment(self.element_doc(element_id), PROSEMIRROR, xml)
