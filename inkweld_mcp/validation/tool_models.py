"""Input models for MCP tool arguments.

Tool handlers resolve the ``project`` argument first (it produces dedicated
error messages), then validate the remaining arguments with these models.
Field aliases are the camelCase names clients send.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

ElementType = Literal["FOLDER", "ITEM", "WORLDBUILDING"]
SortBy = Literal["name", "type", "type-then-name"]


class ToolInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    project: str


def _blank_to_none(value: Any) -> Any:
    if value == "":
        return None
    return value


# "" and null both mean "none" (root level, no filter)
OptionalId = Annotated[Optional[str], BeforeValidator(_blank_to_none)]


# ============================================================================
# Discovery
# ============================================================================


class GetProjectTreeInput(ToolInput):
    parent_id: OptionalId = Field(None, alias="parentId")
    max_depth: Optional[int] = Field(None, alias="maxDepth", ge=0)


class SearchElementsInput(ToolInput):
    query: str
    types: List[str] = Field(default_factory=list)
    limit: Optional[int] = None


class SearchWorldbuildingInput(ToolInput):
    query: str
    schema_types: List[str] = Field(default_factory=list, alias="schemaTypes")
    fields: List[str] = Field(default_factory=list)
    limit: Optional[int] = None


class SearchRelationshipsInput(ToolInput):
    element_id: str = Field(..., alias="elementId", min_length=1)
    relationship_type: Optional[str] = Field(None, alias="relationshipType")
    direction: Literal["source", "target", "both"] = "both"


class ElementRefInput(ToolInput):
    element_id: str = Field(..., alias="elementId", min_length=1)


class GetDocumentContentInput(ElementRefInput):
    format: Literal["text", "xml"] = "text"


class GetRelationshipsGraphInput(ToolInput):
    element_id: OptionalId = Field(None, alias="elementId")


# ============================================================================
# Element mutation
# ============================================================================


class CreateElementInput(ToolInput):
    name: str = Field(..., min_length=1)
    type: ElementType
    parent_id: OptionalId = Field(None, alias="parentId")

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name is required")
        return value


class ElementSpec(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    name: str
    type: ElementType
    level: int = Field(..., ge=0)
    expandable: Optional[bool] = None
    schema_id: Optional[str] = Field(None, alias="schemaId")


class ReplaceAllElementsInput(ToolInput):
    elements: List[ElementSpec]


class UpdateElementInput(ElementRefInput):
    name: Optional[str] = None
    type: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else None


class MoveElementsInput(ToolInput):
    element_ids: List[str] = Field(..., alias="elementIds", min_length=1)
    new_parent_id: OptionalId = Field(None, alias="newParentId")


class ReorderElementInput(ElementRefInput):
    after_element_id: OptionalId = Field(None, alias="afterElementId")
    position: Optional[int] = None


class SortElementsInput(ToolInput):
    parent_id: OptionalId = Field(None, alias="parentId")
    sort_by: SortBy = Field("name", alias="sortBy")
    descending: bool = False
    folders_first: bool = Field(True, alias="foldersFirst")
    recursive: bool = False


class TagElementInput(ElementRefInput):
    action: Literal["add", "remove", "set"]
    tags: List[str]


# ============================================================================
# Worldbuilding mutation
# ============================================================================


class UpdateWorldbuildingInput(ElementRefInput):
    fields: Dict[str, Any]


class CreateRelationshipInput(ToolInput):
    source_id: str = Field(..., alias="sourceId", min_length=1)
    target_id: str = Field(..., alias="targetId", min_length=1)
    type: str = Field(..., min_length=1)
    details: Optional[str] = None


class DeleteRelationshipInput(ToolInput):
    relationship_id: str = Field(..., alias="relationshipId", min_length=1)


class CreateSnapshotInput(ElementRefInput):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None


# ============================================================================
# Images and media
# ============================================================================


class GenerateImageInput(ToolInput):
    prompt: str = Field(..., min_length=1)
    profile_id: Optional[str] = Field(None, alias="profileId")
    size: Optional[str] = None


class SetElementImageInput(ElementRefInput):
    base64_data: Optional[str] = Field(None, alias="base64Data")
    media_url: Optional[str] = Field(None, alias="mediaUrl")


class GenerateElementImageInput(ElementRefInput):
    prompt: str = Field(..., min_length=1)
    profile_id: Optional[str] = Field(None, alias="profileId")
    size: Optional[str] = None


class SetProjectCoverInput(ToolInput):
    base64_data: Optional[str] = Field(None, alias="base64Data")
    media_url: Optional[str] = Field(None, alias="mediaUrl")


class GenerateProjectCoverInput(ToolInput):
    prompt: str = Field(..., min_length=1)
    profile_id: Optional[str] = Field(None, alias="profileId")


class ListProjectMediaInput(ToolInput):
    prefix: Optional[str] = None
    include_non_media: bool = Field(False, alias="includeNonMedia")


class GetMediaContentInput(ToolInput):
    media_url: Optional[str] = Field(None, alias="mediaUrl")
    filename: Optional[str] = None
    as_: str = Field("auto", alias="as")
    max_bytes: Any = Field(None, alias="maxBytes")
