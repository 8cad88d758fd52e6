"""Records served by the relational metadata store."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


def _now() -> datetime:
    return datetime.utcnow()


class ProjectRecord(BaseModel):
    id: str
    owner: str = Field(..., description="Username of the project owner")
    slug: str
    title: str
    description: Optional[str] = None
    cover_image: Optional[str] = Field(None, description="Filename of the cover in project media")
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    def to_public(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "owner": self.owner,
            "description": self.description,
            "coverImage": self.cover_image,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


class ImageProfile(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    id: str
    name: str
    provider: str
    model_id: str
    default_size: Optional[str] = None
    enabled: bool = True
    options: Optional[Dict[str, Any]] = Field(
        None, description="Provider-specific generation options"
    )

    def to_public(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "provider": self.provider,
            "modelId": self.model_id,
            "defaultSize": self.default_size,
            "enabled": self.enabled,
        }


class SnapshotRecord(BaseModel):
    id: str
    project_id: str
    document_id: str
    user_id: str
    name: str
    description: Optional[str] = None
    xml_content: str = ""
    worldbuilding_data: Optional[Dict[str, Any]] = None
    word_count: int = 0
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_now)
