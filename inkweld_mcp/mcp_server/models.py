"""Wire models for resources.

``inkweld://`` URIs are kept as plain strings so they round-trip byte for byte.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

JSON_MIME_TYPE = "application/json"


class ResourceDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uri: str
    name: str
    title: Optional[str] = None
    description: Optional[str] = None
    mimeType: Optional[str] = JSON_MIME_TYPE
    size: Optional[int] = None
    annotations: Optional[Dict[str, Any]] = None


class TextResourceContents(BaseModel):
    uri: str
    mimeType: Optional[str] = JSON_MIME_TYPE
    text: str


def dump_model(model: BaseModel) -> Dict[str, Any]:
    """Serialize a wire model by alias, dropping unset optional fields."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
