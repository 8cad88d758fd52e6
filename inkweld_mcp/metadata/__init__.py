from inkweld_mcp.metadata.base import MetadataStore
from inkweld_mcp.metadata.memory import InMemoryMetadataStore
from inkweld_mcp.metadata.models import ImageProfile, ProjectRecord, SnapshotRecord

__all__ = [
    "ImageProfile",
    "InMemoryMetadataStore",
    "MetadataStore",
    "ProjectRecord",
    "SnapshotRecord",
]
