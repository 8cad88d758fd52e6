"""In-memory metadata store for tests and local development."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from inkweld_mcp.exceptions import StorageError
from inkweld_mcp.logger import Logger, session_logger
from inkweld_mcp.metadata.base import MetadataStore
from inkweld_mcp.metadata.models import ImageProfile, ProjectRecord, SnapshotRecord


class InMemoryMetadataStore(MetadataStore):
    def __init__(self, logger: Optional[Logger] = None):
        self.logger: Logger = logger or session_logger
        self.projects: Dict[str, ProjectRecord] = {}
        self.image_profiles: Dict[str, ImageProfile] = {}
        self.snapshots: List[SnapshotRecord] = []

    def add_project(
        self,
        owner: str,
        slug: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> ProjectRecord:
        record = ProjectRecord(
            id=project_id or str(uuid.uuid4()),
            owner=owner,
            slug=slug,
            title=title or slug,
            description=description,
        )
        self.projects[record.id] = record
        return record

    def add_image_profile(self, profile: ImageProfile) -> ImageProfile:
        self.image_profiles[profile.id] = profile
        return profile

    async def get_project(self, project_id: str) -> Optional[ProjectRecord]:
        return self.projects.get(project_id)

    async def find_project(self, owner: str, slug: str) -> Optional[ProjectRecord]:
        for record in self.projects.values():
            if record.owner == owner and record.slug == slug:
                return record
        return None

    async def update_project_cover(self, project_id: str, cover_image: Optional[str]) -> None:
        record = self.projects.get(project_id)
        if record is None:
            raise StorageError(f"Project not found: {project_id}")
        self.projects[project_id] = record.model_copy(
            update={"cover_image": cover_image, "updated_at": datetime.utcnow()}
        )
        self.logger.info("Project cover updated", project_id=project_id, cover_image=cover_image)

    async def list_image_profiles(self, enabled_only: bool = True) -> List[ImageProfile]:
        profiles = list(self.image_profiles.values())
        if enabled_only:
            profiles = [p for p in profiles if p.enabled]
        return profiles

    async def get_image_profile(self, profile_id: str) -> Optional[ImageProfile]:
        return self.image_profiles.get(profile_id)

    async def create_snapshot(
        self,
        *,
        project_id: str,
        document_id: str,
        user_id: str,
        name: str,
        description: Optional[str],
        xml_content: str,
        worldbuilding_data: Optional[Dict[str, Any]],
        word_count: int,
        metadata: Dict[str, Any],
    ) -> SnapshotRecord:
        snapshot = SnapshotRecord(
            id=str(uuid.uuid4()),
            project_id=project_id,
            document_id=document_id,
            user_id=user_id,
            name=name,
            description=description,
            xml_content=xml_content,
            worldbuilding_data=worldbuilding_data,
            word_count=word_count,
            metadata=metadata,
        )
        self.snapshots.append(snapshot)
        self.logger.info(
            "Snapshot stored", snapshot_id=snapshot.id, project_id=project_id, document_id=document_id
        )
        return snapshot
