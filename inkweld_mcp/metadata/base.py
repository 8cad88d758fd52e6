"""Metadata store interface.

Projects, image profiles and document snapshots live in the relational store
owned by the main application. The MCP server reads projects and profiles and
writes cover filenames and snapshots through this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from inkweld_mcp.metadata.models import ImageProfile, ProjectRecord, SnapshotRecord


class MetadataStore(ABC):
    """Abstract metadata store"""

    @abstractmethod
    async def get_project(self, project_id: str) -> Optional[ProjectRecord]:
        """
        Fetch a project by id

        Args:
            project_id: Project identifier

        Returns:
            Project record or None if not found
        """
        pass

    @abstractmethod
    async def find_project(self, owner: str, slug: str) -> Optional[ProjectRecord]:
        """
        Fetch a project by owner username and slug

        Returns:
            Project record or None if not found
        """
        pass

    @abstractmethod
    async def update_project_cover(self, project_id: str, cover_image: Optional[str]) -> None:
        """
        Record the cover image filename of a project

        Raises:
            StorageError: If the project does not exist
        """
        pass

    @abstractmethod
    async def list_image_profiles(self, enabled_only: bool = True) -> List[ImageProfile]:
        """List image generation profiles, enabled ones only by default."""
        pass

    @abstractmethod
    async def get_image_profile(self, profile_id: str) -> Optional[ImageProfile]:
        pass

    @abstractmethod
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
        """
        Persist a document snapshot

        Returns:
            The stored snapshot with its id and creation time
        """
        pass
