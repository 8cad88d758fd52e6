"""Base blob storage interface

Project media (element images, covers, generated images) is stored per
project under plain filenames.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


@dataclass
class StoredFile:
    filename: str
    size: int
    mime_type: Optional[str] = None
    uploaded_at: Optional[datetime] = None


class BlobStore(ABC):
    """Abstract base class for project blob storage"""

    @abstractmethod
    async def save_project_file(
        self, owner: str, slug: str, filename: str, data: bytes, mime_type: Optional[str] = None
    ) -> None:
        """
        Save a file into a project's media storage, replacing any existing file

        Args:
            owner: Project owner username
            slug: Project slug
            filename: Plain filename (no path separators)
            data: Raw bytes
            mime_type: Optional content type

        Raises:
            StorageError: If the write fails or the filename is unsafe
        """
        pass

    @abstractmethod
    async def read_project_file(self, owner: str, slug: str, filename: str) -> Optional[bytes]:
        """
        Read a project file

        Returns:
            File bytes or None if not found
        """
        pass

    @abstractmethod
    async def project_file_exists(self, owner: str, slug: str, filename: str) -> bool:
        pass

    @abstractmethod
    async def delete_project_file(self, owner: str, slug: str, filename: str) -> bool:
        """
        Delete a project file

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def list_project_files(
        self, owner: str, slug: str, prefix: Optional[str] = None
    ) -> List[StoredFile]:
        """
        List a project's files, optionally filtered by filename prefix

        Returns:
            Files sorted by filename
        """
        pass
