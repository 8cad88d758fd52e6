"""File-based blob storage

Stores project files under ``{root}/projects/{owner}/{slug}/{filename}``.
"""

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from inkweld_mcp.exceptions import StorageError
from inkweld_mcp.logger import Logger, session_logger
from inkweld_mcp.storage.base import BlobStore, StoredFile
from inkweld_mcp.storage.media import guess_mime_type, is_safe_filename


class FileBlobStore(BlobStore):
    """Project media on the local file system"""

    def __init__(self, root_dir: str, logger: Optional[Logger] = None):
        """
        Initialize file storage

        Args:
            root_dir: Storage root; created if missing
        """
        self.root_dir = Path(root_dir)
        self.logger: Logger = logger or session_logger
        try:
            self.root_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.logger.error("Failed to create storage directory", error=str(e))
            raise StorageError(f"Failed to create storage directory: {e}")
        self.logger.info("File storage initialized", directory=str(self.root_dir))

    def _project_dir(self, owner: str, slug: str) -> Path:
        if not is_safe_filename(owner) or not is_safe_filename(slug):
            raise StorageError(f"Invalid project path: {owner}/{slug}")
        return self.root_dir / "projects" / owner / slug

    def _path(self, owner: str, slug: str, filename: str) -> Path:
        if not is_safe_filename(filename):
            raise StorageError(f"Invalid filename: {filename}")
        return self._project_dir(owner, slug) / filename

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def save_project_file(
        self, owner: str, slug: str, filename: str, data: bytes, mime_type: Optional[str] = None
    ) -> None:
        path = self._path(owner, slug, filename)
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as e:
            self.logger.error("Failed to write project file", filename=filename, error=str(e))
            raise StorageError(f"Failed to save {filename}: {e}")
        self.logger.info(
            "Project file saved",
            project=f"{owner}/{slug}",
            filename=filename,
            size=len(data),
            mime_type=mime_type,
        )

    async def read_project_file(self, owner: str, slug: str, filename: str) -> Optional[bytes]:
        path = self._path(owner, slug, filename)
        if not path.is_file():
            return None
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            self.logger.error("Failed to read project file", filename=filename, error=str(e))
            raise StorageError(f"Failed to read {filename}: {e}")

    async def project_file_exists(self, owner: str, slug: str, filename: str) -> bool:
        return self._path(owner, slug, filename).is_file()

    async def delete_project_file(self, owner: str, slug: str, filename: str) -> bool:
        path = self._path(owner, slug, filename)
        if not path.is_file():
            return False
        try:
            await asyncio.to_thread(path.unlink)
        except OSError as e:
            self.logger.error("Failed to delete project file", filename=filename, error=str(e))
            raise StorageError(f"Failed to delete {filename}: {e}")
        self.logger.info("Project file deleted", project=f"{owner}/{slug}", filename=filename)
        return True

    async def list_project_files(
        self, owner: str, slug: str, prefix: Optional[str] = None
    ) -> List[StoredFile]:
        directory = self._project_dir(owner, slug)
        if not directory.is_dir():
            return []
        files = []
        for path in sorted(directory.iterdir()):
            if not path.is_file():
                continue
            if prefix and not path.name.startswith(prefix):
                continue
            stat = path.stat()
            files.append(
                StoredFile(
                    filename=path.name,
                    size=stat.st_size,
                    mime_type=guess_mime_type(path.name),
                    uploaded_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                )
            )
        return files
