from inkweld_mcp.storage.base import BlobStore, StoredFile
from inkweld_mcp.storage.file_storage import FileBlobStore

__all__ = ["BlobStore", "FileBlobStore", "StoredFile"]
