"""Exceptions raised by the tree helpers and the external service adapters."""

from typing import Any, Dict, Optional

from inkweld_mcp.exceptions.base import InkweldError, ResourceNotFoundError


class TreeError(InkweldError):
    """An element-tree operation would break the positional hierarchy."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="TREE_ERROR", message=message, details=details)


class ElementNotFoundError(ResourceNotFoundError):
    """An element id does not exist in the project."""

    def __init__(self, element_id: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code="ELEMENT_NOT_FOUND",
            message=f'Element "{element_id}" not found',
            details=details,
        )
        self.element_id = element_id


class DocumentEngineError(InkweldError):
    """The document engine rejected or failed an operation."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="DOCUMENT_ENGINE_ERROR", message=message, details=details)


class StorageError(InkweldError):
    """The blob store failed an operation."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="STORAGE_ERROR", message=message, details=details)


class ImageGenerationError(InkweldError):
    """The image provider failed or returned no usable image."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="IMAGE_GENERATION_ERROR", message=message, details=details)
