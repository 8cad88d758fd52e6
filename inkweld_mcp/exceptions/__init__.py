"""Custom exceptions for inkweld-mcp.

All exceptions include detailed error messages designed for LLM processing,
enabling intelligent error recovery and decision-making.
"""

from inkweld_mcp.exceptions.base import (
    InkweldError,
    ValidationError,
    ResourceNotFoundError,
    SecurityError,
    ConfigurationError,
)
from inkweld_mcp.exceptions.auth import AuthenticationError, PermissionDeniedError
from inkweld_mcp.exceptions.protocol import McpProtocolError
from inkweld_mcp.exceptions.domain import (
    TreeError,
    ElementNotFoundError,
    DocumentEngineError,
    StorageError,
    ImageGenerationError,
)

__all__ = [
    # Base exceptions
    "InkweldError",
    "ValidationError",
    "ResourceNotFoundError",
    "SecurityError",
    "ConfigurationError",
    # Auth
    "AuthenticationError",
    "PermissionDeniedError",
    # Protocol
    "McpProtocolError",
    # Domain
    "TreeError",
    "ElementNotFoundError",
    "DocumentEngineError",
    "StorageError",
    "ImageGenerationError",
]
