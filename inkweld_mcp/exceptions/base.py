"""Base exception classes for inkweld-mcp.

Every error carries a machine-readable ``code``, a human ``message`` and an
optional ``details`` mapping so that handlers can log and surface failures
consistently.
"""

from typing import Any, Dict, Optional


class InkweldError(Exception):
    """Root of the inkweld-mcp exception hierarchy."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error_code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(InkweldError):
    """Input failed validation."""


class ResourceNotFoundError(InkweldError):
    """A requested entity does not exist."""


class SecurityError(InkweldError):
    """Access was refused."""


class ConfigurationError(InkweldError):
    """The server is misconfigured."""


__all__ = [
    "InkweldError",
    "ValidationError",
    "ResourceNotFoundError",
    "SecurityError",
    "ConfigurationError",
]
