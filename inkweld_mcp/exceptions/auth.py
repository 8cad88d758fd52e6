"""Authentication and authorization exceptions."""

from typing import Any, Dict, Optional

from inkweld_mcp.exceptions.base import SecurityError


class AuthenticationError(SecurityError):
    """Raised when a request carries missing, malformed or rejected credentials.

    The transport answers these with HTTP 401 and a ``WWW-Authenticate`` header.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="AUTH_FAILED", message=message, details=details)


class PermissionDeniedError(SecurityError):
    """Raised when an authenticated caller lacks a required permission."""

    def __init__(self, required: list, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code="PERMISSION_DENIED",
            message=f"Permission denied. Required: {' or '.join(required)}",
            details=details,
        )
        self.required = list(required)
