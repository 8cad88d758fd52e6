"""JSON-RPC protocol errors."""

from typing import Any, Optional


class McpProtocolError(Exception):
    """Structured error a handler raises to produce a JSON-RPC error reply.

    ``code`` is a numeric JSON-RPC error code (see ``inkweld_mcp.mcp_server.jsonrpc``).
    """

    def __init__(self, code: int, message: str, data: Optional[Any] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def __str__(self) -> str:
        return self.message
