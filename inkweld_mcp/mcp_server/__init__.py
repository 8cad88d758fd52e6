"""MCP server: JSON-RPC dispatch, registries, handlers and HTTP transport."""
