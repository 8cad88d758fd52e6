"""MCP tool handlers grouped by intent."""
