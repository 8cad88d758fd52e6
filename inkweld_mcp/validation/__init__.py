"""Pydantic input models for MCP tool arguments."""
