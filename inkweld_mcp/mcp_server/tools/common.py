"""Helpers shared by project-scoped tool handlers."""

from __future__ import annotations

import functools
from typing import Any, Optional, Tuple, Union

from inkweld_mcp.documents import ProjectDocuments
from inkweld_mcp.exceptions import InkweldError
from inkweld_mcp.logger import Logger, session_logger
from inkweld_mcp.mcp_server.components import ServerComponents
from inkweld_mcp.mcp_server.context import McpContext, ProjectGrant, get_project_by_key
from inkweld_mcp.mcp_server.responses import _error
from inkweld_mcp.mcp_server.state import ensure_components
from inkweld_mcp.mcp_server.tool_types import ToolExecute, ToolResponse

logger: Logger = session_logger

PROJECT_PROPERTY_SCHEMA = {
    "type": "string",
    "description": (
        'Project identifier in "username/slug" format. '
        "Use the inkweld://projects resource to list available projects."
    ),
}

ProjectAccess = Union[ProjectGrant, ToolResponse]


def get_services(ctx: McpContext) -> ServerComponents:
    """Components attached to the request, falling back to the process-wide set."""
    if ctx.services is not None:
        return ctx.services
    return ensure_components()


def resolve_project(ctx: McpContext, project: Any, permission: str) -> ProjectAccess:
    """Check an ``owner/slug`` argument against the caller's grants.

    Returns:
        The matching ProjectGrant, or an isError result describing the problem
    """
    value = str(project if project is not None else "").strip()
    if not value:
        return _error('Error: project parameter is required. Use "username/slug" format.')

    parts = value.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return _error(f'Error: invalid project format "{value}". Use "username/slug" format.')

    owner, slug = parts
    grant = get_project_by_key(ctx, owner, slug)
    if grant is None:
        return _error(f'Error: No access to project "{value}". Check your authorized projects.')
    if permission not in grant.permissions:
        return _error(f'Error: No "{permission}" permission for project "{value}".')
    return grant


def project_documents(ctx: McpContext, grant: ProjectGrant) -> ProjectDocuments:
    engine = get_services(ctx).document_engine.bind(ctx.auth_token)
    return ProjectDocuments(engine, grant.owner, grant.slug)


def find_element(elements, element_id: Optional[str]) -> Tuple[int, Optional[dict]]:
    for index, element in enumerate(elements):
        if element.get("id") == element_id:
            return index, element
    return -1, None


def element_not_found(element_id: str) -> ToolResponse:
    return _error(f'Error: element "{element_id}" not found')


def reports_errors(action: str):
    """Turn domain failures inside a tool into ``Error <action>: ...`` results."""

    def decorator(func: ToolExecute) -> ToolExecute:
        @functools.wraps(func)
        async def wrapper(ctx: McpContext, arguments) -> ToolResponse:
            try:
                return await func(ctx, arguments)
            except InkweldError as exc:
                logger.error(
                    "Tool operation failed",
                    action=action,
                    error_code=exc.code,
                    error_type=type(exc).__name__,
                    error=exc.message,
                )
                return _error(f"Error {action}: {exc.message}")

        return wrapper

    return decorator
