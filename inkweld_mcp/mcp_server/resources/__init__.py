"""``inkweld://`` resource handlers, registered in order by ``routing``."""

from inkweld_mcp.mcp_server.resources.elements import ElementsResourceHandler
from inkweld_mcp.mcp_server.resources.projects import ProjectsResourceHandler
from inkweld_mcp.mcp_server.resources.schemas import SchemasResourceHandler
from inkweld_mcp.mcp_server.resources.worldbuilding import WorldbuildingResourceHandler

__all__ = [
    "ElementsResourceHandler",
    "ProjectsResourceHandler",
    "SchemasResourceHandler",
    "WorldbuildingResourceHandler",
]
