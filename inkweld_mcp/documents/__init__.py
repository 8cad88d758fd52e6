"""Access to the collaborative document engine."""

from inkweld_mcp.documents.base import DocumentEngine
from inkweld_mcp.documents.memory import InMemoryDocumentEngine
from inkweld_mcp.documents.project_documents import ProjectDocuments
from inkweld_mcp.documents.remote import HttpDocumentEngine

__all__ = ["DocumentEngine", "HttpDocumentEngine", "InMemoryDocumentEngine", "ProjectDocuments"]
