"""In-process document engine used for tests and local development."""

from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from inkweld_mcp.documents.base import DocumentEngine
from inkweld_mcp.logger import Logger, session_logger


@dataclass
class _Document:
    arrays: Dict[str, List[Any]] = field(default_factory=dict)
    maps: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    fragments: Dict[str, str] = field(default_factory=dict)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class InMemoryDocumentEngine(DocumentEngine):
    """Documents kept in a dict; transactions are serialised per document."""

    def __init__(self, logger: Optional[Logger] = None):
        self.logger: Logger = logger or session_logger
        self._documents: Dict[str, _Document] = {}

    def _doc(self, doc_id: str) -> _Document:
        """Return the document, creating it. Only writes call this."""
        doc = self._documents.get(doc_id)
        if doc is None:
            doc = _Document()
            self._documents[doc_id] = doc
        return doc

    def document_ids(self) -> List[str]:
        return sorted(self._documents)

    async def get_array(self, doc_id: str, name: str) -> List[Any]:
        doc = self._documents.get(doc_id)
        if doc is None:
            return []
        async with doc.lock:
            return copy.deepcopy(doc.arrays.get(name, []))

    async def replace_array(self, doc_id: str, name: str, items: List[Any]) -> None:
        doc = self._doc(doc_id)
        async with doc.lock:
            doc.arrays[name] = copy.deepcopy(list(items))
        self.logger.debug("Array replaced", doc_id=doc_id, array=name, length=len(items))

    async def append_to_array(self, doc_id: str, name: str, items: List[Any]) -> None:
        doc = self._doc(doc_id)
        async with doc.lock:
            doc.arrays.setdefault(name, []).extend(copy.deepcopy(list(items)))
        self.logger.debug("Array appended", doc_id=doc_id, array=name, added=len(items))

    async def get_map(self, doc_id: str, name: str) -> Dict[str, Any]:
        doc = self._documents.get(doc_id)
        if doc is None:
            return {}
        async with doc.lock:
            return copy.deepcopy(doc.maps.get(name, {}))

    async def update_map(self, doc_id: str, name: str, updates: Dict[str, Any]) -> None:
        doc = self._doc(doc_id)
        async with doc.lock:
            doc.maps.setdefault(name, {}).update(copy.deepcopy(updates))
        self.logger.debug("Map updated", doc_id=doc_id, map=name, keys=sorted(updates))

    async def get_xml_fragment(self, doc_id: str, name: str) -> str:
        doc = self._documents.get(doc_id)
        if doc is None:
            return ""
        async with doc.lock:
            return doc.fragments.get(name, "")

    async def replace_xml_fragment(self, doc_id: str, name: str, xml: str) -> None:
        doc = self._doc(doc_id)
        async with doc.lock:
            doc.fragments[name] = xml
        self.logger.debug("XML fragment replaced", doc_id=doc_id, fragment=name, size=len(xml))

    def seed(
        self,
        doc_id: str,
        arrays: Optional[Dict[str, List[Any]]] = None,
        maps: Optional[Dict[str, Dict[str, Any]]] = None,
        fragments: Optional[Dict[str, str]] = None,
    ) -> None:
        """Load document content directly, outside any transaction (fixtures, demos)."""
        doc = self._doc(doc_id)
        for name, items in (arrays or {}).items():
            doc.arrays[name] = copy.deepcopy(list(items))
        for name, entries in (maps or {}).items():
            doc.maps.setdefault(name, {}).update(copy.deepcopy(entries))
        doc.fragments.update(fragments or {})
