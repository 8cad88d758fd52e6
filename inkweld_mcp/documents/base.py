"""Document engine interface.

The collaborative document engine stores each project as a set of replicated
documents addressed by id (``"{owner}:{slug}:{suffix}/"``). Every document
holds named arrays, maps and XML fragments. Each mutating call below is one
engine transaction, so connected clients observe it atomically.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class DocumentEngine(ABC):
    """Abstract document engine"""

    def bind(self, auth_token: Optional[str]) -> "DocumentEngine":
        """Return an engine acting on behalf of the caller's credential.

        Engines that do not forward credentials return themselves.
        """
        return self

    @abstractmethod
    async def get_array(self, doc_id: str, name: str) -> List[Any]:
        """
        Read a named array

        Args:
            doc_id: Document id
            name: Array name within the document

        Returns:
            JSON-compatible copy of the array (empty if absent)

        Raises:
            DocumentEngineError: If the engine cannot be reached
        """
        pass

    @abstractmethod
    async def replace_array(self, doc_id: str, name: str, items: List[Any]) -> None:
        """
        Replace the whole content of a named array in one transaction

        Raises:
            DocumentEngineError: If the write fails
        """
        pass

    @abstractmethod
    async def append_to_array(self, doc_id: str, name: str, items: List[Any]) -> None:
        """
        Append items to a named array in one transaction

        Raises:
            DocumentEngineError: If the write fails
        """
        pass

    @abstractmethod
    async def get_map(self, doc_id: str, name: str) -> Dict[str, Any]:
        """
        Read a named map

        Returns:
            JSON-compatible copy of the map (empty if absent)
        """
        pass

    @abstractmethod
    async def update_map(self, doc_id: str, name: str, updates: Dict[str, Any]) -> None:
        """
        Set several keys of a named map in one transaction

        Raises:
            DocumentEngineError: If the write fails
        """
        pass

    @abstractmethod
    async def get_xml_fragment(self, doc_id: str, name: str) -> str:
        """
        Serialize a named XML fragment

        Returns:
            The fragment as an XML string (empty if absent)
        """
        pass

    @abstractmethod
    async def replace_xml_fragment(self, doc_id: str, name: str, xml: str) -> None:
        """
        Replace the content of a named XML fragment in one transaction

        Raises:
            DocumentEngineError: If the write fails
        """
        pass

    async def close(self) -> None:
        """Release connections held by the engine."""
        return None
