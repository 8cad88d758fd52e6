"""HTTP client for a remote document service.

The service exposes each document's shared types as JSON resources:

    GET   /documents/{doc_id}/arrays/{name}          -> {"items": [...]}
    PUT   /documents/{doc_id}/arrays/{name}          <- {"items": [...]}
    POST  /documents/{doc_id}/arrays/{name}/append   <- {"items": [...]}
    GET   /documents/{doc_id}/maps/{name}            -> {"entries": {...}}
    PATCH /documents/{doc_id}/maps/{name}            <- {"updates": {...}}
    GET   /documents/{doc_id}/xml/{name}             -> {"xml": "..."}
    PUT   /documents/{doc_id}/xml/{name}             <- {"xml": "..."}

Document ids are percent-encoded as one path segment. The caller's bearer
token is forwarded so the service applies its own access checks.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from inkweld_mcp.documents.base import DocumentEngine
from inkweld_mcp.exceptions import DocumentEngineError
from inkweld_mcp.logger import Logger, session_logger

DEFAULT_TIMEOUT_SECONDS = 10.0


class HttpDocumentEngine(DocumentEngine):
    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
        auth_token: Optional[str] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        logger: Optional[Logger] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self.auth_token = auth_token
        self.logger: Logger = logger or session_logger

    def bind(self, auth_token: Optional[str]) -> "HttpDocumentEngine":
        return HttpDocumentEngine(
            self.base_url, client=self.client, auth_token=auth_token, logger=self.logger
        )

    def _url(self, doc_id: str, kind: str, name: str, suffix: str = "") -> str:
        return (
            f"{self.base_url}/documents/{quote(doc_id, safe='')}/{kind}/{quote(name, safe='')}{suffix}"
        )

    def _headers(self) -> Dict[str, str]:
        if self.auth_token:
            return {"Authorization": f"Bearer {self.auth_token}"}
        return {}

    async def _request(
        self, method: str, url: str, payload: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        try:
            response = await self.client.request(method, url, json=payload, headers=self._headers())
        except httpx.HTTPError as exc:
            self.logger.error("Document service unreachable", method=method, url=url, error=str(exc))
            raise DocumentEngineError(f"Document service request failed: {exc}") from exc

        if method == "GET" and response.status_code == 404:
            return None
        if response.status_code >= 400:
            self.logger.error(
                "Document service error",
                method=method,
                url=url,
                status_code=response.status_code,
            )
            raise DocumentEngineError(
                f"Document service returned HTTP {response.status_code}",
                details={"status_code": response.status_code, "body": response.text[:500]},
            )
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise DocumentEngineError("Document service returned invalid JSON") from exc

    async def get_array(self, doc_id: str, name: str) -> List[Any]:
        body = await self._request("GET", self._url(doc_id, "arrays", name))
        return list((body or {}).get("items", []))

    async def replace_array(self, doc_id: str, name: str, items: List[Any]) -> None:
        await self._request("PUT", self._url(doc_id, "arrays", name), {"items": list(items)})

    async def append_to_array(self, doc_id: str, name: str, items: List[Any]) -> None:
        await self._request(
            "POST", self._url(doc_id, "arrays", name, "/append"), {"items": list(items)}
        )

    async def get_map(self, doc_id: str, name: str) -> Dict[str, Any]:
        body = await self._request("GET", self._url(doc_id, "maps", name))
        return dict((body or {}).get("entries", {}))

    async def update_map(self, doc_id: str, name: str, updates: Dict[str, Any]) -> None:
        await self._request("PATCH", self._url(doc_id, "maps", name), {"updates": updates})

    async def get_xml_fragment(self, doc_id: str, name: str) -> str:
        body = await self._request("GET", self._url(doc_id, "xml", name))
        return str((body or {}).get("xml", ""))

    async def replace_xml_fragment(self, doc_id: str, name: str, xml: str) -> None:
        await self._request("PUT", self._url(doc_id, "xml", name), {"xml": xml})

    async def close(self) -> None:
        await self.client.aclose()
