"""Tests for the document engines and the project document view."""

import json

import httpx
import pytest

from inkweld_mcp.documents import HttpDocumentEngine, InMemoryDocumentEngine, ProjectDocuments
from inkweld_mcp.documents.ids import new_element_id, new_relationship_id, utc_now_iso
from inkweld_mcp.exceptions import DocumentEngineError

BASE_URL = "http://docs.local"


class TestInMemoryEngine:
    """In-process engine semantics."""

    async def test_missing_types_are_empty(self):
        engine = InMemoryDocumentEngine()
        assert await engine.get_array("d", "elements") == []
        assert await engine.get_map("d", "meta") == {}
        assert await engine.get_xml_fragment("d", "prosemirror") == ""

    async def test_reads_do_not_create_documents(self):
        engine = InMemoryDocumentEngine()
        docs = ProjectDocuments(engine, "alice", "novel")
        for n in range(5):
            await docs.get_worldbuilding(f"ghost-{n}")
        await engine.get_xml_fragment("d", "prosemirror")
        assert engine.document_ids() == []

    async def test_reads_are_copies(self):
        engine = InMemoryDocumentEngine()
        await engine.replace_array("d", "items", [{"id": "a"}])
        items = await engine.get_array("d", "items")
        items[0]["id"] = "changed"
        assert await engine.get_array("d", "items") == [{"id": "a"}]

    async def test_append_and_update(self):
        engine = InMemoryDocumentEngine()
        await engine.append_to_array("d", "items", [1])
        await engine.append_to_array("d", "items", [2, 3])
        await engine.update_map("d", "meta", {"a": 1})
        await engine.update_map("d", "meta", {"b": 2})
        assert await engine.get_array("d", "items") == [1, 2, 3]
        assert await engine.get_map("d", "meta") == {"a": 1, "b": 2}
        assert engine.document_ids() == ["d"]


class TestProjectDocuments:
    """Document layout of a project."""

    async def test_document_ids(self):
        engine = InMemoryDocumentEngine()
        docs = ProjectDocuments(engine, "alice", "novel")
        await docs.replace_all_elements([{"id": "e1"}])
        await docs.update_worldbuilding("e1", {"age": "27"})
        await docs.set_document_xml("e1", "<paragraph>x</paragraph>")
        assert engine.document_ids() == ["alice:novel:e1/", "alice:novel:elements/"]

    async def test_worldbuilding_maps(self):
        docs = ProjectDocuments(InMemoryDocumentEngine(), "alice", "novel")
        await docs.update_worldbuilding("e1", {"age": "27"})
        await docs.update_worldbuilding("e1", {"description": "Tall"}, "identity")
        assert await docs.get_worldbuilding("e1") == {
            "identity": {"description": "Tall"},
            "data": {"age": "27"},
        }

    async def test_relationships_and_cover(self):
        docs = ProjectDocuments(InMemoryDocumentEngine(), "alice", "novel")
        await docs.add_relationship({"id": "r1"})
        await docs.add_relationship({"id": "r2"})
        assert [r["id"] for r in await docs.get_relationships()] == ["r1", "r2"]
        await docs.set_cover_media_id("cover-1")
        assert await docs.get_project_meta() == {"coverMediaId": "cover-1"}


def test_id_helpers():
    assert len(new_element_id()) == 21
    assert new_element_id() != new_element_id()
    assert new_relationship_id().startswith("rel-")
    assert utc_now_iso().endswith("Z")


# ============================================================================
# Remote engine
# ============================================================================


def make_engine(handler, auth_token=None):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpDocumentEngine(BASE_URL, client=client, auth_token=auth_token)


class TestHttpDocumentEngine:
    """REST calls made by the remote engine."""

    async def test_get_array_encodes_document_id(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"items": [{"id": "a"}]})

        engine = make_engine(handler)
        assert await engine.get_array("alice:novel:elements/", "elements") == [{"id": "a"}]
        assert seen[0].method == "GET"
        assert seen[0].url.raw_path == b"/documents/alice%3Anovel%3Aelements%2F/arrays/elements"

    async def test_missing_document_reads_as_empty(self):
        engine = make_engine(lambda request: httpx.Response(404))
        assert await engine.get_array("d", "elements") == []
        assert await engine.get_map("d", "identity") == {}
        assert await engine.get_xml_fragment("d", "prosemirror") == ""

    async def test_writes_send_json_bodies(self):
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path, json.loads(request.content)))
            return httpx.Response(204)

        engine = make_engine(handler)
        await engine.replace_array("d", "elements", [{"id": "a"}])
        await engine.append_to_array("d", "relationships", [{"id": "r"}])
        await engine.update_map("d", "identity", {"image": "media://x.png"})
        await engine.replace_xml_fragment("d", "prosemirror", "<paragraph/>")

        assert seen == [
            ("PUT", "/documents/d/arrays/elements", {"items": [{"id": "a"}]}),
            ("POST", "/documents/d/arrays/relationships/append", {"items": [{"id": "r"}]}),
            ("PATCH", "/documents/d/maps/identity", {"updates": {"image": "media://x.png"}}),
            ("PUT", "/documents/d/xml/prosemirror", {"xml": "<paragraph/>"}),
        ]

    async def test_bound_engine_forwards_bearer_token(self):
        seen = []

        def handler(request):
            seen.append(request.headers.get("authorization"))
            return httpx.Response(200, json={"entries": {"a": 1}})

        engine = make_engine(handler).bind("iw_proj_secret")
        assert await engine.get_map("d", "meta") == {"a": 1}
        assert seen == ["Bearer iw_proj_secret"]

    async def test_server_error_raises(self):
        engine = make_engine(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(DocumentEngineError) as exc_info:
            await engine.get_array("d", "elements")
        assert exc_info.value.details["status_code"] == 500

    async def test_write_404_raises(self):
        engine = make_engine(lambda request: httpx.Response(404))
        with pytest.raises(DocumentEngineError):
            await engine.replace_array("d", "elements", [])

    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        engine = make_engine(handler)
        with pytest.raises(DocumentEngineError, match="request failed"):
            await engine.get_map("d", "meta")

    async def test_invalid_json_raises(self):
        engine = make_engine(lambda request: httpx.Response(200, text="not json"))
        with pytest.raises(DocumentEngineError, match="invalid JSON"):
            await engine.get_array("d", "elements")
