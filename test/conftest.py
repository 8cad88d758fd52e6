"""Pytest configuration and fixtures

Provides shared fixtures for all tests: in-memory collaborators, a seeded
sample project, request contexts with different roles, and an HTTP test
client for the MCP endpoint.

Auth pattern: credentials live in an InMemoryCredentialStore; OAuth access
tokens are minted with TEST_JWT_SECRET for the same issuer/audience the
server verifies.
"""

import base64
from typing import Any, Dict, List, Optional

import pytest
from starlette.testclient import TestClient

from inkweld_mcp.auth import InMemoryCredentialStore, JwtAccessTokenVerifier
from inkweld_mcp.config import Config
from inkweld_mcp.documents import InMemoryDocumentEngine
from inkweld_mcp.images import GeneratedImage, GenerationResult, ImageProvider, ImageRequest
from inkweld_mcp.logger import Logger
from inkweld_mcp.mcp_server.components import ServerComponents, initialize_components
from inkweld_mcp.mcp_server.context import LegacyIdentity, McpContext, ProjectGrant
from inkweld_mcp.mcp_server.dispatcher import Dispatcher
from inkweld_mcp.mcp_server.jsonrpc import JsonRpcRequest
from inkweld_mcp.mcp_server.routing import create_registries
from inkweld_mcp.mcp_server.server import create_app
from inkweld_mcp.metadata import ImageProfile, InMemoryMetadataStore
from inkweld_mcp.permissions import ALL_PERMISSIONS, role_to_permissions
from inkweld_mcp.storage import FileBlobStore
from inkweld_mcp.tree import elements_doc_id, normalize

# ============================================================================
# AUTH AND PROJECT CONFIGURATION
# ============================================================================

# Shared JWT secret for token generation and verification in tests
TEST_JWT_SECRET = "test-secret-key-for-secure-testing-do-not-use-in-production"
TEST_BASE_URL = "http://testserver"
MCP_PATH = "/api/v1/ai/mcp"

OWNER = "alice"
SLUG = "novel"
PROJECT = f"{OWNER}/{SLUG}"
PROJECT_ID = "project-1"

# Smallest valid PNG: signature + IHDR + IDAT + IEND
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64


def sample_elements() -> List[Dict[str, Any]]:
    """Characters/Locations folders with worldbuilding entries, plus one chapter."""
    raw = [
        {"id": "chars", "name": "Characters", "type": "FOLDER", "level": 0, "expandable": True},
        {"id": "elena", "name": "Elena", "type": "WORLDBUILDING", "level": 1, "schemaId": "character"},
        {"id": "marcus", "name": "Marcus", "type": "WORLDBUILDING", "level": 1, "schemaId": "character"},
        {"id": "locs", "name": "Locations", "type": "FOLDER", "level": 0, "expandable": True},
        {"id": "tavern", "name": "Tavern", "type": "WORLDBUILDING", "level": 1, "schemaId": "location"},
        {"id": "ch1", "name": "Chapter One", "type": "ITEM", "level": 0},
    ]
    for element in raw:
        element.setdefault("expandable", False)
        element.update(version=0, metadata={})
    return normalize(raw)


# ============================================================================
# LOGGING
# ============================================================================


class RecordingLogger(Logger):
    """Logger that keeps every record for assertions."""

    def __init__(self):
        self.records: List[Dict[str, Any]] = []

    def _record(self, level: str, message: str, kwargs: Dict[str, Any]) -> None:
        self.records.append({"level": level, "message": message, **kwargs})

    def debug(self, message: str, **kwargs: Any) -> None:
        self._record("debug", message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._record("info", message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._record("warning", message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._record("error", message, kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._record("critical", message, kwargs)

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [r["message"] for r in self.records if level is None or r["level"] == level]


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


# ============================================================================
# IMAGE PROVIDER
# ============================================================================


class StubImageProvider(ImageProvider):
    """Returns a fixed image and remembers every request."""

    name = "stub"

    def __init__(self, data: bytes = PNG_BYTES, available: bool = True, images: int = 1):
        self.data = data
        self.available = available
        self.images = images
        self.requests: List[ImageRequest] = []

    async def is_available(self) -> bool:
        return self.available

    async def generate(self, request: ImageRequest) -> GenerationResult:
        self.requests.append(request)
        return GenerationResult(
            provider=self.name,
            model=request.model,
            images=[
                GeneratedImage(data=self.data, mime_type="image/png", revised_prompt="a revised prompt")
                for _ in range(self.images)
            ],
        )


@pytest.fixture
def image_provider() -> StubImageProvider:
    return StubImageProvider()


# ============================================================================
# COLLABORATORS
# ============================================================================


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        base_url=TEST_BASE_URL,
        mcp_path=MCP_PATH,
        jwt_secret=TEST_JWT_SECRET,
        data_dir=str(tmp_path / "data"),
        sse_keepalive_seconds=0.01,
        sse_timeout_seconds=0.2,
    )


@pytest.fixture
def metadata() -> InMemoryMetadataStore:
    store = InMemoryMetadataStore()
    store.add_project(OWNER, SLUG, title="The Novel", description="A test novel", project_id=PROJECT_ID)
    store.add_image_profile(
        ImageProfile(
            id="default",
            name="Default",
            provider="openai",
            model_id="gpt-image-1",
            default_size="1024x1024",
        )
    )
    store.add_image_profile(
        ImageProfile(id="retired", name="Retired", provider="openai", model_id="dall-e-2", enabled=False)
    )
    return store


@pytest.fixture
def engine() -> InMemoryDocumentEngine:
    engine = InMemoryDocumentEngine()
    engine.seed(
        elements_doc_id(OWNER, SLUG),
        arrays={
            "elements": sample_elements(),
            "relationships": [
                {
                    "id": "rel-1",
                    "sourceElementId": "elena",
                    "targetElementId": "marcus",
                    "relationshipTypeId": "sibling-of",
                    "note": "Twins",
                    "createdAt": "2026-01-01T00:00:00.000Z",
                    "updatedAt": "2026-01-01T00:00:00.000Z",
                },
                {
                    "id": "rel-2",
                    "sourceElementId": "elena",
                    "targetElementId": "tavern",
                    "relationshipTypeId": "works-at",
                    "createdAt": "2026-01-01T00:00:00.000Z",
                    "updatedAt": "2026-01-01T00:00:00.000Z",
                },
            ],
            "schemas": [
                {"id": "character", "type": "character", "name": "Character", "fields": ["age", "role"]},
                {"id": "location", "type": "location", "name": "Location", "fields": ["climate"]},
            ],
            "publishPlans": [{"id": "plan-1", "name": "Manuscript EPUB", "format": "epub"}],
        },
    )
    engine.seed(
        f"{OWNER}:{SLUG}:elena/",
        maps={
            "identity": {"description": "A swordswoman from the northern hills"},
            "worldbuilding": {"age": "27", "role": "Captain of the guard"},
        },
    )
    engine.seed(
        f"{OWNER}:{SLUG}:marcus/",
        maps={"identity": {"description": "Elena's twin brother"}, "worldbuilding": {"role": "Smuggler"}},
    )
    engine.seed(
        f"{OWNER}:{SLUG}:ch1/",
        fragments={
            "prosemirror": (
                "<paragraph>The night was cold.</paragraph>"
                "<paragraph>Elena drew her <strong>sword</strong>.</paragraph>"
            )
        },
    )
    return engine


@pytest.fixture
def blob_store(tmp_path) -> FileBlobStore:
    return FileBlobStore(str(tmp_path / "blobs"))


@pytest.fixture
def credentials() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def components(
    config, logger, engine, metadata, blob_store, image_provider, credentials
) -> ServerComponents:
    return initialize_components(
        config,
        logger,
        document_engine=engine,
        metadata=metadata,
        blob_store=blob_store,
        image_provider=image_provider,
        credentials=credentials,
    )


# ============================================================================
# REQUEST CONTEXTS
# ============================================================================


def make_context(
    components: ServerComponents, permissions: List[str], role: str = "legacy"
) -> McpContext:
    grant = ProjectGrant(
        project_id=PROJECT_ID, owner=OWNER, slug=SLUG, role=role, permissions=list(permissions)
    )
    return McpContext(
        kind="legacy",
        identity=LegacyIdentity(key_id="key-1", key_name="test key", project_id=PROJECT_ID),
        accessible_projects=[grant],
        services=components,
    )


@pytest.fixture
def admin_ctx(components) -> McpContext:
    return make_context(components, ALL_PERMISSIONS, role="admin")


@pytest.fixture
def viewer_ctx(components) -> McpContext:
    return make_context(components, role_to_permissions("viewer"), role="viewer")


# ============================================================================
# HTTP
# ============================================================================


@pytest.fixture
def legacy_key(credentials) -> str:
    raw_key, _ = credentials.create_key(PROJECT_ID, "test key", list(ALL_PERMISSIONS))
    return raw_key


@pytest.fixture
def token_verifier(config) -> JwtAccessTokenVerifier:
    return JwtAccessTokenVerifier(TEST_JWT_SECRET, issuer=config.base_url, audience=config.mcp_resource_url)


@pytest.fixture
def oauth_token(credentials, token_verifier) -> str:
    session_id = credentials.create_session()
    credentials.grant_project_access(session_id, PROJECT_ID, OWNER, SLUG, "editor")
    return token_verifier.create_token(
        user_id="user-1", session_id=session_id, client_id="client-1", username=OWNER
    )


@pytest.fixture
def client(config, components, logger):
    app = create_app(config, components=components, logger=logger)
    with TestClient(app) as test_client:
        yield test_client


async def call_tool(ctx: McpContext, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
    """Run one tools/call through the dispatcher and return the wire-form result."""
    dispatcher = Dispatcher(create_registries(RecordingLogger()), RecordingLogger())
    response = await dispatcher.dispatch(
        JsonRpcRequest(method="tools/call", id=1, params={"name": name, "arguments": arguments}),
        ctx,
    )
    assert "result" in response, response
    return response["result"]


def result_text(result: Dict[str, Any]) -> str:
    return result["content"][0]["text"]


async def stored_elements(engine: InMemoryDocumentEngine) -> List[Dict[str, Any]]:
    return await engine.get_array(elements_doc_id(OWNER, SLUG), "elements")


def rpc(method: str, params: Optional[Dict[str, Any]] = None, request_id: Any = 1) -> Dict[str, Any]:
    body: Dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if params is not None:
        body["params"] = params
    if request_id is not None:
        body["id"] = request_id
    return body
