"""Component initialization for the MCP server.

This module centralizes construction of the collaborators tool and resource
handlers use: the document engine, metadata store, blob store, image provider
and the authentication service.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from inkweld_mcp.auth import AuthService, CredentialVerifier, InMemoryCredentialStore
from inkweld_mcp.auth.jwt_verifier import JwtAccessTokenVerifier
from inkweld_mcp.config import Config
from inkweld_mcp.documents import DocumentEngine, HttpDocumentEngine, InMemoryDocumentEngine
from inkweld_mcp.exceptions import ConfigurationError
from inkweld_mcp.images import ImageProvider, OpenAICompatibleImageProvider
from inkweld_mcp.logger import Logger
from inkweld_mcp.metadata import InMemoryMetadataStore, MetadataStore
from inkweld_mcp.storage import BlobStore, FileBlobStore


@dataclass
class ServerComponents:
    config: Config
    document_engine: DocumentEngine
    metadata: MetadataStore
    blob_store: BlobStore
    image_provider: Optional[ImageProvider]
    credentials: CredentialVerifier
    auth_service: AuthService

    async def close(self) -> None:
        await self.document_engine.close()


def create_document_engine(config: Config, logger: Logger) -> DocumentEngine:
    if config.document_engine == "http":
        if not config.document_service_url:
            raise ConfigurationError(
                code="MISSING_DOCUMENT_SERVICE_URL",
                message="INKWELD_DOCUMENT_SERVICE_URL is required when INKWELD_DOCUMENT_ENGINE=http",
            )
        logger.info("Using remote document engine", url=config.document_service_url)
        return HttpDocumentEngine(config.document_service_url, logger=logger)
    logger.info("Using in-memory document engine")
    return InMemoryDocumentEngine(logger=logger)


def initialize_components(
    config: Config,
    logger: Logger,
    *,
    document_engine: Optional[DocumentEngine] = None,
    metadata: Optional[MetadataStore] = None,
    blob_store: Optional[BlobStore] = None,
    image_provider: Optional[ImageProvider] = None,
    credentials: Optional[CredentialVerifier] = None,
) -> ServerComponents:
    """Initialize all server components.

    Args:
        config: Runtime configuration
        logger: Logger
        document_engine: Optional engine override (tests)
        metadata: Optional metadata store override (tests)
        blob_store: Optional blob store override (tests)
        image_provider: Optional image provider override (tests)
        credentials: Optional credential verifier override (tests)
    """
    engine = document_engine or create_document_engine(config, logger)
    metadata_store = metadata or InMemoryMetadataStore(logger=logger)
    blobs = blob_store or FileBlobStore(str(config.get_data_dir()), logger=logger)
    verifier = credentials or InMemoryCredentialStore(logger=logger)

    if image_provider is None and config.image_api_url:
        image_provider = OpenAICompatibleImageProvider(
            config.image_api_url, config.image_api_key, logger=logger
        )
    if image_provider is None:
        logger.info("No image provider configured; image generation tools will report errors")

    jwt_verifier = None
    if config.jwt_secret:
        jwt_verifier = JwtAccessTokenVerifier(
            config.jwt_secret, issuer=config.base_url, audience=config.mcp_resource_url
        )
        logger.info("OAuth access tokens enabled", issuer=config.base_url)
    else:
        logger.warning("INKWELD_JWT_SECRET not set; only project keys will authenticate")

    auth_service = AuthService(
        credentials=verifier, metadata=metadata_store, jwt_verifier=jwt_verifier, logger=logger
    )
    logger.info("Server components initialized", document_engine=config.document_engine)

    return ServerComponents(
        config=config,
        document_engine=engine,
        metadata=metadata_store,
        blob_store=blobs,
        image_provider=image_provider,
        credentials=verifier,
        auth_service=auth_service,
    )
