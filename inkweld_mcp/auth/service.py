"""Request authentication: turns a bearer credential into an McpContext."""

from __future__ import annotations

from typing import Any, List, Optional

from inkweld_mcp.auth.credentials import CredentialVerifier
from inkweld_mcp.auth.jwt_verifier import JwtAccessTokenVerifier
from inkweld_mcp.auth.tokens import classify_token, token_prefix
from inkweld_mcp.exceptions import AuthenticationError
from inkweld_mcp.logger import Logger, session_logger
from inkweld_mcp.mcp_server.context import LegacyIdentity, McpContext, OAuthIdentity, ProjectGrant
from inkweld_mcp.metadata.base import MetadataStore
from inkweld_mcp.permissions import filter_permissions, role_to_permissions


class AuthService:
    """Resolve legacy project keys and OAuth access tokens into request contexts.

    A decoded OAuth token whose session is revoked or unknown is rejected exactly
    like an invalid token.
    """

    def __init__(
        self,
        credentials: CredentialVerifier,
        metadata: MetadataStore,
        jwt_verifier: Optional[JwtAccessTokenVerifier] = None,
        logger: Optional[Logger] = None,
    ):
        self.credentials = credentials
        self.metadata = metadata
        self.jwt_verifier = jwt_verifier
        self.logger: Logger = logger or session_logger

    async def authenticate(
        self,
        token: Optional[str],
        client_ip: Optional[str] = None,
        services: Any = None,
    ) -> McpContext:
        if not token:
            raise AuthenticationError("Authentication required")

        kind = classify_token(token)
        if kind == "legacy":
            ctx = await self._authenticate_legacy(token, client_ip)
        else:
            ctx = await self._authenticate_oauth(token)

        ctx.client_ip = client_ip
        ctx.auth_token = token
        ctx.services = services
        return ctx

    async def _authenticate_legacy(self, token: str, client_ip: Optional[str]) -> McpContext:
        record = await self.credentials.validate_key(token, client_ip)

        project = await self.metadata.get_project(record.project_id)
        if project is None:
            self.logger.warning(
                "Project key references missing project",
                key_prefix=token_prefix(token),
                project_id=record.project_id,
            )
            raise AuthenticationError("Project not found")

        self.logger.debug(
            "Project key authenticated",
            key_prefix=token_prefix(token),
            project=f"{project.owner}/{project.slug}",
        )
        grant = ProjectGrant(
            project_id=project.id,
            owner=project.owner,
            slug=project.slug,
            role="legacy",
            permissions=filter_permissions(record.permissions),
        )
        return McpContext(
            kind="legacy",
            identity=LegacyIdentity(key_id=record.id, key_name=record.name, project_id=project.id),
            accessible_projects=[grant],
        )

    async def _authenticate_oauth(self, token: str) -> McpContext:
        if self.jwt_verifier is None:
            self.logger.warning("OAuth token presented but no JWT secret configured")
            raise AuthenticationError("OAuth access tokens are not accepted by this server")

        claims = self.jwt_verifier.verify(token)
        if await self.credentials.is_session_revoked(claims.session_id):
            self.logger.warning(
                "Access token for revoked session",
                key_prefix=token_prefix(token),
                session_id=claims.session_id,
            )
            raise AuthenticationError("Session has been revoked")

        grants = await self.credentials.get_session_grants(claims.session_id)
        accessible: List[ProjectGrant] = [
            ProjectGrant(
                project_id=grant.project_id,
                owner=grant.owner,
                slug=grant.slug,
                role=grant.role,
                permissions=role_to_permissions(grant.role),
            )
            for grant in grants
        ]
        self.logger.debug(
            "Access token authenticated",
            key_prefix=token_prefix(token),
            username=claims.username,
            projects=len(accessible),
        )
        return McpContext(
            kind="oauth",
            identity=OAuthIdentity(
                user_id=claims.user_id,
                session_id=claims.session_id,
                client_id=claims.client_id,
                username=claims.username,
            ),
            accessible_projects=accessible,
        )
