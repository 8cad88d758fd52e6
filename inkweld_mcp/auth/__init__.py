"""Authentication: bearer tokens, project keys and OAuth access tokens."""

from inkweld_mcp.auth.credentials import ApiKeyRecord, CredentialVerifier, SessionGrant
from inkweld_mcp.auth.jwt_verifier import AccessTokenClaims, JwtAccessTokenVerifier
from inkweld_mcp.auth.memory_credentials import InMemoryCredentialStore
from inkweld_mcp.auth.service import AuthService
from inkweld_mcp.auth.tokens import classify_token, extract_token, hash_key, token_prefix

__all__ = [
    "AccessTokenClaims",
    "ApiKeyRecord",
    "AuthService",
    "CredentialVerifier",
    "InMemoryCredentialStore",
    "JwtAccessTokenVerifier",
    "SessionGrant",
    "classify_token",
    "extract_token",
    "hash_key",
    "token_prefix",
]
