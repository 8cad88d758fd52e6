"""Bearer token extraction and classification."""

from __future__ import annotations

import hashlib
from typing import Literal, Mapping, Optional

from inkweld_mcp.exceptions import AuthenticationError

LEGACY_KEY_PREFIX = "iw_proj_"
JWT_PREFIX = "eyJ"
LOG_PREFIX_LENGTH = 10

TokenKind = Literal["legacy", "oauth"]


def extract_token(headers: Mapping[str, str]) -> Optional[str]:
    """Return the caller's token: ``Authorization: Bearer`` first, then ``X-API-Key``."""
    authorization = headers.get("authorization")
    if authorization and authorization.startswith("Bearer "):
        token = authorization[7:].strip()
        if token:
            return token
    api_key = headers.get("x-api-key")
    if api_key and api_key.strip():
        return api_key.strip()
    return None


def classify_token(token: str) -> TokenKind:
    if token.startswith(LEGACY_KEY_PREFIX):
        return "legacy"
    if token.startswith(JWT_PREFIX):
        return "oauth"
    raise AuthenticationError("Invalid token format")


def token_prefix(token: str) -> str:
    """The only part of a credential that may appear in logs."""
    return token[:LOG_PREFIX_LENGTH]


def hash_key(key: str) -> str:
    return hashlib.sha256(key.encode("utf-8")).hexdigest()
