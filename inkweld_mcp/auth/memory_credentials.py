"""In-memory credential store for tests and local development."""

from __future__ import annotations

import ipaddress
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from inkweld_mcp.auth.credentials import ApiKeyRecord, CredentialVerifier, SessionGrant
from inkweld_mcp.auth.tokens import LEGACY_KEY_PREFIX, hash_key, token_prefix
from inkweld_mcp.exceptions import AuthenticationError
from inkweld_mcp.logger import Logger, session_logger
from inkweld_mcp.permissions import filter_permissions


def _ip_allowed(client_ip: Optional[str], allowed: List[str]) -> bool:
    if client_ip is None:
        return False
    try:
        address = ipaddress.ip_address(client_ip)
    except ValueError:
        return False
    for entry in allowed:
        try:
            if address in ipaddress.ip_network(entry, strict=False):
                return True
        except ValueError:
            continue
    return False


class InMemoryCredentialStore(CredentialVerifier):
    """Keys, sessions and grants held in process memory."""

    def __init__(self, logger: Optional[Logger] = None):
        self.logger: Logger = logger or session_logger
        self._keys: Dict[str, ApiKeyRecord] = {}
        self._sessions: Dict[str, Optional[datetime]] = {}
        self._grants: Dict[str, List[SessionGrant]] = {}

    def create_key(
        self,
        project_id: str,
        name: str,
        permissions: List[str],
        expires_in: Optional[timedelta] = None,
        allowed_ips: Optional[List[str]] = None,
    ) -> Tuple[str, ApiKeyRecord]:
        """Issue a key; the raw key is returned once and only its hash is kept."""
        raw_key = LEGACY_KEY_PREFIX + secrets.token_urlsafe(32)
        record = ApiKeyRecord(
            id=str(uuid.uuid4()),
            name=name,
            key_hash=hash_key(raw_key),
            key_prefix=raw_key[:12],
            project_id=project_id,
            permissions=filter_permissions(permissions),
            expires_at=datetime.utcnow() + expires_in if expires_in is not None else None,
            allowed_ips=allowed_ips,
        )
        self._keys[record.key_hash] = record
        self.logger.info("Project key created", key_id=record.id, project_id=project_id, name=name)
        return raw_key, record

    def revoke_key(self, key_id: str) -> bool:
        for record in self._keys.values():
            if record.id == key_id and record.revoked_at is None:
                record.revoked_at = datetime.utcnow()
                self.logger.info("Project key revoked", key_id=key_id)
                return True
        return False

    def create_session(self, session_id: Optional[str] = None) -> str:
        session_id = session_id or str(uuid.uuid4())
        self._sessions[session_id] = None
        self._grants.setdefault(session_id, [])
        return session_id

    def grant_project_access(
        self, session_id: str, project_id: str, owner: str, slug: str, role: str
    ) -> None:
        if session_id not in self._sessions:
            self.create_session(session_id)
        grants = [g for g in self._grants[session_id] if g.project_id != project_id]
        grants.append(SessionGrant(project_id=project_id, owner=owner, slug=slug, role=role))
        self._grants[session_id] = grants
        self.logger.info(
            "Project access granted", session_id=session_id, project_id=project_id, role=role
        )

    def revoke_session(self, session_id: str) -> None:
        self._sessions[session_id] = datetime.utcnow()
        self.logger.info("OAuth session revoked", session_id=session_id)

    async def validate_key(self, key: str, client_ip: Optional[str] = None) -> ApiKeyRecord:
        if not key.startswith(LEGACY_KEY_PREFIX):
            raise AuthenticationError("Invalid key format")

        record = self._keys.get(hash_key(key))
        if record is None:
            self.logger.warning("Unknown project key", key_prefix=token_prefix(key))
            raise AuthenticationError("Key not found")
        if record.revoked_at is not None:
            raise AuthenticationError("Key has been revoked")
        if record.expires_at is not None and record.expires_at < datetime.utcnow():
            raise AuthenticationError("Key has expired")
        if record.allowed_ips and not _ip_allowed(client_ip, record.allowed_ips):
            self.logger.warning(
                "Project key used from disallowed address",
                key_prefix=token_prefix(key),
                client_ip=client_ip,
            )
            raise AuthenticationError("Key not allowed from this IP address")

        record.last_used_at = datetime.utcnow()
        record.last_used_ip = client_ip
        return record

    async def is_session_revoked(self, session_id: str) -> bool:
        if session_id not in self._sessions:
            return True
        return self._sessions[session_id] is not None

    async def get_session_grants(self, session_id: str) -> List[SessionGrant]:
        return list(self._grants.get(session_id, []))
