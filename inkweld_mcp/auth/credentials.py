"""Credential verifier interface.

The verifier is the seam to the credential issuance system: it owns project
keys, OAuth sessions and the grants attached to them. The server only reads
through this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class ApiKeyRecord:
    """A project-scoped key as stored by the issuer (never holds the raw key)."""

    id: str
    name: str
    key_hash: str
    key_prefix: str
    project_id: str
    permissions: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)
    expires_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None
    allowed_ips: Optional[List[str]] = None
    last_used_at: Optional[datetime] = None
    last_used_ip: Optional[str] = None


@dataclass(frozen=True)
class SessionGrant:
    """A project grant attached to an OAuth session."""

    project_id: str
    owner: str
    slug: str
    role: str


class CredentialVerifier(ABC):
    """Abstract credential verifier"""

    @abstractmethod
    async def validate_key(self, key: str, client_ip: Optional[str] = None) -> ApiKeyRecord:
        """
        Validate a raw project key

        Args:
            key: Raw ``iw_proj_`` key as presented by the client
            client_ip: Caller address, checked against the key's allow-list

        Returns:
            The matching key record

        Raises:
            AuthenticationError: If the key is unknown, revoked, expired or
                used from an address outside its allow-list
        """
        pass

    @abstractmethod
    async def is_session_revoked(self, session_id: str) -> bool:
        """
        Check whether an OAuth session may still serve requests

        Args:
            session_id: Session identifier carried in the access token

        Returns:
            True if the session is revoked or unknown
        """
        pass

    @abstractmethod
    async def get_session_grants(self, session_id: str) -> List[SessionGrant]:
        """
        Load the project grants of an OAuth session, in grant order

        Args:
            session_id: Session identifier carried in the access token

        Returns:
            List of grants (possibly empty)
        """
        pass
