"""Tests for the in-memory credential store."""

from datetime import timedelta

import pytest

from inkweld_mcp.auth import InMemoryCredentialStore
from inkweld_mcp.exceptions import AuthenticationError
from inkweld_mcp.permissions import READ_ELEMENTS, READ_PROJECT


@pytest.fixture
def store(logger):
    return InMemoryCredentialStore(logger=logger)


class TestProjectKeys:
    """Key issuance and validation."""

    async def test_issued_key_validates(self, store):
        raw_key, record = store.create_key("p1", "ci", [READ_PROJECT, "bogus"])
        assert raw_key.startswith("iw_proj_")
        assert record.key_hash != raw_key
        assert record.permissions == [READ_PROJECT]

        validated = await store.validate_key(raw_key, "10.0.0.1")
        assert validated.id == record.id
        assert validated.last_used_ip == "10.0.0.1"
        assert validated.last_used_at is not None

    async def test_unknown_key(self, store):
        with pytest.raises(AuthenticationError, match="Key not found"):
            await store.validate_key("iw_proj_nope")

    async def test_wrong_prefix(self, store):
        with pytest.raises(AuthenticationError, match="Invalid key format"):
            await store.validate_key("sk_nope")

    async def test_revoked_key(self, store):
        raw_key, record = store.create_key("p1", "ci", [READ_ELEMENTS])
        assert store.revoke_key(record.id) is True
        assert store.revoke_key(record.id) is False
        with pytest.raises(AuthenticationError, match="revoked"):
            await store.validate_key(raw_key)

    async def test_expired_key(self, store):
        raw_key, _ = store.create_key("p1", "ci", [READ_ELEMENTS], expires_in=timedelta(seconds=-1))
        with pytest.raises(AuthenticationError, match="expired"):
            await store.validate_key(raw_key)

    async def test_ip_allow_list(self, store):
        raw_key, _ = store.create_key("p1", "ci", [READ_ELEMENTS], allowed_ips=["10.0.0.0/24"])
        await store.validate_key(raw_key, "10.0.0.42")
        with pytest.raises(AuthenticationError, match="IP address"):
            await store.validate_key(raw_key, "192.168.1.1")
        with pytest.raises(AuthenticationError, match="IP address"):
            await store.validate_key(raw_key, None)


class TestSessions:
    """OAuth sessions and their grants."""

    async def test_unknown_session_counts_as_revoked(self, store):
        assert await store.is_session_revoked("never-issued") is True

    async def test_revoke_session(self, store):
        session_id = store.create_session()
        assert await store.is_session_revoked(session_id) is False
        store.revoke_session(session_id)
        assert await store.is_session_revoked(session_id) is True

    async def test_regrant_replaces_role(self, store):
        session_id = store.create_session("s1")
        store.grant_project_access(session_id, "p1", "alice", "novel", "viewer")
        store.grant_project_access(session_id, "p2", "alice", "poems", "admin")
        store.grant_project_access(session_id, "p1", "alice", "novel", "editor")
        grants = await store.get_session_grants(session_id)
        assert [(g.project_id, g.role) for g in grants] == [("p2", "admin"), ("p1", "editor")]
