"""Identifier helpers for element and relationship records."""

import secrets
from datetime import datetime, timezone


def new_element_id() -> str:
    """URL-safe random id (21 characters, like the editor's client-side ids)."""
    return secrets.token_urlsafe(16)[:21]


def new_relationship_id() -> str:
    return "rel-" + secrets.token_urlsafe(12)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
