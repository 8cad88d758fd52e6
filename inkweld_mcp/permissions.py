"""MCP permission vocabulary and collaborator role mapping."""

from __future__ import annotations

from typing import Dict, FrozenSet, List

READ_PROJECT = "read:project"
READ_ELEMENTS = "read:elements"
WRITE_ELEMENTS = "write:elements"
READ_SCHEMAS = "read:schemas"
WRITE_SCHEMAS = "write:schemas"
READ_WORLDBUILDING = "read:worldbuilding"
WRITE_WORLDBUILDING = "write:worldbuilding"
GENERATE_IMAGES = "generate:images"

ALL_PERMISSIONS: List[str] = [
    READ_PROJECT,
    READ_ELEMENTS,
    WRITE_ELEMENTS,
    READ_SCHEMAS,
    WRITE_SCHEMAS,
    READ_WORLDBUILDING,
    WRITE_WORLDBUILDING,
    GENERATE_IMAGES,
]

_VIEWER = [READ_PROJECT, READ_ELEMENTS, READ_SCHEMAS, READ_WORLDBUILDING]
_EDITOR = _VIEWER + [WRITE_ELEMENTS, WRITE_SCHEMAS, WRITE_WORLDBUILDING]

ROLE_PERMISSIONS: Dict[str, List[str]] = {
    "viewer": _VIEWER,
    "editor": _EDITOR,
    "admin": list(ALL_PERMISSIONS),
}

_VALID: FrozenSet[str] = frozenset(ALL_PERMISSIONS)


def is_valid_permission(permission: str) -> bool:
    return permission in _VALID


def filter_permissions(permissions) -> List[str]:
    """Keep only known permissions, preserving order and dropping duplicates."""
    seen: List[str] = []
    for permission in permissions or []:
        if is_valid_permission(permission) and permission not in seen:
            seen.append(permission)
    return seen


def role_to_permissions(role: str) -> List[str]:
    """Permissions granted to an OAuth collaborator role (unknown roles get none)."""
    return list(ROLE_PERMISSIONS.get(role, []))
