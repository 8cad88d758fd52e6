"""Per-request MCP context.

A context is created by the transport after authentication, consumed by one
dispatcher call and then discarded. Legacy (project key) and OAuth contexts
share the ``accessible_projects`` view, so permission checks never need to know
which credential produced them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union

ContextKind = Literal["legacy", "oauth"]


@dataclass
class ProjectGrant:
    """One project the caller may act on, with the permissions it holds there."""

    project_id: str
    owner: str
    slug: str
    role: str
    permissions: List[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.owner}/{self.slug}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectId": self.project_id,
            "owner": self.owner,
            "slug": self.slug,
            "role": self.role,
            "permissions": list(self.permissions),
        }


@dataclass(frozen=True)
class LegacyIdentity:
    key_id: str
    key_name: str
    project_id: str


@dataclass(frozen=True)
class OAuthIdentity:
    user_id: str
    session_id: str
    client_id: str
    username: str


@dataclass
class McpContext:
    kind: ContextKind
    identity: Union[LegacyIdentity, OAuthIdentity]
    accessible_projects: List[ProjectGrant] = field(default_factory=list)
    client_ip: Optional[str] = None
    initialized: bool = False
    client_info: Optional[Dict[str, Any]] = None
    auth_token: Optional[str] = None
    services: Any = None

    @property
    def user_id(self) -> Optional[str]:
        if isinstance(self.identity, OAuthIdentity):
            return self.identity.user_id
        return None

    @property
    def actor(self) -> str:
        """Identifier recorded on snapshots and audit logs."""
        if isinstance(self.identity, OAuthIdentity):
            return self.identity.user_id
        return "mcp-api-key"


def has_permission(ctx: McpContext, *permissions: str) -> bool:
    """True if any accessible project grants any of ``permissions``."""
    wanted = set(permissions)
    return any(wanted.intersection(grant.permissions) for grant in ctx.accessible_projects)


def get_project_by_key(ctx: McpContext, owner: str, slug: str) -> Optional[ProjectGrant]:
    for grant in ctx.accessible_projects:
        if grant.owner == owner and grant.slug == slug:
            return grant
    return None


def has_project_permission(ctx: McpContext, owner: str, slug: str, *permissions: str) -> bool:
    grant = get_project_by_key(ctx, owner, slug)
    if grant is None:
        return False
    return any(permission in grant.permissions for permission in permissions)


def projects_with_permission(ctx: McpContext, permission: str) -> List[ProjectGrant]:
    return [grant for grant in ctx.accessible_projects if permission in grant.permissions]
