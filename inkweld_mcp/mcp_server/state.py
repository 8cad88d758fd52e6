"""Process-wide holder for the live ServerComponents.

The application lifespan installs the components before the first request
and clears them on shutdown. Tool handlers prefer the components attached to
their request context and only fall back to this holder.
"""

from __future__ import annotations

from typing import Optional

from inkweld_mcp.mcp_server.components import ServerComponents

_active: Optional[ServerComponents] = None


def set_components(value: Optional[ServerComponents]) -> None:
    global _active
    _active = value


def get_components() -> Optional[ServerComponents]:
    return _active


def ensure_components() -> ServerComponents:
    """Return the installed components, failing loudly outside the lifespan."""
    if _active is None:
        raise RuntimeError("Server components are not installed; is the application running?")
    return _active
