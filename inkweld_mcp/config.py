"""Runtime configuration for the inkweld-mcp server.

Environment variables
---------------------
BASE_URL                        Public base URL (default: http://localhost:8333)
                                Used for: WWW-Authenticate metadata URL, JWT issuer/audience
INKWELD_MCP_HOST                Bind host (default: 0.0.0.0)
INKWELD_MCP_PORT                Bind port (default: 8333)
INKWELD_MCP_PATH                MCP endpoint path (default: /api/v1/ai/mcp)
INKWELD_JWT_SECRET              HS256 secret for OAuth access tokens (>= 32 chars)
INKWELD_DOCUMENT_ENGINE         "memory" or "http" (default: memory)
INKWELD_DOCUMENT_SERVICE_URL    Base URL of the remote document service (http engine)
INKWELD_DATA_DIR                Blob storage root (default: ./data)
INKWELD_IMAGE_API_URL           OpenAI-compatible image API base URL
INKWELD_IMAGE_API_KEY           API key for the image API
INKWELD_SSE_KEEPALIVE_SECONDS   Event-stream keep-alive interval (default: 15)
INKWELD_SSE_TIMEOUT_SECONDS     Host timeout for the event stream (default: none)
INKWELD_LOG_LEVEL               DEBUG | INFO | WARNING | ERROR | CRITICAL (default: INFO)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

from inkweld_mcp.exceptions import ConfigurationError

DEFAULT_BASE_URL = "http://localhost:8333"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8333
DEFAULT_MCP_PATH = "/api/v1/ai/mcp"
DEFAULT_DATA_DIR = "./data"
DEFAULT_KEEPALIVE_SECONDS = 15.0
DEFAULT_LOG_LEVEL = "INFO"
MIN_JWT_SECRET_LENGTH = 32

DOCUMENT_ENGINES = ("memory", "http")


def _optional_float(value: Optional[str], name: str) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(
            code="INVALID_CONFIG",
            message=f"{name}='{value}' is not a valid number",
        ) from exc


@dataclass(frozen=True)
class Config:
    base_url: str = DEFAULT_BASE_URL
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    mcp_path: str = DEFAULT_MCP_PATH
    jwt_secret: Optional[str] = None
    document_engine: str = "memory"
    document_service_url: Optional[str] = None
    data_dir: str = DEFAULT_DATA_DIR
    image_api_url: Optional[str] = None
    image_api_key: Optional[str] = None
    sse_keepalive_seconds: float = DEFAULT_KEEPALIVE_SECONDS
    sse_timeout_seconds: Optional[float] = None
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        env = os.environ if environ is None else environ
        port_str = env.get("INKWELD_MCP_PORT", str(DEFAULT_PORT))
        try:
            port = int(port_str)
        except ValueError as exc:
            raise ConfigurationError(
                code="INVALID_CONFIG",
                message=f"INKWELD_MCP_PORT='{port_str}' is not a valid integer",
            ) from exc

        keepalive = _optional_float(
            env.get("INKWELD_SSE_KEEPALIVE_SECONDS"), "INKWELD_SSE_KEEPALIVE_SECONDS"
        )
        return cls(
            base_url=env.get("BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            host=env.get("INKWELD_MCP_HOST", DEFAULT_HOST),
            port=port,
            mcp_path=env.get("INKWELD_MCP_PATH", DEFAULT_MCP_PATH),
            jwt_secret=env.get("INKWELD_JWT_SECRET") or None,
            document_engine=env.get("INKWELD_DOCUMENT_ENGINE", "memory").lower(),
            document_service_url=env.get("INKWELD_DOCUMENT_SERVICE_URL") or None,
            data_dir=env.get("INKWELD_DATA_DIR", DEFAULT_DATA_DIR),
            image_api_url=env.get("INKWELD_IMAGE_API_URL") or None,
            image_api_key=env.get("INKWELD_IMAGE_API_KEY") or None,
            sse_keepalive_seconds=keepalive if keepalive is not None else DEFAULT_KEEPALIVE_SECONDS,
            sse_timeout_seconds=_optional_float(
                env.get("INKWELD_SSE_TIMEOUT_SECONDS"), "INKWELD_SSE_TIMEOUT_SECONDS"
            ),
            log_level=env.get("INKWELD_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )

    def with_overrides(self, **overrides) -> "Config":
        """Return a copy with the non-None overrides applied (CLI flags)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @property
    def resource_metadata_url(self) -> str:
        return f"{self.base_url}/.well-known/oauth-protected-resource"

    @property
    def mcp_resource_url(self) -> str:
        """Audience expected in OAuth access tokens."""
        return f"{self.base_url}{self.mcp_path}"

    def get_data_dir(self) -> Path:
        return Path(self.data_dir)

    def validate(self) -> list[str]:
        """Return a list of configuration problems (empty when valid)."""
        errors = []
        if not (1 <= self.port <= 65535):
            errors.append(f"INKWELD_MCP_PORT={self.port} out of valid range (1-65535)")
        if not self.mcp_path.startswith("/"):
            errors.append(f"INKWELD_MCP_PATH='{self.mcp_path}' must start with '/'")
        if self.document_engine not in DOCUMENT_ENGINES:
            errors.append(
                f"INKWELD_DOCUMENT_ENGINE='{self.document_engine}' must be one of {', '.join(DOCUMENT_ENGINES)}"
            )
        if self.document_engine == "http" and not self.document_service_url:
            errors.append("INKWELD_DOCUMENT_SERVICE_URL required when INKWELD_DOCUMENT_ENGINE='http'")
        if self.jwt_secret is not None and len(self.jwt_secret) < MIN_JWT_SECRET_LENGTH:
            errors.append(
                f"INKWELD_JWT_SECRET must be at least {MIN_JWT_SECRET_LENGTH} characters for JWT signing"
            )
        if self.sse_keepalive_seconds <= 0:
            errors.append("INKWELD_SSE_KEEPALIVE_SECONDS must be positive")
        return errors
