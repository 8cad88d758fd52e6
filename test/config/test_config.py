"""Tests for runtime configuration and CLI overrides."""

import pytest

from inkweld_mcp.config import Config
from inkweld_mcp.exceptions import ConfigurationError
from inkweld_mcp.main_mcp import build_parser, load_config


class TestFromEnv:
    """Environment parsing."""

    def test_defaults(self):
        config = Config.from_env({})
        assert config.base_url == "http://localhost:8333"
        assert config.port == 8333
        assert config.mcp_path == "/api/v1/ai/mcp"
        assert config.jwt_secret is None
        assert config.document_engine == "memory"
        assert config.sse_keepalive_seconds == 15.0
        assert config.sse_timeout_seconds is None
        assert config.validate() == []

    def test_values_from_environment(self):
        config = Config.from_env(
            {
                "BASE_URL": "https://inkweld.example/",
                "INKWELD_MCP_PORT": "9000",
                "INKWELD_DOCUMENT_ENGINE": "HTTP",
                "INKWELD_DOCUMENT_SERVICE_URL": "http://docs:4000",
                "INKWELD_SSE_KEEPALIVE_SECONDS": "2.5",
                "INKWELD_SSE_TIMEOUT_SECONDS": "30",
                "INKWELD_LOG_LEVEL": "debug",
            }
        )
        assert config.base_url == "https://inkweld.example"
        assert config.port == 9000
        assert config.document_engine == "http"
        assert config.sse_keepalive_seconds == 2.5
        assert config.sse_timeout_seconds == 30.0
        assert config.log_level == "DEBUG"
        assert config.validate() == []

    def test_invalid_port(self):
        with pytest.raises(ConfigurationError, match="INKWELD_MCP_PORT"):
            Config.from_env({"INKWELD_MCP_PORT": "eighty"})

    def test_invalid_keepalive(self):
        with pytest.raises(ConfigurationError, match="not a valid number"):
            Config.from_env({"INKWELD_SSE_KEEPALIVE_SECONDS": "often"})

    def test_empty_secret_means_none(self):
        assert Config.from_env({"INKWELD_JWT_SECRET": ""}).jwt_secret is None


def test_derived_urls():
    config = Config(base_url="https://inkweld.example", mcp_path="/mcp")
    assert config.mcp_resource_url == "https://inkweld.example/mcp"
    assert config.resource_metadata_url == (
        "https://inkweld.example/.well-known/oauth-protected-resource"
    )


@pytest.mark.parametrize(
    "overrides,fragment",
    [
        ({"port": 0}, "out of valid range"),
        ({"mcp_path": "mcp"}, "must start with '/'"),
        ({"document_engine": "crdt"}, "must be one of"),
        ({"document_engine": "http"}, "INKWELD_DOCUMENT_SERVICE_URL required"),
        ({"jwt_secret": "short"}, "at least 32 characters"),
        ({"sse_keepalive_seconds": 0}, "must be positive"),
    ],
)
def test_validate_reports_problems(overrides, fragment):
    errors = Config(**overrides).validate()
    assert any(fragment in error for error in errors)


def test_with_overrides_ignores_none():
    config = Config().with_overrides(port=9100, host=None)
    assert config.port == 9100
    assert config.host == "0.0.0.0"


class TestCommandLine:
    """CLI flags layer over the environment."""

    def test_flags_override_environment(self, monkeypatch):
        monkeypatch.setenv("INKWELD_MCP_PORT", "9000")
        args = build_parser().parse_args(["--port", "9001", "--base-url", "https://x.example/"])
        config = load_config(args)
        assert config.port == 9001
        assert config.base_url == "https://x.example"

    def test_invalid_combination_raises(self, monkeypatch):
        monkeypatch.delenv("INKWELD_DOCUMENT_SERVICE_URL", raising=False)
        args = build_parser().parse_args(["--document-engine", "http"])
        with pytest.raises(ConfigurationError, match="INKWELD_DOCUMENT_SERVICE_URL"):
            load_config(args)
