"""Command-line entry point for the Inkweld MCP server."""

import argparse
import asyncio
import os
import sys

from inkweld_mcp.config import Config
from inkweld_mcp.exceptions import ConfigurationError
from inkweld_mcp.logger import Logger, session_logger

logger: Logger = session_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="inkweld-mcp - Inkweld workspace access via Model Context Protocol"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host address to bind to (default: 0.0.0.0, or INKWELD_MCP_HOST env var)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port number to listen on (default: 8333, or INKWELD_MCP_PORT env var)",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="Public base URL used in WWW-Authenticate and token audience (default: BASE_URL env var)",
    )
    parser.add_argument(
        "--path",
        dest="mcp_path",
        type=str,
        default=None,
        help="MCP endpoint path (default: /api/v1/ai/mcp, or INKWELD_MCP_PATH env var)",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Blob storage directory (default: ./data, or INKWELD_DATA_DIR env var)",
    )
    parser.add_argument(
        "--document-engine",
        choices=["memory", "http"],
        default=None,
        help="Document engine backend (default: memory, or INKWELD_DOCUMENT_ENGINE env var)",
    )
    parser.add_argument(
        "--document-service-url",
        type=str,
        default=None,
        help="Remote document service URL for the http engine",
    )
    return parser


def load_config(args: argparse.Namespace) -> Config:
    config = Config.from_env(os.environ).with_overrides(
        host=args.host,
        port=args.port,
        base_url=args.base_url.rstrip("/") if args.base_url else None,
        mcp_path=args.mcp_path,
        data_dir=args.data_dir,
        document_engine=args.document_engine,
        document_service_url=args.document_service_url,
    )
    errors = config.validate()
    if errors:
        raise ConfigurationError(code="INVALID_CONFIG", message="; ".join(errors))
    return config


def main() -> None:
    args = build_parser().parse_args()
    startup_logger: Logger = session_logger

    try:
        config = load_config(args)
    except ConfigurationError as e:
        startup_logger.error("FATAL: Invalid configuration", error=e.message)
        sys.exit(1)

    from inkweld_mcp.mcp_server.server import main as serve

    try:
        startup_logger.info(
            "Starting MCP server",
            host=config.host,
            port=config.port,
            path=config.mcp_path,
            transport="Streamable HTTP",
            oauth_enabled=bool(config.jwt_secret),
        )
        asyncio.run(serve(config))
        startup_logger.info("MCP server shutdown complete")
    except KeyboardInterrupt:
        startup_logger.info("Shutdown complete")
        sys.exit(0)
    except Exception as e:
        startup_logger.error("Failed to start server", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


if __name__ == "__main__":
    main()
