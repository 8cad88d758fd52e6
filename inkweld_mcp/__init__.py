"""inkweld-mcp: Model Context Protocol server for the Inkweld writing workspace."""

__version__ = "1.0.0"

SERVER_NAME = "inkweld-mcp"
SERVER_VERSION = __version__
