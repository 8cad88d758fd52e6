"""
Logger module for inkweld-mcp

This module provides a flexible logging interface that allows users to
drop in their own logger implementations. Every logger accepts a message
plus structured keyword context.

Usage:
    from inkweld_mcp.logger import Logger, DefaultLogger

    # Use the default logger
    logger = DefaultLogger()
    logger.info("Server started", port=8333)

    # Or implement your own
    class MyCustomLogger(Logger):
        def info(self, message: str, **kwargs):
            # Your custom implementation
            pass
"""

import logging

from .base import Logger
from .default_logger import DefaultLogger
from .console_logger import ConsoleLogger

# Shared logger instance for modules that just need basic console logging
session_logger: Logger = ConsoleLogger(level=logging.DEBUG)

__all__ = [
    "Logger",
    "DefaultLogger",
    "ConsoleLogger",
    "session_logger",
]
