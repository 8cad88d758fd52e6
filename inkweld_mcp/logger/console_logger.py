"""Console logger writing structured lines to stderr."""

import logging
import sys
from typing import Optional

from .default_logger import DefaultLogger

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class ConsoleLogger(DefaultLogger):
    """DefaultLogger that owns a stderr handler.

    The handler is attached once per logger name, so creating several
    ConsoleLogger instances for the same name does not duplicate output.
    """

    def __init__(
        self,
        name: str = "inkweld_mcp",
        level: int = logging.INFO,
        fmt: Optional[str] = None,
    ):
        super().__init__(name=name, level=level)
        stdlib_logger = logging.getLogger(name)
        if not any(getattr(h, "_inkweld_console", False) for h in stdlib_logger.handlers):
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter(fmt or _FORMAT))
            handler._inkweld_console = True  # type: ignore[attr-defined]
            stdlib_logger.addHandler(handler)
            stdlib_logger.propagate = False

    def set_level(self, level: int) -> None:
        logging.getLogger(self.name).setLevel(level)
