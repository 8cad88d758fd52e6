"""Default logger backed by the stdlib ``logging`` module."""

import logging
from typing import Any, Dict, Optional

from .base import Logger


def format_context(kwargs: Dict[str, Any]) -> str:
    """Render keyword context as ``key=value`` pairs in a stable order."""
    if not kwargs:
        return ""
    return " ".join(f"{key}={value!r}" for key, value in sorted(kwargs.items()))


class DefaultLogger(Logger):
    """Logger that forwards to a named stdlib logger without touching handlers.

    Suitable for library use and tests: output goes wherever the host
    application configured the ``logging`` tree.
    """

    def __init__(self, name: str = "inkweld_mcp", level: Optional[int] = None):
        self._logger = logging.getLogger(name)
        if level is not None:
            self._logger.setLevel(level)

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, message: str, kwargs: Dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        context = format_context(kwargs)
        self._logger.log(level, f"{message} {context}" if context else message)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, message, kwargs)
