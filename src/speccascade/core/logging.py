"""Opt-in file logging for the ``speccascade`` logger.

Library modules only ever log at DEBUG through ``logging.getLogger(__name__)``
and install no handlers. A host process that wants those records on disk calls
``configure_logging`` once; nothing is ever written to stdout or stderr.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from speccascade.core.utils.io import ensure_directory

PACKAGE_LOGGER = "speccascade"

_CONFIGURED_LOG_PATH: Optional[str] = None
_FILE_HANDLER: Optional[logging.Handler] = None


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(log_path: Path | str, level: str = "INFO") -> logging.Logger:
    """Write the package's log records to ``log_path``.

    Idempotent per path: calling again with the same file is a no-op, calling
    with a different file swaps the handler installed here.
    """
    global _CONFIGURED_LOG_PATH, _FILE_HANDLER

    logger = logging.getLogger(PACKAGE_LOGGER)
    resolved = str(Path(log_path).resolve())
    if _CONFIGURED_LOG_PATH == resolved and _FILE_HANDLER is not None:
        return logger

    ensure_directory(Path(resolved).parent)

    if _FILE_HANDLER is not None:
        logger.removeHandler(_FILE_HANDLER)
        _FILE_HANDLER.close()
        _FILE_HANDLER = None

    handler = logging.FileHandler(resolved, encoding="utf-8")
    handler.setLevel(_level_from_name(level))
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(_level_from_name(level))

    _FILE_HANDLER = handler
    _CONFIGURED_LOG_PATH = resolved
    return logger


def reset_logging() -> None:
    """Remove the handler installed by ``configure_logging`` (used by tests)."""
    global _CONFIGURED_LOG_PATH, _FILE_HANDLER
    if _FILE_HANDLER is not None:
        logger = logging.getLogger(PACKAGE_LOGGER)
        logger.removeHandler(_FILE_HANDLER)
        _FILE_HANDLER.close()
        logger.setLevel(logging.NOTSET)
    _CONFIGURED_LOG_PATH = None
    _FILE_HANDLER = None


__all__ = ["configure_logging", "reset_logging"]
