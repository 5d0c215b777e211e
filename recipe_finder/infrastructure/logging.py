from __future__ import annotations

import logging

from .config import env_get

ROOT_LOGGER = "recipe_finder"
LOG_FORMAT = "%(levelname)s | %(message)s"


def _configured_level() -> int:
    level = getattr(logging, (env_get("RF_LOG_LEVEL") or "INFO").upper(), None)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``; the ``recipe_finder`` tree gets one stderr handler on first use.

    stdout is reserved for the CLI's JSON output.
    """
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(_configured_level())
    return logging.getLogger(name)
