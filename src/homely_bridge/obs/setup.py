"""Logging setup driven by the ``-v`` count and ``LOG_LEVEL``."""

from __future__ import annotations

import logging
import os

LOG_LEVELS = ("ERROR", "WARNING", "INFO", "DEBUG")
DEFAULT_LEVEL_INDEX = 2
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_ALIASES = {"WARN": "WARNING", "TRACE": "DEBUG"}


def resolve_log_level(verbosity: int, env_level: str | None = None) -> str:
    """Map a verbosity count to a level name.

    ``LOG_LEVEL`` (passed as *env_level*) wins when set. Otherwise each ``-v``
    steps one level past INFO, stopping at DEBUG.
    """
    if env_level:
        name = env_level.strip().upper()
        name = _ALIASES.get(name, name)
        if name in LOG_LEVELS or name == "CRITICAL":
            return name
    index = min(DEFAULT_LEVEL_INDEX + max(verbosity, 0), len(LOG_LEVELS) - 1)
    return LOG_LEVELS[index]


def init_logging(verbosity: int = 0) -> str:
    """Configure the root logger and return the level name applied."""
    level = resolve_log_level(verbosity, os.environ.get("LOG_LEVEL"))
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    # httpx logs every request URL at INFO; keep it one step quieter than ours.
    if level != "DEBUG":
        logging.getLogger("httpx").setLevel(logging.WARNING)
    return level
