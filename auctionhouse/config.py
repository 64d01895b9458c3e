"""Process start-up configuration: environment file and logging."""

from __future__ import annotations

import logging
import os

from dotenv import find_dotenv, load_dotenv

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "off": logging.CRITICAL + 1,
}
_DEFAULT_LEVEL = logging.ERROR


def init() -> int:
    """Load a .env file if present and configure logging; return the level."""
    path = find_dotenv(usecwd=True)
    if path:
        load_dotenv(path, override=False)
    level = _LEVELS.get(os.environ.get("LOG_LEVEL", "").strip().lower(), _DEFAULT_LEVEL)
    logging.basicConfig(
        level=level,
        format="[%(asctime)s %(levelname)s %(name)s] %(message)s",
    )
    logging.getLogger().setLevel(level)
    return level