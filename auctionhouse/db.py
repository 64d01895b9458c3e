"""Database connection from the DATABASE_URL setting."""

from __future__ import annotations

import logging
import os
import sqlite3
from urllib.parse import parse_qs, quote

_log = logging.getLogger(__name__)

_SQLITE_PREFIX = "sqlite:"
_MEMORY = ":memory:"


def database_url() -> str:
    """Return the configured database URL or fail if it is unset."""
    try:
        return os.environ["DATABASE_URL"]
    except KeyError:
        raise RuntimeError("DATABASE_URL no seteado") from None


def _sqlite_target(url: str) -> tuple[str, bool]:
    if not url.startswith(_SQLITE_PREFIX):
        raise RuntimeError("No se pudo conectar a la BD: esquema no soportado")
    rest = url[len(_SQLITE_PREFIX):]
    if rest.startswith("//"):
        rest = rest[2:]
    path, _, query = rest.partition("?")
    params = parse_qs(query)
    mode = params.get("mode", ["rw"])[-1]
    if path in ("", _MEMORY) or mode == "memory":
        return _MEMORY, False
    if mode not in ("ro", "rw", "rwc"):
        raise RuntimeError(f"No se pudo conectar a la BD: modo inválido '{mode}'")
    return f"file:{quote(path, safe='/')}?mode={mode}", True


def connect(url: str | None = None) -> sqlite3.Connection:
    """Open a connection to the database at url, or at DATABASE_URL."""
    if url is None:
        url = database_url()
    _log.info("Conectando a la base de datos: %s", url)
    target, is_uri = _sqlite_target(url)
    try:
        connection = sqlite3.connect(target, uri=is_uri)
        connection.execute("PRAGMA foreign_keys = ON")
    except sqlite3.Error as exc:
        raise RuntimeError("No se pudo conectar a la BD") from exc
    return connection