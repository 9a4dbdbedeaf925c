"""Connection factory for the entity mapper.

Routes a database URL or path to a SQLite connection that satisfies the
:class:`~notes.core.protocols.Connection` protocol.

==================  ==========================================  ============
Scheme              Example                                     Backend
==================  ==========================================  ============
``memory``          ``memory`` or ``:memory:`` or ``None``       SQLite RAM
``sqlite``          ``sqlite:///path/to/notes.db``               SQLite file
``(file path)``     ``./data/notes.db``                          SQLite file
==================  ==========================================  ============

Usage
-----
::

    from notes.core.connection import create_connection

    conn, info = create_connection()
    conn, info = create_connection("sqlite:///notes.db")

``create_connection()`` returns ``(conn, ConnectionInfo)`` so callers can
tell an ephemeral database from a persistent one.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from notes.core.errors import ConfigError
from notes.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConnectionInfo:
    """Metadata about a database connection."""

    backend: str
    """Backend identifier, currently always ``"sqlite"``."""

    persistent: bool
    """Whether data survives process exit."""

    url: str
    """The original URL or path used to create the connection."""

    resolved_path: str | None = None
    """For file-based SQLite, the resolved absolute path."""


class SqliteConnection:
    """Adapter: ``sqlite3.Connection`` → ``Connection`` protocol.

    Every ``execute`` returns its own cursor, so a read can be iterated
    after later statements have run.
    """

    def __init__(self, path: str = ":memory:", *, row_factory: Any = sqlite3.Row) -> None:
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = row_factory

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        return self._conn.execute(sql, params)

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()

    def __repr__(self) -> str:
        return f"SqliteConnection({self._conn!r})"


def _parse_url(db: str | None) -> tuple[str, str]:
    """Parse a database URL into ``(scheme, target)``."""
    if db is None or db in ("", "memory", ":memory:"):
        return "memory", ":memory:"

    for prefix in ("sqlite:///", "sqlite://"):
        if db.startswith(prefix):
            path = db[len(prefix):]
            if not path or path == ":memory:":
                return "memory", ":memory:"
            return "sqlite", path

    if "://" in db:
        return "unsupported", db

    return "sqlite", db


def create_connection(db: str | None = None) -> tuple[SqliteConnection, ConnectionInfo]:
    """Create a database connection from a URL, path, or keyword.

    Raises:
        ConfigError: The URL names a backend other than SQLite.
    """
    scheme, target = _parse_url(db)

    if scheme == "memory":
        conn = SqliteConnection(":memory:")
        info = ConnectionInfo(backend="sqlite", persistent=False, url=":memory:")
    elif scheme == "sqlite":
        path = Path(target)
        path.parent.mkdir(parents=True, exist_ok=True)
        resolved = str(path.resolve())
        conn = SqliteConnection(resolved)
        info = ConnectionInfo(
            backend="sqlite",
            persistent=True,
            url=db or target,
            resolved_path=resolved,
        )
    else:
        raise ConfigError(f"Unsupported database URL: {target}").with_context(url=target)

    logger.debug("connection_created", backend=info.backend, persistent=info.persistent)
    return conn, info


__all__ = [
    "ConnectionInfo",
    "SqliteConnection",
    "create_connection",
]
