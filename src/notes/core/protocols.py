"""
Protocols shared by the persistence collaborator.

Manifesto:
    The entity layer only needs a row-shaped mapping in and out. Whatever
    produces those rows is described here by shape, not by class, so any
    DB-API style connection works.

    - **Decoupling:** Mappers depend on shape, not implementation
    - **Testability:** Any object matching the protocol works

Tags:
    protocol, connection, database, notes-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Connection(Protocol):
    """
    What :class:`~notes.core.mapper.EntityMapper` needs from a connection.

    ``execute`` returns a cursor-like object; the mapper reads rows with
    ``fetchall()``/``fetchone()`` and, for backends without ``RETURNING``,
    the new key from ``lastrowid``.

    Examples:
        >>> cursor = conn.execute("SELECT * FROM notes WHERE id = ?", (1,))
        >>> cursor.fetchall()
    """

    def execute(self, sql: str, params: tuple = ()) -> Any:
        """Execute SQL statement with optional parameters."""
        ...

    def commit(self) -> None:
        """Commit current transaction."""
        ...

    def rollback(self) -> None:
        """Discard the current transaction after a failed write."""
        ...


__all__ = [
    "Connection",
]
