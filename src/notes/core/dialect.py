"""SQL dialects understood by the entity mapper.

The mapper emits four statement shapes (SELECT by key, INSERT, UPDATE,
DELETE). Across backends only two things change: the parameter marker, and
whether the key of a freshly inserted row comes back through ``RETURNING``
or through the cursor's ``lastrowid``.

Examples:
    >>> SQLITE.placeholders(3)
    '?, ?, ?'
    >>> POSTGRESQL.returning
    True

Tags:
    dialect, sql, portability, database, notes-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Dialect:
    """Parameter style and key-retrieval strategy of one backend."""

    name: str
    marker: str
    returning: bool = False

    def placeholders(self, count: int) -> str:
        """``count`` markers joined for a VALUES list."""
        return ", ".join([self.marker] * count)


SQLITE = Dialect("sqlite", "?")
"""``?`` markers; new keys from ``cursor.lastrowid``."""

POSTGRESQL = Dialect("postgresql", "%s", returning=True)
"""psycopg-style ``%s`` markers; new keys from ``INSERT ... RETURNING``."""


__all__ = [
    "Dialect",
    "SQLITE",
    "POSTGRESQL",
]
