"""Column and property name translation.

Storage columns are snake_case (``created_at``), in-memory attributes are
camelCase (``createdAt``). The two functions here are pure and each other's
inverse for names made of lowercase ASCII words:

    >>> column_to_property("created_at")
    'createdAt'
    >>> property_to_column("createdAt")
    'created_at'
    >>> column_to_property("title"), property_to_column("title")
    ('title', 'title')

Leading underscores, leading capitals and digits next to a case boundary
fall outside that convention; their translation is not defined.

Tags:
    naming, snake-case, camel-case, columns, notes-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import re

_UPPER_BOUNDARY = re.compile(r"(?=[A-Z])")


def column_to_property(column: str) -> str:
    """Translate a snake_case column name into a camelCase property name."""
    first, *rest = column.split("_")
    return first.lower() + "".join(part.capitalize() for part in rest)


def property_to_column(prop: str) -> str:
    """Translate a camelCase property name into a snake_case column name."""
    return "_".join(part.lower() for part in _UPPER_BOUNDARY.split(prop))


__all__ = [
    "column_to_property",
    "property_to_column",
]
