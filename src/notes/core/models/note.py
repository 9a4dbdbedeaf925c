"""Note entity.

A note as the notes app stores it: a title, free-form content, the last
modification time in epoch seconds, a favorite flag and an optional
category. Rows come from the ``notes`` table; request parameters use the
same attribute names.

Tags:
    notes-core, models, entity
"""

from __future__ import annotations

from notes.core.coercion import AttributeType
from notes.core.entity import Attribute, Entity


class Note(Entity):
    """A single note (``notes`` table)."""

    title = Attribute()
    content = Attribute()
    modified = Attribute()
    favorite = Attribute(default=False)
    category = Attribute()

    def __init__(self) -> None:
        super().__init__()
        self._declare_type("title", AttributeType.STRING)
        self._declare_type("content", AttributeType.STRING)
        self._declare_type("modified", AttributeType.INTEGER)
        self._declare_type("favorite", AttributeType.BOOLEAN)
        self._declare_type("category", AttributeType.STRING)

    @property
    def slug(self) -> str:
        """URL-friendly form of the title; not unique."""
        return self.slugify("title")
