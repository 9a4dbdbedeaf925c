"""Concrete entities of the notes app.

Tags:
    notes-core, models, entities

Doc-Types:
    api-reference, data-model
"""

from notes.core.models.note import Note

__all__ = [
    "Note",
]
