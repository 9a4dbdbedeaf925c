"""
Notes - entity mapping primitives for the notes app.

- notes.core: Entity base class, coercion, naming, mapper, settings
"""

__version__ = "0.1.0"

from notes.core import *  # noqa
