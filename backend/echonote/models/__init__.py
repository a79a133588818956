"""ORM models. Importing this package registers every table with ``Base``."""

from echonote.models.note import Note, NoteTag
from echonote.models.user import User

__all__ = ["Note", "NoteTag", "User"]
