# Database models package. Importing it registers every table on Base.metadata.
from taskboard.backend.models.archived_note import ArchivedNote
from taskboard.backend.models.base import Base
from taskboard.backend.models.group import Group
from taskboard.backend.models.note import Note, NotePriority, NoteStatus

__all__ = [
    "ArchivedNote",
    "Base",
    "Group",
    "Note",
    "NotePriority",
    "NoteStatus",
]
