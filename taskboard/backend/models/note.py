"""
Note Model.

Database model for notes and the enumerations of their lifecycle.
"""

from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.backend.models.base import Base, HexIdMixin, OwnedMixin, TimestampMixin


class NoteStatus(StrEnum):
    """Lifecycle states of a note."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    ARCHIVED = "archived"


class NotePriority(StrEnum):
    """Note priorities, declared lowest first."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Note(HexIdMixin, OwnedMixin, TimestampMixin, Base):
    """
    Note database model.

    completed_at is set exactly while status is ``done``; the service
    layer maintains that on every status transition.
    """

    __tablename__ = "notes"

    group_id: Mapped[str | None] = mapped_column(
        String(32),
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(2000),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=NoteStatus.TODO,
        index=True,
    )
    priority: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=NotePriority.MEDIUM,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r}, status={self.status})>"
