"""
ArchivedNote Model.

Immutable snapshot of a note taken when it was completed. The group is
stored by name so history survives group renames and deletions, and the
original note id carries no foreign key so deleting the note keeps the
history row.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.backend.core.utils import utc_now
from taskboard.backend.models.base import Base, HexIdMixin, OwnedMixin


class ArchivedNote(HexIdMixin, OwnedMixin, Base):
    """ArchivedNote database model. At most one row per (owner, note)."""

    __tablename__ = "archived_notes"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "original_note_id",
            name="uq_archived_notes_owner_note",
        ),
    )

    original_note_id: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(2000),
        nullable=True,
    )
    priority: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )
    group_name: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )
    completed_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        index=True,
    )
    archived_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utc_now,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<ArchivedNote(id={self.id}, original_note_id={self.original_note_id})>"
        )
