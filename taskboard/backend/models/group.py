"""
Group Model.

Named, colored buckets a user sorts notes into.
"""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.backend.models.base import Base, HexIdMixin, OwnedMixin, TimestampMixin

DEFAULT_GROUP_COLOR = "#3498db"


class Group(HexIdMixin, OwnedMixin, TimestampMixin, Base):
    """
    Group database model.

    Names are unique per owner. Notes reference groups through
    notes.group_id with ON DELETE CASCADE; the reassign deletion policy
    clears that reference before the row is removed.
    """

    __tablename__ = "groups"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_groups_owner_name"),
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )
    color: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        default=DEFAULT_GROUP_COLOR,
    )

    def __repr__(self) -> str:
        return f"<Group(id={self.id}, name={self.name!r})>"
