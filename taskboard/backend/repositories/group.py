"""
Group Repository.

Data access layer for groups.
"""

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.backend.core.utils import LIKE_ESCAPE, contains_pattern
from taskboard.backend.models.group import Group
from taskboard.backend.models.note import Note, NoteStatus
from taskboard.backend.repositories.base import BaseRepository

# Statuses that no longer count as outstanding work.
_FINISHED_STATUSES = (NoteStatus.DONE.value, NoteStatus.ARCHIVED.value)


class GroupRepository(BaseRepository[Group]):
    """Repository for Group model."""

    model = Group

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_by_name(
        self,
        owner_id: str,
        name: str,
        exclude_id: str | None = None,
    ) -> Group | None:
        """
        Find an owner's group by exact name.

        Args:
            owner_id: Owner of the group
            name: Group name
            exclude_id: Group to ignore (the one being renamed)

        Returns:
            Matching group or None
        """
        stmt = select(Group).where(Group.user_id == owner_id).where(Group.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Group.id != exclude_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_name(self, group_id: str, owner_id: str) -> str | None:
        """Resolve a group id to its current name for the owner."""
        result = await self.session.execute(
            select(Group.name)
            .where(Group.id == group_id)
            .where(Group.user_id == owner_id)
        )
        return result.scalar_one_or_none()

    async def list_for_owner(
        self,
        owner_id: str,
        search: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Group], int]:
        """
        List an owner's groups, newest first.

        Returns:
            Tuple of (groups on this page, total matching)
        """
        conditions = [Group.user_id == owner_id]
        if search:
            pattern = contains_pattern(search)
            conditions.append(
                or_(
                    Group.name.ilike(pattern, escape=LIKE_ESCAPE),
                    Group.description.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )

        total = (
            await self.session.execute(
                select(func.count()).select_from(Group).where(*conditions)
            )
        ).scalar_one()

        result = await self.session.execute(
            select(Group)
            .where(*conditions)
            .order_by(Group.created_at.desc(), Group.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all()), total

    async def list_with_note_counts(self, owner_id: str) -> list[tuple[Group, int]]:
        """Each of the owner's groups with its count of unfinished notes."""
        note_count = func.count(Note.id)
        result = await self.session.execute(
            select(Group, note_count)
            .outerjoin(
                Note,
                (Note.group_id == Group.id) & Note.status.notin_(_FINISHED_STATUSES),
            )
            .where(Group.user_id == owner_id)
            .group_by(Group.id)
            .order_by(Group.created_at.desc(), Group.id.desc())
        )
        return [(group, count) for group, count in result.all()]

    async def delete_row(self, group_id: str, owner_id: str) -> bool:
        """
        Delete the group row with a plain DELETE statement.

        Member notes are removed by the storage-level ON DELETE CASCADE,
        unless they were ungrouped first.
        """
        result = await self.session.execute(
            delete(Group)
            .where(Group.id == group_id)
            .where(Group.user_id == owner_id)
        )
        return result.rowcount > 0
