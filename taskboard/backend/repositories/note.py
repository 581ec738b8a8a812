"""
Note Repository.

Data access layer for notes. Handles all database operations
for the Note model.
"""


from sqlalchemy import Select, case, exists, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.backend.core.utils import LIKE_ESCAPE, contains_pattern, utc_now
from taskboard.backend.models.archived_note import ArchivedNote
from taskboard.backend.models.note import Note, NotePriority, NoteStatus
from taskboard.backend.repositories.base import BaseRepository
from taskboard.backend.schemas.note import NoteFilters

SORTABLE_COLUMNS = frozenset({"created_at", "updated_at", "title", "priority", "status"})

PRIORITY_RANK = case(
    {
        NotePriority.LOW.value: 1,
        NotePriority.MEDIUM.value: 2,
        NotePriority.HIGH.value: 3,
    },
    value=Note.priority,
    else_=0,
)


class NoteRepository(BaseRepository[Note]):
    """
    Repository for Note model.

    Inherits standard CRUD operations from BaseRepository
    and adds note-specific queries.
    """

    model = Note

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    def _filtered(self, stmt: Select, owner_id: str, filters: NoteFilters | None) -> Select:
        stmt = stmt.where(Note.user_id == owner_id)
        if filters is None:
            return stmt

        if filters.status is not None:
            stmt = stmt.where(Note.status == filters.status.value)
        if filters.priority is not None:
            stmt = stmt.where(Note.priority == filters.priority.value)
        if filters.ungrouped:
            stmt = stmt.where(Note.group_id.is_(None))
        elif filters.group_id:
            stmt = stmt.where(Note.group_id == filters.group_id)
        if filters.search:
            pattern = contains_pattern(filters.search)
            stmt = stmt.where(
                or_(
                    Note.title.ilike(pattern, escape=LIKE_ESCAPE),
                    Note.description.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        return stmt

    async def list_for_owner(
        self,
        owner_id: str,
        filters: NoteFilters | None = None,
        sort_by: str = "created_at",
        descending: bool = True,
        limit: int = 10,
        offset: int = 0,
    ) -> list[Note]:
        """
        List an owner's notes.

        Args:
            owner_id: Owner whose notes are listed
            filters: Optional status/priority/group/search filters
            sort_by: Column from SORTABLE_COLUMNS
            descending: Sort direction
            limit: Maximum number of notes to return
            offset: Number of notes to skip

        Returns:
            List of notes
        """
        column = PRIORITY_RANK if sort_by == "priority" else getattr(Note, sort_by)
        order = column.desc() if descending else column.asc()
        tiebreak = Note.id.desc() if descending else Note.id.asc()

        stmt = self._filtered(select(Note), owner_id, filters)
        result = await self.session.execute(
            stmt.order_by(order, tiebreak).limit(limit).offset(offset)
        )
        return list(result.scalars().all())

    async def count_filtered(self, owner_id: str, filters: NoteFilters | None = None) -> int:
        """Count an owner's notes matching ``filters``."""
        stmt = self._filtered(select(func.count()).select_from(Note), owner_id, filters)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def clear_group(self, group_id: str, owner_id: str) -> int:
        """
        Ungroup every note of ``owner_id`` that points at ``group_id``.

        Returns:
            Number of notes updated
        """
        result = await self.session.execute(
            update(Note)
            .where(Note.group_id == group_id)
            .where(Note.user_id == owner_id)
            .values(group_id=None, updated_at=utc_now())
        )
        return result.rowcount

    async def status_counts(self, owner_id: str) -> dict[str, int]:
        """Count an owner's notes per status."""
        result = await self.session.execute(
            select(Note.status, func.count())
            .where(Note.user_id == owner_id)
            .group_by(Note.status)
        )
        return {status: count for status, count in result.all()}

    async def priority_counts(self, owner_id: str) -> dict[str, int]:
        """Count an owner's notes per priority."""
        result = await self.session.execute(
            select(Note.priority, func.count())
            .where(Note.user_id == owner_id)
            .group_by(Note.priority)
        )
        return {priority: count for priority, count in result.all()}

    async def list_done_without_archive(self, owner_id: str) -> list[Note]:
        """Done notes of ``owner_id`` that have no archived copy yet."""
        archived = exists().where(
            ArchivedNote.user_id == Note.user_id,
            ArchivedNote.original_note_id == Note.id,
        )
        result = await self.session.execute(
            select(Note)
            .where(Note.user_id == owner_id)
            .where(Note.status == NoteStatus.DONE.value)
            .where(~archived)
            .order_by(Note.completed_at.asc())
        )
        return list(result.scalars().all())
