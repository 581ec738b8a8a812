"""
ArchivedNote Repository.

Data access layer for the archive history table. Rows are only ever
inserted and deleted, never updated.
"""

from datetime import date, datetime, time, timedelta
from typing import Any

from sqlalchemy import Select, case, func, insert, or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.backend.core.utils import LIKE_ESCAPE, contains_pattern
from taskboard.backend.models.archived_note import ArchivedNote
from taskboard.backend.models.note import NotePriority
from taskboard.backend.repositories.base import BaseRepository
from taskboard.backend.schemas.history import HistoryFilters

SORTABLE_COLUMNS = frozenset({"archived_at", "completed_at", "created_at", "title", "priority"})

PRIORITY_RANK = case(
    {
        NotePriority.LOW.value: 1,
        NotePriority.MEDIUM.value: 2,
        NotePriority.HIGH.value: 3,
    },
    value=ArchivedNote.priority,
    else_=0,
)

UNGROUPED_LABEL = "Ungrouped"


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min)


def _completed_between(start_date: date | None, end_date: date | None) -> list[Any]:
    """Conditions for completed_at within [start_date, end_date], both inclusive."""
    conditions = []
    if start_date is not None:
        conditions.append(ArchivedNote.completed_at >= _day_start(start_date))
    if end_date is not None:
        conditions.append(
            ArchivedNote.completed_at < _day_start(end_date + timedelta(days=1))
        )
    return conditions


class ArchivedNoteRepository(BaseRepository[ArchivedNote]):
    """Repository for ArchivedNote model."""

    model = ArchivedNote

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_by_original_note(
        self,
        original_note_id: str,
        owner_id: str,
    ) -> ArchivedNote | None:
        """Find the archive row for a note, if one exists."""
        result = await self.session.execute(
            select(ArchivedNote)
            .where(ArchivedNote.original_note_id == original_note_id)
            .where(ArchivedNote.user_id == owner_id)
        )
        return result.scalar_one_or_none()

    async def insert_if_absent(self, values: dict[str, Any]) -> bool:
        """
        Insert an archive row unless (user_id, original_note_id) already exists.

        Uses INSERT ... ON CONFLICT DO NOTHING so a concurrent writer that
        wins the race leaves exactly one row behind.

        Returns:
            True if this call inserted the row
        """
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = postgresql.insert(ArchivedNote).values(**values).on_conflict_do_nothing(
                index_elements=["user_id", "original_note_id"],
            )
        elif dialect == "sqlite":
            stmt = sqlite.insert(ArchivedNote).values(**values).on_conflict_do_nothing(
                index_elements=["user_id", "original_note_id"],
            )
        else:
            stmt = insert(ArchivedNote).values(**values)

        result = await self.session.execute(stmt)
        return result.rowcount > 0

    def _filtered(self, stmt: Select, owner_id: str, filters: HistoryFilters | None) -> Select:
        stmt = stmt.where(ArchivedNote.user_id == owner_id)
        if filters is None:
            return stmt

        if filters.priority is not None:
            stmt = stmt.where(ArchivedNote.priority == filters.priority.value)
        if filters.group_name:
            if filters.group_name_exact:
                stmt = stmt.where(ArchivedNote.group_name == filters.group_name)
            else:
                stmt = stmt.where(
                    ArchivedNote.group_name.ilike(
                        contains_pattern(filters.group_name), escape=LIKE_ESCAPE
                    )
                )
        if filters.search:
            pattern = contains_pattern(filters.search)
            stmt = stmt.where(
                or_(
                    ArchivedNote.title.ilike(pattern, escape=LIKE_ESCAPE),
                    ArchivedNote.description.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        conditions = _completed_between(filters.start_date, filters.end_date)
        if conditions:
            stmt = stmt.where(*conditions)
        return stmt

    async def list_for_owner(
        self,
        owner_id: str,
        filters: HistoryFilters | None = None,
        sort_by: str = "archived_at",
        descending: bool = True,
        limit: int = 10,
        offset: int = 0,
    ) -> list[ArchivedNote]:
        """List an owner's archived notes."""
        column = PRIORITY_RANK if sort_by == "priority" else getattr(ArchivedNote, sort_by)
        order = column.desc() if descending else column.asc()
        tiebreak = ArchivedNote.id.desc() if descending else ArchivedNote.id.asc()

        stmt = self._filtered(select(ArchivedNote), owner_id, filters)
        result = await self.session.execute(
            stmt.order_by(order, tiebreak).limit(limit).offset(offset)
        )
        return list(result.scalars().all())

    async def count_filtered(
        self,
        owner_id: str,
        filters: HistoryFilters | None = None,
    ) -> int:
        """Count an owner's archived notes matching ``filters``."""
        stmt = self._filtered(
            select(func.count()).select_from(ArchivedNote), owner_id, filters
        )
        return (await self.session.execute(stmt)).scalar_one()

    async def daily_counts(
        self,
        owner_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int = 30,
    ) -> list[tuple[Any, int, int, int, int]]:
        """
        Completion counts per calendar day of completed_at, newest first.

        Returns:
            Rows of (day, total, high, medium, low). Days without
            completions produce no row.
        """
        day = func.date(ArchivedNote.completed_at).label("day")
        stmt = (
            select(
                day,
                func.count().label("total"),
                func.count(case((ArchivedNote.priority == NotePriority.HIGH.value, 1))),
                func.count(case((ArchivedNote.priority == NotePriority.MEDIUM.value, 1))),
                func.count(case((ArchivedNote.priority == NotePriority.LOW.value, 1))),
            )
            .where(ArchivedNote.user_id == owner_id)
            .where(*_completed_between(start_date, end_date))
            .group_by(day)
            .order_by(day.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [tuple(row) for row in result.all()]

    async def priority_counts(self, owner_id: str) -> dict[str, int]:
        """Count an owner's archived notes per priority."""
        result = await self.session.execute(
            select(ArchivedNote.priority, func.count())
            .where(ArchivedNote.user_id == owner_id)
            .group_by(ArchivedNote.priority)
        )
        return {priority: count for priority, count in result.all()}

    async def group_counts(self, owner_id: str) -> list[tuple[str, int]]:
        """Count an owner's archived notes per group name, largest first."""
        name = func.coalesce(ArchivedNote.group_name, UNGROUPED_LABEL).label("name")
        count = func.count().label("count")
        result = await self.session.execute(
            select(name, count)
            .where(ArchivedNote.user_id == owner_id)
            .group_by(name)
            .order_by(count.desc(), name.asc())
        )
        return [(group_name, total) for group_name, total in result.all()]

    async def recent(self, owner_id: str, limit: int = 5) -> list[ArchivedNote]:
        """Most recently archived entries for an owner."""
        result = await self.session.execute(
            select(ArchivedNote)
            .where(ArchivedNote.user_id == owner_id)
            .order_by(ArchivedNote.archived_at.desc(), ArchivedNote.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
