"""
History Service.

Read-only queries and statistics over archived notes.
"""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.backend.core.config import get_app_config
from taskboard.backend.core.exceptions import ValidationError
from taskboard.backend.core.pagination import (
    PaginationParams,
    SortParams,
    build_page_info,
)
from taskboard.backend.models.archived_note import ArchivedNote
from taskboard.backend.models.note import NotePriority
from taskboard.backend.repositories.archived_note import (
    SORTABLE_COLUMNS,
    ArchivedNoteRepository,
)
from taskboard.backend.schemas.base import PageInfo
from taskboard.backend.schemas.history import DailyStat, GroupStat, HistoryFilters
from taskboard.backend.schemas.note import PriorityCounts
from taskboard.backend.services.base import BaseService

RECENT_MAX_LIMIT = 50


class HistoryService(BaseService):
    """Service for querying the archive history of an owner."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = ArchivedNoteRepository(session)

    async def query(
        self,
        owner_id: str,
        filters: HistoryFilters | None = None,
        sort: SortParams | None = None,
        pagination: PaginationParams | None = None,
    ) -> tuple[list[ArchivedNote], PageInfo]:
        """
        Page through an owner's archived notes.

        Args:
            owner_id: Owner of the history
            filters: Priority, group name, text and completion date filters
            sort: Sort column and direction (default most recently archived first)
            pagination: Page and page size

        Returns:
            Tuple of (archived notes on this page, pagination metadata)

        Raises:
            ValidationError: If the sort column is not allowed or the date range is inverted
        """
        sort = sort or SortParams(sort_by="archived_at")
        sort.validate_against(SORTABLE_COLUMNS)
        pagination = pagination or PaginationParams()
        if filters is not None:
            self._validate_date_range(filters.start_date, filters.end_date)

        total = await self.repo.count_filtered(owner_id, filters)
        items = await self.repo.list_for_owner(
            owner_id,
            filters,
            sort_by=sort.sort_by,
            descending=sort.descending,
            limit=pagination.limit,
            offset=pagination.offset,
        )
        return items, build_page_info(pagination, total)

    def _validate_date_range(self, start_date: date | None, end_date: date | None) -> None:
        if start_date and end_date and start_date > end_date:
            raise ValidationError(
                "Invalid date range",
                details={"start_date": "Must not be after end_date"},
            )

    async def daily_stats(
        self,
        owner_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
        day_limit: int | None = None,
    ) -> list[DailyStat]:
        """
        Completions per calendar day of completed_at, newest day first.

        Days without completions are omitted. ``end_date`` is inclusive.

        Args:
            owner_id: Owner of the history
            start_date: First day to include
            end_date: Last day to include
            day_limit: Maximum number of days returned, clamped to [1, 365]
        """
        lifecycle = get_app_config().lifecycle
        if day_limit is None:
            day_limit = lifecycle.daily_stats_default_days
        day_limit = min(max(1, day_limit), lifecycle.daily_stats_max_days)
        self._validate_date_range(start_date, end_date)

        rows = await self.repo.daily_counts(owner_id, start_date, end_date, limit=day_limit)
        self._log_debug("Daily stats computed", user_id=owner_id, days=len(rows))
        return [
            DailyStat(
                date=date.fromisoformat(str(day)[:10]),
                total_completed=total,
                by_priority=PriorityCounts(high=high, medium=medium, low=low, total=total),
            )
            for day, total, high, medium, low in rows
        ]

    async def priority_stats(self, owner_id: str) -> PriorityCounts:
        """Count the owner's archived notes per priority."""
        counts = await self.repo.priority_counts(owner_id)
        return PriorityCounts(
            **{priority.value: counts.get(priority.value, 0) for priority in NotePriority},
            total=sum(counts.values()),
        )

    async def group_stats(self, owner_id: str) -> list[GroupStat]:
        """Archived note counts per group name, largest first."""
        return [
            GroupStat(group_name=name, count=count)
            for name, count in await self.repo.group_counts(owner_id)
        ]

    async def recent(self, owner_id: str, limit: int = 5) -> list[ArchivedNote]:
        """Most recently archived notes."""
        limit = min(max(1, limit), RECENT_MAX_LIMIT)
        return await self.repo.recent(owner_id, limit=limit)
