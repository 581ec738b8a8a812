"""
History Schemas.

Schemas for archived notes and the statistics computed over them.
"""

from datetime import date, datetime

from pydantic import Field

from taskboard.backend.models.note import NotePriority
from taskboard.backend.schemas.base import CamelModel
from taskboard.backend.schemas.note import PriorityCounts


class ArchivedNoteResponse(CamelModel):
    """Persisted shape of an archived note."""

    id: str
    user_id: str
    original_note_id: str
    title: str
    description: str | None
    priority: NotePriority
    group_name: str | None
    completed_at: datetime
    archived_at: datetime
    created_at: datetime


class HistoryFilters(CamelModel):
    """Filters for querying archived notes."""

    priority: NotePriority | None = None
    group_name: str | None = Field(default=None, max_length=100)
    group_name_exact: bool = True
    search: str | None = Field(default=None, max_length=100)
    start_date: date | None = None
    end_date: date | None = None


class DailyStat(CamelModel):
    """Completions on one calendar day."""

    date: date
    total_completed: int
    by_priority: PriorityCounts


class GroupStat(CamelModel):
    """Archived note count for one group name."""

    group_name: str
    count: int


class ReconcileResult(CamelModel):
    """Outcome of a reconciliation pass."""

    archived: int
