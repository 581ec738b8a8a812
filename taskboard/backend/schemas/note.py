"""
Note Schemas.

Pydantic schemas for note request/response validation.
"""

from datetime import datetime
from typing import Literal

from pydantic import Field

from taskboard.backend.models.note import NotePriority, NoteStatus
from taskboard.backend.schemas.base import CamelModel

# Statuses a client may set directly. ``archived`` only comes from the archive action.
SettableStatus = Literal["todo", "in_progress", "done"]


class NoteCreate(CamelModel):
    """Schema for creating a new note."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Note title",
        examples=["Buy milk"],
    )
    description: str | None = Field(
        default=None,
        max_length=2000,
        description="Note description",
    )
    group_id: str | None = Field(
        default=None,
        description="Group the note belongs to; empty means ungrouped",
    )
    priority: NotePriority = Field(
        default=NotePriority.MEDIUM,
        description="Note priority",
    )
    status: SettableStatus = Field(
        default="todo",
        description="Initial status",
    )


class NoteUpdate(CamelModel):
    """
    Schema for updating an existing note.

    Only fields that were explicitly supplied are applied. An explicit
    null group_id clears the group.
    """

    title: str | None = Field(
        default=None,
        min_length=1,
        max_length=255,
        description="Note title",
    )
    description: str | None = Field(
        default=None,
        max_length=2000,
        description="Note description",
    )
    group_id: str | None = Field(
        default=None,
        description="Group id, or null to ungroup",
    )
    priority: NotePriority | None = Field(
        default=None,
        description="Note priority",
    )
    status: SettableStatus | None = Field(
        default=None,
        description="Note status; use the archive action for archived",
    )


class NoteStatusUpdate(CamelModel):
    """Schema for the status endpoint. ``archived`` has its own action."""

    status: SettableStatus


class NoteFilters(CamelModel):
    """Filters for listing notes."""

    status: NoteStatus | None = None
    priority: NotePriority | None = None
    group_id: str | None = None
    ungrouped: bool = False
    search: str | None = Field(default=None, max_length=100)


class NoteResponse(CamelModel):
    """Schema for note in API responses."""

    id: str
    user_id: str
    group_id: str | None
    title: str
    description: str | None
    status: NoteStatus
    priority: NotePriority
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None


class StatusCounts(CamelModel):
    """Note counts per status for one owner."""

    todo: int = 0
    in_progress: int = 0
    done: int = 0
    archived: int = 0
    total: int = 0


class PriorityCounts(CamelModel):
    """Counts per priority for one owner."""

    low: int = 0
    medium: int = 0
    high: int = 0
    total: int = 0


class NoteStats(CamelModel):
    """Aggregate counters shown on the dashboard."""

    status: StatusCounts
    priority: PriorityCounts
