"""
History API Endpoints.

Read access to archived notes and their statistics, plus permanent
deletion of history entries and reconciliation of missed archivals.
"""

from datetime import date
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query

from taskboard.backend.core.dependencies import DbSession, OwnerId, RequestId
from taskboard.backend.core.exceptions import NotFoundError
from taskboard.backend.core.pagination import (
    PaginationParams,
    SortParams,
    create_paginated_response,
    get_pagination_params,
)
from taskboard.backend.models.note import NotePriority
from taskboard.backend.schemas.base import ApiResponse, ResponseMetadata
from taskboard.backend.schemas.history import (
    ArchivedNoteResponse,
    DailyStat,
    GroupStat,
    HistoryFilters,
    ReconcileResult,
)
from taskboard.backend.schemas.note import PriorityCounts
from taskboard.backend.services.archive import ArchiveService
from taskboard.backend.services.history import HistoryService

router = APIRouter()


@router.get(
    "",
    summary="Query history (paginated)",
    description="Filter, sort and page through the caller's archived notes.",
)
async def query_history(
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
    priority: NotePriority | None = Query(default=None),
    group_name: str | None = Query(default=None, max_length=100),
    group_name_exact: bool = Query(
        default=True,
        description="Match group_name exactly; false for a substring match",
    ),
    search: str | None = Query(default=None, max_length=100),
    start_date: date | None = Query(default=None, description="First completion day"),
    end_date: date | None = Query(default=None, description="Last completion day, inclusive"),
    sort_by: str = Query(default="archived_at"),
    sort_order: Literal["asc", "desc"] = Query(default="desc"),
) -> dict[str, Any]:
    """Query archived notes."""
    filters = HistoryFilters(
        priority=priority,
        group_name=group_name,
        group_name_exact=group_name_exact,
        search=search,
        start_date=start_date,
        end_date=end_date,
    )
    items, page_info = await HistoryService(db).query(
        owner_id,
        filters=filters,
        sort=SortParams(sort_by=sort_by, sort_order=sort_order),
        pagination=pagination,
    )
    return create_paginated_response(
        items=items,
        item_schema=ArchivedNoteResponse,
        page_info=page_info,
        request_id=request_id,
    )


@router.get(
    "/stats/daily",
    response_model=ApiResponse[list[DailyStat]],
    summary="Daily completion statistics",
    description="Completions per day of completion, newest day first. Empty days are omitted.",
)
async def daily_stats(
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    days: int | None = Query(default=None, description="Maximum number of days (1-365)"),
) -> ApiResponse[list[DailyStat]]:
    """Get completions per day."""
    stats = await HistoryService(db).daily_stats(
        owner_id,
        start_date=start_date,
        end_date=end_date,
        day_limit=days,
    )
    return ApiResponse(data=stats, metadata=ResponseMetadata(request_id=request_id))


@router.get(
    "/stats/priority",
    response_model=ApiResponse[PriorityCounts],
    summary="Archived notes per priority",
)
async def priority_stats(
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
) -> ApiResponse[PriorityCounts]:
    """Get archived note counts per priority."""
    stats = await HistoryService(db).priority_stats(owner_id)
    return ApiResponse(data=stats, metadata=ResponseMetadata(request_id=request_id))


@router.get(
    "/stats/groups",
    response_model=ApiResponse[list[GroupStat]],
    summary="Archived notes per group",
)
async def group_stats(
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
) -> ApiResponse[list[GroupStat]]:
    """Get archived note counts per group name."""
    stats = await HistoryService(db).group_stats(owner_id)
    return ApiResponse(data=stats, metadata=ResponseMetadata(request_id=request_id))


@router.get(
    "/recent",
    response_model=ApiResponse[list[ArchivedNoteResponse]],
    summary="Recently archived notes",
)
async def recent(
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
    limit: int = Query(default=5, ge=1, le=50),
) -> ApiResponse[list[ArchivedNoteResponse]]:
    """Get the most recently archived notes."""
    items = await HistoryService(db).recent(owner_id, limit=limit)
    return ApiResponse(
        data=[ArchivedNoteResponse.model_validate(item) for item in items],
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "/reconcile",
    response_model=ApiResponse[ReconcileResult],
    summary="Archive missed notes",
    description="Archive every done note of the caller that has no history record yet.",
)
async def reconcile(
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
) -> ApiResponse[ReconcileResult]:
    """Backfill missing history records."""
    archived = await ArchiveService(db).archive_missing(owner_id)
    return ApiResponse(
        data=ReconcileResult(archived=archived),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "/{archive_id}",
    response_model=ApiResponse[ArchivedNoteResponse],
    summary="Get an archived note",
)
async def get_archived_note(
    archive_id: str,
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
) -> ApiResponse[ArchivedNoteResponse]:
    """Get an archived note by its ID."""
    item = await ArchiveService(db).get_archived_note(archive_id, owner_id)
    if item is None:
        raise NotFoundError("Archived note not found")
    return ApiResponse(
        data=ArchivedNoteResponse.model_validate(item),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.delete(
    "/{archive_id}",
    status_code=204,
    summary="Delete an archived note",
    description="Permanently remove a history entry. The live note is not touched.",
)
async def delete_archived_note(
    archive_id: str,
    db: DbSession,
    owner_id: OwnerId,
) -> None:
    """Delete an archived note."""
    if not await ArchiveService(db).delete_archived_note(archive_id, owner_id):
        raise NotFoundError("Archived note not found")
