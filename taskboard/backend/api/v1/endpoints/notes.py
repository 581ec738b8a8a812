"""
Notes API Endpoints.

REST API endpoints for note management and status transitions.
"""

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
from taskboard.backend.models.note import Note, NotePriority, NoteStatus
from taskboard.backend.schemas.base import ApiResponse, ResponseMetadata
from taskboard.backend.schemas.note import (
    NoteCreate,
    NoteFilters,
    NoteResponse,
    NoteStats,
    NoteStatusUpdate,
    NoteUpdate,
)
from taskboard.backend.services.note import NoteService

router = APIRouter()


def _found(note: Note | None) -> Note:
    if note is None:
        raise NotFoundError("Note not found")
    return note


def _respond(note: Note | None, request_id: str) -> ApiResponse[NoteResponse]:
    return ApiResponse(
        data=NoteResponse.model_validate(_found(note)),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "",
    response_model=ApiResponse[NoteResponse],
    status_code=201,
    summary="Create a note",
    description="Create a new note. A note created as done is archived right away.",
)
async def create_note(
    data: NoteCreate,
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Create a new note."""
    note = await NoteService(db).create_note(owner_id, data)
    return _respond(note, request_id)


@router.get(
    "",
    summary="List notes (paginated)",
    description="Get a filtered, sorted page of the caller's notes.",
)
async def list_notes(
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
    status: NoteStatus | None = Query(default=None, description="Filter by status"),
    priority: NotePriority | None = Query(default=None, description="Filter by priority"),
    group_id: str | None = Query(default=None, description="Filter by group"),
    ungrouped: bool = Query(default=False, description="Only notes without a group"),
    search: str | None = Query(
        default=None,
        max_length=100,
        description="Substring of title or description",
    ),
    sort_by: str = Query(default="created_at", description="Sort column"),
    sort_order: Literal["asc", "desc"] = Query(default="desc"),
) -> dict[str, Any]:
    """List notes with filtering, sorting and pagination."""
    filters = NoteFilters(
        status=status,
        priority=priority,
        group_id=group_id,
        ungrouped=ungrouped,
        search=search,
    )
    notes, page_info = await NoteService(db).list_notes(
        owner_id,
        filters=filters,
        sort=SortParams(sort_by=sort_by, sort_order=sort_order),
        pagination=pagination,
    )
    return create_paginated_response(
        items=notes,
        item_schema=NoteResponse,
        page_info=page_info,
        request_id=request_id,
    )


@router.get(
    "/stats",
    response_model=ApiResponse[NoteStats],
    summary="Note statistics",
    description="Counts of the caller's notes per status and per priority.",
)
async def note_stats(
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
) -> ApiResponse[NoteStats]:
    """Get note counts."""
    service = NoteService(db)
    stats = NoteStats(
        status=await service.status_counts(owner_id),
        priority=await service.priority_counts(owner_id),
    )
    return ApiResponse(data=stats, metadata=ResponseMetadata(request_id=request_id))


@router.get(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Get a note",
    description="Get a single note by ID.",
)
async def get_note(
    note_id: str,
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Get a note by ID."""
    note = await NoteService(db).get_note(note_id, owner_id)
    return _respond(note, request_id)


@router.patch(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Update a note",
    description="Update an existing note. Only provided fields are updated.",
)
async def update_note(
    note_id: str,
    data: NoteUpdate,
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Update a note."""
    note = await NoteService(db).update_note(note_id, owner_id, data)
    return _respond(note, request_id)


@router.patch(
    "/{note_id}/status",
    response_model=ApiResponse[NoteResponse],
    summary="Change note status",
    description="Move a note to todo, in_progress or done. Use the archive action for archived.",
)
async def set_note_status(
    note_id: str,
    data: NoteStatusUpdate,
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Change a note's status."""
    note = await NoteService(db).set_status(note_id, owner_id, data.status)
    return _respond(note, request_id)


@router.delete(
    "/{note_id}",
    status_code=204,
    summary="Delete a note",
    description="Permanently delete a note. Its archived copy is kept.",
)
async def delete_note(
    note_id: str,
    db: DbSession,
    owner_id: OwnerId,
) -> None:
    """Delete a note."""
    if not await NoteService(db).delete_note(note_id, owner_id):
        raise NotFoundError("Note not found")


@router.post(
    "/{note_id}/archive",
    response_model=ApiResponse[NoteResponse],
    summary="Archive a note",
    description="Archive a completed note. The history record is created if missing.",
)
async def archive_note(
    note_id: str,
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Archive a note."""
    note = await NoteService(db).archive_note(note_id, owner_id)
    return _respond(note, request_id)


@router.post(
    "/{note_id}/unarchive",
    response_model=ApiResponse[NoteResponse],
    summary="Unarchive a note",
    description="Return an archived note to done. History is kept.",
)
async def unarchive_note(
    note_id: str,
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Unarchive a note."""
    note = await NoteService(db).unarchive_note(note_id, owner_id)
    return _respond(note, request_id)
