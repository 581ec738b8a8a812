"""
Groups API Endpoints.

REST API endpoints for group management.
"""

from typing import Any, Literal

from fastapi import APIRouter, Depends, Query

from taskboard.backend.core.dependencies import DbSession, OwnerId, RequestId
from taskboard.backend.core.exceptions import NotFoundError
from taskboard.backend.core.pagination import (
    PaginationParams,
    create_paginated_response,
    get_pagination_params,
)
from taskboard.backend.models.group import Group
from taskboard.backend.schemas.base import ApiResponse, ResponseMetadata
from taskboard.backend.schemas.group import (
    GroupCreate,
    GroupResponse,
    GroupUpdate,
    GroupWithCount,
)
from taskboard.backend.services.group import GroupService

router = APIRouter()


def _respond(group: Group | None, request_id: str) -> ApiResponse[GroupResponse]:
    if group is None:
        raise NotFoundError("Group not found")
    return ApiResponse(
        data=GroupResponse.model_validate(group),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "",
    response_model=ApiResponse[GroupResponse],
    status_code=201,
    summary="Create a group",
    description="Create a group. Names are unique per user.",
)
async def create_group(
    data: GroupCreate,
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
) -> ApiResponse[GroupResponse]:
    """Create a new group."""
    group = await GroupService(db).create_group(owner_id, data)
    return _respond(group, request_id)


@router.get(
    "",
    summary="List groups (paginated)",
    description="Get a page of the caller's groups, newest first.",
)
async def list_groups(
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
    pagination: PaginationParams = Depends(get_pagination_params),
    search: str | None = Query(
        default=None,
        max_length=100,
        description="Substring of name or description",
    ),
) -> dict[str, Any]:
    """List groups with pagination."""
    groups, page_info = await GroupService(db).list_groups(
        owner_id,
        search=search,
        pagination=pagination,
    )
    return create_paginated_response(
        items=groups,
        item_schema=GroupResponse,
        page_info=page_info,
        request_id=request_id,
    )


@router.get(
    "/stats",
    response_model=ApiResponse[list[GroupWithCount]],
    summary="Groups with note counts",
    description="Every group of the caller with its number of outstanding notes.",
)
async def group_stats(
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
) -> ApiResponse[list[GroupWithCount]]:
    """List groups with their outstanding note counts."""
    rows = await GroupService(db).list_with_note_counts(owner_id)
    data = [
        GroupWithCount(**GroupResponse.model_validate(group).model_dump(), note_count=count)
        for group, count in rows
    ]
    return ApiResponse(data=data, metadata=ResponseMetadata(request_id=request_id))


@router.get(
    "/{group_id}",
    response_model=ApiResponse[GroupResponse],
    summary="Get a group",
)
async def get_group(
    group_id: str,
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
) -> ApiResponse[GroupResponse]:
    """Get a group by ID."""
    group = await GroupService(db).get_group(group_id, owner_id)
    return _respond(group, request_id)


@router.patch(
    "/{group_id}",
    response_model=ApiResponse[GroupResponse],
    summary="Update a group",
    description="Update an existing group. Only provided fields are updated.",
)
async def update_group(
    group_id: str,
    data: GroupUpdate,
    db: DbSession,
    owner_id: OwnerId,
    request_id: RequestId,
) -> ApiResponse[GroupResponse]:
    """Update a group."""
    group = await GroupService(db).update_group(group_id, owner_id, data)
    return _respond(group, request_id)


@router.delete(
    "/{group_id}",
    status_code=204,
    summary="Delete a group",
    description=(
        "Delete a group. With policy=reassign its notes become ungrouped; "
        "with policy=cascade they are deleted too. Defaults to lifecycle.yaml."
    ),
)
async def delete_group(
    group_id: str,
    db: DbSession,
    owner_id: OwnerId,
    policy: Literal["reassign", "cascade"] | None = Query(default=None),
) -> None:
    """Delete a group."""
    if not await GroupService(db).delete_group(group_id, owner_id, policy=policy):
        raise NotFoundError("Group not found")
