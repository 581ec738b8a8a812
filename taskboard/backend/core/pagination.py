"""
Pagination Utilities.

Page-number pagination and allow-listed sorting for list endpoints.
Page size is always clamped to [1, MAX_LIMIT] regardless of what the
caller asked for.
"""

import math
from dataclasses import dataclass
from typing import Any, Literal

from fastapi import Query
from pydantic import BaseModel

from taskboard.backend.core.exceptions import ValidationError
from taskboard.backend.schemas.base import PageInfo, PaginatedResponse, ResponseMetadata

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


# =============================================================================
# Pagination Parameters
# =============================================================================


@dataclass
class PaginationParams:
    """
    Page-number pagination parameters.

    Out-of-range values are clamped rather than rejected: page is at
    least 1 and limit is kept within [1, MAX_LIMIT].
    """

    page: int = 1
    limit: int = DEFAULT_LIMIT

    def __post_init__(self) -> None:
        self.page = max(1, int(self.page))
        self.limit = min(max(1, int(self.limit)), MAX_LIMIT)

    @property
    def offset(self) -> int:
        """Number of rows to skip for this page."""
        return (self.page - 1) * self.limit


def get_pagination_params(
    page: int = Query(
        default=1,
        ge=1,
        description="Page number, starting at 1",
    ),
    limit: int | None = Query(
        default=None,
        description="Page size (clamped to 1-100; default from application.yaml)",
    ),
) -> PaginationParams:
    """
    FastAPI dependency for pagination parameters.

    Usage:
        @router.get("/items")
        async def list_items(
            pagination: PaginationParams = Depends(get_pagination_params),
        ):
            ...
    """
    from taskboard.backend.core.config import get_app_config

    pagination_config = get_app_config().application.pagination
    if limit is None:
        limit = pagination_config.default_limit
    return PaginationParams(page=page, limit=min(limit, pagination_config.max_limit))


def build_page_info(params: PaginationParams, total: int) -> PageInfo:
    """Compute pagination metadata for a page of a result set of size ``total``."""
    total_pages = math.ceil(total / params.limit) if total else 0
    return PageInfo(
        page=params.page,
        limit=params.limit,
        total=total,
        total_pages=total_pages,
        has_next=params.page < total_pages,
        has_prev=params.page > 1,
    )


# =============================================================================
# Sorting
# =============================================================================


@dataclass
class SortParams:
    """Sort column and direction requested by the caller."""

    sort_by: str
    sort_order: Literal["asc", "desc"] = "desc"

    def __post_init__(self) -> None:
        order = str(self.sort_order).lower()
        if order not in ("asc", "desc"):
            raise ValidationError(
                "Invalid sort order",
                details={"sort_order": "Must be 'asc' or 'desc'"},
            )
        self.sort_order = order  # type: ignore[assignment]

    @property
    def descending(self) -> bool:
        return self.sort_order == "desc"

    def validate_against(self, allowed: frozenset[str]) -> None:
        """
        Check the sort column against an allow-list.

        Raises:
            ValidationError: If the column is not sortable
        """
        if self.sort_by not in allowed:
            raise ValidationError(
                "Invalid sort column",
                details={"sort_by": f"Must be one of: {', '.join(sorted(allowed))}"},
            )


# =============================================================================
# Paginated Response Builder
# =============================================================================


def create_paginated_response(
    items: list[Any],
    item_schema: type[BaseModel],
    page_info: PageInfo,
    request_id: str | None = None,
) -> dict[str, Any]:
    """
    Create a standardized paginated response.

    Args:
        items: List of items (model instances or dicts)
        item_schema: Pydantic schema to validate items
        page_info: Pagination metadata from build_page_info
        request_id: Request ID for metadata

    Returns:
        Dict matching PaginatedResponse structure, camelCase keys

    Usage:
        notes, page_info = await service.list_notes(owner_id, pagination=params)
        return create_paginated_response(notes, NoteResponse, page_info)
    """
    validated_items = [
        item_schema.model_validate(item).model_dump(mode="json", by_alias=True)
        for item in items
    ]

    response = PaginatedResponse(
        data=validated_items,
        pagination=page_info,
        metadata=ResponseMetadata(request_id=request_id),
    )

    return response.model_dump(mode="json", by_alias=True)
