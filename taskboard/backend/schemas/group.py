"""
Group Schemas.

Pydantic schemas for group request/response validation.
"""

from datetime import datetime

from pydantic import Field

from taskboard.backend.schemas.base import CamelModel

COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class GroupCreate(CamelModel):
    """Schema for creating a new group."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Group name, unique per owner",
        examples=["Work"],
    )
    description: str | None = Field(
        default=None,
        max_length=500,
        description="Group description",
    )
    color: str | None = Field(
        default=None,
        pattern=COLOR_PATTERN,
        description="Hex RGB color such as #3498db",
    )


class GroupUpdate(CamelModel):
    """Schema for updating an existing group."""

    name: str | None = Field(
        default=None,
        min_length=1,
        max_length=100,
    )
    description: str | None = Field(
        default=None,
        max_length=500,
    )
    color: str | None = Field(
        default=None,
        pattern=COLOR_PATTERN,
    )


class GroupResponse(CamelModel):
    """Schema for group in API responses."""

    id: str
    user_id: str
    name: str
    description: str | None
    color: str
    created_at: datetime
    updated_at: datetime


class GroupWithCount(GroupResponse):
    """Group plus the number of its notes that are still outstanding."""

    note_count: int
