"""
SQLAlchemy Base Model.

Base class for all database models with common fields and utilities.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from taskboard.backend.core.utils import new_id, utc_now


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )


class HexIdMixin:
    """Mixin that adds a 128-bit lowercase hex primary key."""

    id: Mapped[str] = mapped_column(
        String(32),
        primary_key=True,
        default=new_id,
    )


class OwnedMixin:
    """Mixin for records exclusively owned by one user."""

    user_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )
