"""
Base Repository.

Base class for all repositories with common CRUD operations.
Every lookup that can be reached from outside the services is scoped by
owner, so a record owned by someone else is indistinguishable from a
missing one.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.backend.core.logging import get_logger
from taskboard.backend.models.base import Base

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common CRUD operations.

    Subclasses should set the model class:

        class GroupRepository(BaseRepository[Group]):
            model = Group
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id_or_none(self, id: str) -> ModelType | None:
        """Get a single record by ID, returning None if not found."""
        result = await self.session.execute(
            select(self.model).where(self.model.id == str(id))
        )
        return result.scalar_one_or_none()

    async def get_for_owner(self, id: str, owner_id: str) -> ModelType | None:
        """Get a record by ID only if it belongs to ``owner_id``."""
        result = await self.session.execute(
            select(self.model)
            .where(self.model.id == str(id))
            .where(self.model.user_id == owner_id)
        )
        return result.scalar_one_or_none()

    async def create(self, **kwargs: Any) -> ModelType:
        """Create a new record."""
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update(self, instance: ModelType, **kwargs: Any) -> ModelType:
        """Apply attribute changes to a loaded record and flush them."""
        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)

        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete_for_owner(self, id: str, owner_id: str) -> bool:
        """Delete a record owned by ``owner_id``. Returns False if none matched."""
        result = await self.session.execute(
            delete(self.model)
            .where(self.model.id == str(id))
            .where(self.model.user_id == owner_id)
        )
        return result.rowcount > 0
