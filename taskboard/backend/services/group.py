"""
Group Service.

Business logic for groups: per-owner unique names, and the two deletion
policies that keep notes from pointing at a deleted group.
"""

import re
from typing import Literal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.backend.core.config import get_app_config
from taskboard.backend.core.exceptions import ConflictError, ValidationError
from taskboard.backend.core.pagination import PaginationParams, build_page_info
from taskboard.backend.core.utils import utc_now
from taskboard.backend.models.group import Group
from taskboard.backend.repositories.group import GroupRepository
from taskboard.backend.repositories.note import NoteRepository
from taskboard.backend.schemas.base import PageInfo
from taskboard.backend.schemas.group import COLOR_PATTERN, GroupCreate, GroupUpdate
from taskboard.backend.services.base import BaseService

NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

DeletePolicy = Literal["reassign", "cascade"]

_COLOR_RE = re.compile(COLOR_PATTERN)


def _name_taken(name: str) -> ConflictError:
    return ConflictError(
        f"Group '{name}' already exists",
        code="RES_GROUP_NAME_TAKEN",
    )


class GroupService(BaseService):
    """Service for group business logic."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = GroupRepository(session)
        self.note_repo = NoteRepository(session)

    def _clean_name(self, name: str | None) -> str:
        self._validate_required({"name": name}, ["name"])
        name = name.strip()
        self._validate_string_length(name, "name", min_length=1, max_length=NAME_MAX_LENGTH)
        return name

    def _validate_color(self, color: str) -> None:
        if not _COLOR_RE.match(color):
            raise ValidationError(
                "Invalid color",
                details={"color": "Must be a hex RGB value such as #3498db"},
            )

    async def create_group(self, owner_id: str, data: GroupCreate) -> Group:
        """
        Create a new group.

        Args:
            owner_id: Owner of the group
            data: Group creation data

        Returns:
            Created group

        Raises:
            ValidationError: If name, description or color are invalid
            ConflictError: If the owner already has a group with this name
        """
        name = self._clean_name(data.name)
        if data.description is not None:
            self._validate_string_length(
                data.description, "description", max_length=DESCRIPTION_MAX_LENGTH
            )
        color = data.color or get_app_config().lifecycle.default_group_color
        self._validate_color(color)

        if await self.repo.get_by_name(owner_id, name) is not None:
            raise _name_taken(name)

        self._log_operation("Creating group", user_id=owner_id, name=name)
        return await self._execute_db_operation(
            "create_group",
            self.repo.create(
                user_id=owner_id,
                name=name,
                description=data.description,
                color=color,
            ),
            conflict=_name_taken(name),
        )

    async def get_group(self, group_id: str, owner_id: str) -> Group | None:
        """Get a group by ID if it belongs to the owner."""
        return await self.repo.get_for_owner(group_id, owner_id)

    async def list_groups(
        self,
        owner_id: str,
        search: str | None = None,
        pagination: PaginationParams | None = None,
    ) -> tuple[list[Group], PageInfo]:
        """List an owner's groups, newest first, optionally searching name and description."""
        pagination = pagination or PaginationParams()
        groups, total = await self.repo.list_for_owner(
            owner_id,
            search=search,
            limit=pagination.limit,
            offset=pagination.offset,
        )
        return groups, build_page_info(pagination, total)

    async def update_group(self, group_id: str, owner_id: str, data: GroupUpdate) -> Group | None:
        """
        Update an existing group.

        Returns:
            Updated group, or None if not found for this owner

        Raises:
            ValidationError: If a field is invalid
            ConflictError: If the new name is used by another of the owner's groups
        """
        group = await self.repo.get_for_owner(group_id, owner_id)
        if group is None:
            return None

        update_data = data.model_dump(exclude_unset=True)
        if "color" in update_data and update_data["color"] is None:
            raise ValidationError("color cannot be null", details={"color": "Required"})
        if "name" in update_data:
            update_data["name"] = self._clean_name(update_data["name"])
            if update_data["name"] != group.name:
                clash = await self.repo.get_by_name(owner_id, update_data["name"], exclude_id=group_id)
                if clash is not None:
                    raise _name_taken(update_data["name"])
        if update_data.get("description") is not None:
            self._validate_string_length(
                update_data["description"], "description", max_length=DESCRIPTION_MAX_LENGTH
            )
        if "color" in update_data:
            self._validate_color(update_data["color"])

        update_data["updated_at"] = utc_now()
        self._log_operation(
            "Updating group",
            group_id=group_id,
            user_id=owner_id,
            fields=list(update_data.keys()),
        )
        return await self._execute_db_operation(
            "update_group",
            self.repo.update(group, **update_data),
            conflict=_name_taken(update_data.get("name", group.name)),
        )

    async def _reassign_and_delete(self, group_id: str, owner_id: str) -> tuple[int, bool]:
        try:
            async with self.session.begin_nested():
                cleared = await self.note_repo.clear_group(group_id, owner_id)
                deleted = await self.repo.delete_row(group_id, owner_id)
        except SQLAlchemyError:
            # Loaded notes may already show the cleared group.
            self.session.expire_all()
            raise
        return cleared, deleted

    async def delete_reassign(self, group_id: str, owner_id: str) -> bool:
        """
        Delete a group and keep its notes as ungrouped.

        Clearing the notes' group and deleting the group happen in one
        savepoint: either both take effect or neither does.

        Returns:
            False if no group matched for this owner

        Raises:
            DatabaseError: If either step fails (nothing is changed)
        """
        if await self.repo.get_for_owner(group_id, owner_id) is None:
            return False

        cleared, deleted = await self._execute_db_operation(
            "delete_group_reassign",
            self._reassign_and_delete(group_id, owner_id),
        )
        self._log_operation(
            "Group deleted, notes ungrouped",
            group_id=group_id,
            user_id=owner_id,
            notes_ungrouped=cleared,
        )
        return deleted

    async def delete_cascade(self, group_id: str, owner_id: str) -> bool:
        """
        Delete a group together with its notes.

        Member notes are removed by the ON DELETE CASCADE on notes.group_id.
        Archived copies are history and stay.

        Returns:
            False if no group matched for this owner
        """
        deleted = await self._execute_db_operation(
            "delete_group_cascade",
            self.repo.delete_row(group_id, owner_id),
        )
        if deleted:
            self._log_operation("Group and notes deleted", group_id=group_id, user_id=owner_id)
        return deleted

    async def delete_group(
        self,
        group_id: str,
        owner_id: str,
        policy: DeletePolicy | None = None,
    ) -> bool:
        """Delete a group with the given policy, or the configured default."""
        policy = policy or get_app_config().lifecycle.group_delete_policy
        if policy == "cascade":
            return await self.delete_cascade(group_id, owner_id)
        if policy == "reassign":
            return await self.delete_reassign(group_id, owner_id)
        raise ValidationError(
            "Invalid delete policy",
            details={"policy": "Must be 'reassign' or 'cascade'"},
        )

    async def list_with_note_counts(self, owner_id: str) -> list[tuple[Group, int]]:
        """
        Each of the owner's groups with its number of outstanding notes.

        Notes that are ``done`` or ``archived`` are not counted.
        """
        return await self.repo.list_with_note_counts(owner_id)
