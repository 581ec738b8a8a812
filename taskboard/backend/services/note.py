"""
Note Service.

Business logic layer for notes. Orchestrates repositories,
handles validation, and implements the status transition rules:

- entering ``done`` stamps completed_at and archives a snapshot
  (best effort, failures are logged and absorbed)
- leaving ``done`` clears completed_at; history is left untouched
- every other transition only changes status and updated_at
"""

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.backend.core.config import get_app_config
from taskboard.backend.core.exceptions import ArchiveError, ValidationError
from taskboard.backend.core.pagination import (
    PaginationParams,
    SortParams,
    build_page_info,
)
from taskboard.backend.core.utils import utc_now
from taskboard.backend.models.group import Group
from taskboard.backend.models.note import Note, NotePriority, NoteStatus
from taskboard.backend.repositories.group import GroupRepository
from taskboard.backend.repositories.note import SORTABLE_COLUMNS, NoteRepository
from taskboard.backend.schemas.base import PageInfo
from taskboard.backend.schemas.note import (
    NoteCreate,
    NoteFilters,
    NoteUpdate,
    PriorityCounts,
    StatusCounts,
)
from taskboard.backend.services.archive import ArchiveService
from taskboard.backend.services.base import BaseService

TITLE_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 2000

_NON_NULLABLE_FIELDS = ("title", "priority", "status")


class NoteService(BaseService):
    """
    Service for note business logic.

    Handles note creation, updates, status transitions and retrieval
    with owner scoping on every lookup. Point operations return None
    when the note does not exist for the owner.
    """

    def __init__(
        self,
        session: AsyncSession,
        archive_on_complete: bool | None = None,
    ) -> None:
        super().__init__(session)
        self.repo = NoteRepository(session)
        self.group_repo = GroupRepository(session)
        self.archive_service = ArchiveService(session)
        if archive_on_complete is None:
            archive_on_complete = get_app_config().features.archive_on_complete
        self.archive_on_complete = archive_on_complete

    # -------------------------------------------------------------------------
    # Validation helpers
    # -------------------------------------------------------------------------

    def _clean_title(self, title: str | None) -> str:
        self._validate_required({"title": title}, ["title"])
        title = title.strip()
        self._validate_string_length(title, "title", min_length=1, max_length=TITLE_MAX_LENGTH)
        return title

    def _settable_status(self, status: NoteStatus | str) -> NoteStatus:
        status = NoteStatus(status)
        if status == NoteStatus.ARCHIVED:
            raise ValidationError(
                "Only completed notes can be archived, through the archive action",
                details={"status": status.value},
            )
        return status

    async def _require_group(self, group_id: str, owner_id: str) -> Group:
        group = await self.group_repo.get_for_owner(group_id, owner_id)
        if group is None:
            raise ValidationError("Group not found", details={"group_id": group_id})
        return group

    # -------------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------------

    @staticmethod
    def _transition_fields(old: str, new: str) -> dict[str, Any]:
        """Side fields implied by moving a note from ``old`` to ``new`` status."""
        if new == NoteStatus.DONE and old != NoteStatus.DONE:
            return {"completed_at": utc_now()}
        if new != NoteStatus.DONE and old == NoteStatus.DONE:
            return {"completed_at": None}
        return {}

    async def _resolve_group_name(self, note: Note) -> str | None:
        if not note.group_id:
            return None
        try:
            async with self.session.begin_nested():
                return await self.group_repo.get_name(note.group_id, note.user_id)
        except SQLAlchemyError as e:
            self._logger.warning(
                "Group lookup failed while archiving",
                extra={"note_id": note.id, "group_id": note.group_id, "error": str(e)},
            )
            return None

    async def _archive_best_effort(self, note: Note) -> None:
        """Archive a note that just entered ``done``, absorbing archive failures."""
        if not self.archive_on_complete:
            self._log_debug("Automatic archival disabled", note_id=note.id)
            return

        group_name = await self._resolve_group_name(note)
        try:
            await self.archive_service.archive_if_absent(note, group_name)
        except ArchiveError as e:
            self._logger.warning(
                "Automatic archival failed, note stays done",
                extra={"note_id": note.id, "user_id": note.user_id, "error": e.message},
            )

    async def _apply_changes(self, note: Note, changes: dict[str, Any]) -> Note:
        """
        Persist ``changes`` on ``note``, running the status transition rules.

        updated_at is stamped even when nothing else changes.
        """
        old_status = note.status
        new_status = changes.get("status", old_status)
        changes.update(self._transition_fields(old_status, new_status))
        changes["updated_at"] = utc_now()

        note = await self._execute_db_operation(
            "update_note",
            self.repo.update(note, **changes),
        )

        if new_status != old_status:
            self._log_operation(
                "Note status changed",
                note_id=note.id,
                user_id=note.user_id,
                from_status=old_status,
                to_status=new_status,
            )
            if new_status == NoteStatus.DONE:
                await self._archive_best_effort(note)
        return note

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def create_note(self, owner_id: str, data: NoteCreate) -> Note:
        """
        Create a new note.

        A note created directly in ``done`` is completed and archived
        like any other note entering ``done``.

        Args:
            owner_id: Owner of the new note
            data: Note creation data

        Returns:
            Created note

        Raises:
            ValidationError: If the title is blank or the group is unknown
        """
        title = self._clean_title(data.title)
        if data.description is not None:
            self._validate_string_length(
                data.description, "description", max_length=DESCRIPTION_MAX_LENGTH
            )
        group_id = data.group_id or None
        if group_id is not None:
            await self._require_group(group_id, owner_id)

        status = self._settable_status(data.status)
        now = utc_now()
        self._log_operation("Creating note", user_id=owner_id, status=status.value)

        note = await self._execute_db_operation(
            "create_note",
            self.repo.create(
                user_id=owner_id,
                group_id=group_id,
                title=title,
                description=data.description,
                status=status.value,
                priority=NotePriority(data.priority).value,
                created_at=now,
                updated_at=now,
                completed_at=now if status == NoteStatus.DONE else None,
            ),
        )

        if status == NoteStatus.DONE:
            await self._archive_best_effort(note)

        self._log_debug("Note created", note_id=note.id)
        return note

    async def get_note(self, note_id: str, owner_id: str) -> Note | None:
        """Get a note by ID if it belongs to the owner."""
        return await self.repo.get_for_owner(note_id, owner_id)

    async def list_notes(
        self,
        owner_id: str,
        filters: NoteFilters | None = None,
        sort: SortParams | None = None,
        pagination: PaginationParams | None = None,
    ) -> tuple[list[Note], PageInfo]:
        """
        List an owner's notes with filtering, sorting and pagination.

        Args:
            owner_id: Owner whose notes are listed
            filters: Status, priority, group and text filters
            sort: Sort column and direction (default newest first)
            pagination: Page and page size

        Returns:
            Tuple of (notes on this page, pagination metadata)

        Raises:
            ValidationError: If the sort column is not allowed
        """
        sort = sort or SortParams(sort_by="created_at")
        sort.validate_against(SORTABLE_COLUMNS)
        pagination = pagination or PaginationParams()

        total = await self.repo.count_filtered(owner_id, filters)
        notes = await self.repo.list_for_owner(
            owner_id,
            filters,
            sort_by=sort.sort_by,
            descending=sort.descending,
            limit=pagination.limit,
            offset=pagination.offset,
        )
        return notes, build_page_info(pagination, total)

    async def update_note(self, note_id: str, owner_id: str, data: NoteUpdate) -> Note | None:
        """
        Update an existing note.

        Only explicitly supplied fields are applied; an explicit null
        group_id ungroups the note. A status change goes through the
        transition rules.

        Args:
            note_id: Note ID to update
            owner_id: Owner of the note
            data: Update data

        Returns:
            Updated note, or None if not found for this owner

        Raises:
            ValidationError: If a field is invalid or the group is unknown
        """
        note = await self.repo.get_for_owner(note_id, owner_id)
        if note is None:
            return None

        update_data = data.model_dump(exclude_unset=True)
        for field in _NON_NULLABLE_FIELDS:
            if field in update_data and update_data[field] is None:
                raise ValidationError(f"{field} cannot be null", details={field: "Required"})

        if "title" in update_data:
            update_data["title"] = self._clean_title(update_data["title"])
        if update_data.get("description") is not None:
            self._validate_string_length(
                update_data["description"], "description", max_length=DESCRIPTION_MAX_LENGTH
            )
        if "group_id" in update_data:
            update_data["group_id"] = update_data["group_id"] or None
            if update_data["group_id"] is not None:
                await self._require_group(update_data["group_id"], owner_id)
        if "status" in update_data:
            update_data["status"] = self._settable_status(update_data["status"]).value
        if "priority" in update_data:
            update_data["priority"] = NotePriority(update_data["priority"]).value

        self._log_operation(
            "Updating note",
            note_id=note_id,
            user_id=owner_id,
            fields=list(update_data.keys()),
        )
        return await self._apply_changes(note, update_data)

    async def set_status(self, note_id: str, owner_id: str, status: NoteStatus | str) -> Note | None:
        """
        Change a note's status through the transition rules.

        Setting the current status again only stamps updated_at.

        Returns:
            Updated note, or None if not found for this owner

        Raises:
            ValidationError: If ``status`` is archived
        """
        status = self._settable_status(status)
        return await self.update_note(note_id, owner_id, NoteUpdate(status=status.value))

    async def archive_note(self, note_id: str, owner_id: str) -> Note | None:
        """
        Archive a completed note.

        Makes sure the history record exists (recovering a failed automatic
        archival), then moves the note to ``archived``.

        Returns:
            Archived note, or None if not found for this owner

        Raises:
            ValidationError: If the note is not ``done``
            ArchiveError: If the history record cannot be written
        """
        note = await self.repo.get_for_owner(note_id, owner_id)
        if note is None:
            return None
        if note.status != NoteStatus.DONE:
            raise ValidationError(
                "Only completed notes can be archived",
                details={"status": note.status},
            )

        self._log_operation("Archiving note", note_id=note_id, user_id=owner_id)
        group_name = await self._resolve_group_name(note)
        await self.archive_service.archive_if_absent(note, group_name)
        return await self._apply_changes(note, {"status": NoteStatus.ARCHIVED.value})

    async def unarchive_note(self, note_id: str, owner_id: str) -> Note | None:
        """
        Return an archived note to ``done``.

        The history record stays in place.

        Returns:
            Note, or None if not found for this owner

        Raises:
            ValidationError: If the note is not ``archived``
        """
        note = await self.repo.get_for_owner(note_id, owner_id)
        if note is None:
            return None
        if note.status != NoteStatus.ARCHIVED:
            raise ValidationError(
                "Only archived notes can be unarchived",
                details={"status": note.status},
            )

        self._log_operation("Unarchiving note", note_id=note_id, user_id=owner_id)
        return await self._apply_changes(note, {"status": NoteStatus.DONE.value})

    async def delete_note(self, note_id: str, owner_id: str) -> bool:
        """
        Delete a note. Its archived copy, if any, is kept.

        Returns:
            False if no note matched for this owner
        """
        self._log_operation("Deleting note", note_id=note_id, user_id=owner_id)
        return await self._execute_db_operation(
            "delete_note",
            self.repo.delete_for_owner(note_id, owner_id),
        )

    async def status_counts(self, owner_id: str) -> StatusCounts:
        """Count the owner's notes per status."""
        counts = await self.repo.status_counts(owner_id)
        return StatusCounts(
            **{status.value: counts.get(status.value, 0) for status in NoteStatus},
            total=sum(counts.values()),
        )

    async def priority_counts(self, owner_id: str) -> PriorityCounts:
        """Count the owner's notes per priority."""
        counts = await self.repo.priority_counts(owner_id)
        return PriorityCounts(
            **{priority.value: counts.get(priority.value, 0) for priority in NotePriority},
            total=sum(counts.values()),
        )
