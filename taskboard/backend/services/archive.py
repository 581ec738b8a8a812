"""
Archive Service.

Writes immutable history records for completed notes. A note produces at
most one archived record for its whole lifetime, however many times it
re-enters ``done``.
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.backend.core.exceptions import ArchiveError
from taskboard.backend.core.utils import utc_now
from taskboard.backend.models.archived_note import ArchivedNote
from taskboard.backend.models.note import Note
from taskboard.backend.repositories.archived_note import ArchivedNoteRepository
from taskboard.backend.repositories.group import GroupRepository
from taskboard.backend.repositories.note import NoteRepository
from taskboard.backend.services.base import BaseService


class ArchiveService(BaseService):
    """
    Service for archive history writes and point reads.

    The uniqueness of (owner, original note) is enforced in storage; the
    lookup before the insert only avoids a wasted write in the common case.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = ArchivedNoteRepository(session)

    async def archive_if_absent(self, note: Note, group_name: str | None = None) -> ArchivedNote:
        """
        Archive a snapshot of ``note`` unless it is already archived.

        Args:
            note: The note as it was just persisted
            group_name: Name of the note's group at archive time, if any

        Returns:
            The archived record, existing or newly created

        Raises:
            ArchiveError: If the archive table cannot be read or written
        """
        archived, _ = await self._write_archive(note, group_name)
        return archived

    async def _write_archive(
        self, note: Note, group_name: str | None
    ) -> tuple[ArchivedNote, bool]:
        """Archive ``note`` if absent. The flag is True only when this call inserted the row."""
        try:
            async with self.session.begin_nested():
                existing = await self.repo.get_by_original_note(note.id, note.user_id)
                if existing is not None:
                    self._log_debug(
                        "Note already archived",
                        note_id=note.id,
                        archive_id=existing.id,
                    )
                    return existing, False

                inserted = await self.repo.insert_if_absent(
                    {
                        "user_id": note.user_id,
                        "original_note_id": note.id,
                        "title": note.title,
                        "description": note.description,
                        "priority": note.priority,
                        "group_name": group_name,
                        "completed_at": note.completed_at or utc_now(),
                        "archived_at": utc_now(),
                        "created_at": note.created_at,
                    }
                )
                archived = await self.repo.get_by_original_note(note.id, note.user_id)
        except SQLAlchemyError as e:
            self._logger.error(
                "Archive write failed",
                extra={"note_id": note.id, "user_id": note.user_id, "error": str(e)},
            )
            raise ArchiveError(f"Failed to archive note {note.id}") from e

        if archived is None:
            raise ArchiveError(f"Archived copy of note {note.id} not found after insert")

        if inserted:
            self._log_operation(
                "Note archived",
                note_id=note.id,
                archive_id=archived.id,
                user_id=note.user_id,
            )
        else:
            self._log_debug("Concurrent archive won the race", note_id=note.id)
        return archived, inserted

    async def get_by_original_note(self, note_id: str, owner_id: str) -> ArchivedNote | None:
        """Get the archived copy of a note, if it has one."""
        return await self.repo.get_by_original_note(note_id, owner_id)

    async def get_archived_note(self, archive_id: str, owner_id: str) -> ArchivedNote | None:
        """Get an archived record by its own ID."""
        return await self.repo.get_for_owner(archive_id, owner_id)

    async def delete_archived_note(self, archive_id: str, owner_id: str) -> bool:
        """
        Permanently delete an archived record.

        The live note, if it still exists, is not touched.

        Returns:
            False if no record matched for this owner
        """
        self._log_operation("Deleting archived note", archive_id=archive_id, user_id=owner_id)
        return await self._execute_db_operation(
            "delete_archived_note",
            self.repo.delete_for_owner(archive_id, owner_id),
        )

    async def archive_missing(self, owner_id: str) -> int:
        """
        Archive every done note of ``owner_id`` that has no archived copy.

        Recovers from automatic archival that failed or was disabled.

        Returns:
            Number of archived records created
        """
        notes = await NoteRepository(self.session).list_done_without_archive(owner_id)
        groups = GroupRepository(self.session)

        created = 0
        for note in notes:
            group_name = None
            if note.group_id:
                group_name = await groups.get_name(note.group_id, owner_id)
            _, inserted = await self._write_archive(note, group_name)
            if inserted:
                created += 1

        self._log_operation("Archive reconciliation finished", user_id=owner_id, archived=created)
        return created
