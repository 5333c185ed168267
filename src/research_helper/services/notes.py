"""Note store: markdown content on disk, a row in the record store pointing at it."""

from __future__ import annotations

import logging
from pathlib import Path

from research_helper.errors import NotFoundError, StorageError, ValidationError
from research_helper.infrastructure.async_utils import run_sync
from research_helper.infrastructure.db import Database
from research_helper.models import Note, normalize_tags
from research_helper.services.common import db_call, project_root, remove_file_best_effort, require_project
from research_helper.services.paths import EMPTY_SLUG_BASE, CollisionPolicy, allocate, sanitize
from research_helper.services.projects import NOTES_DIR

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".md"


def _write_new(path: Path, content: str) -> None:
    # "x" refuses to clobber: a same-day date-suffix collision fails here.
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("x", encoding="utf-8") as fh:
        fh.write(content)


def _allocate_and_write(directory: Path, title: str, content: str) -> Path:
    path = allocate(directory, sanitize(title), NOTE_SUFFIX, policy=CollisionPolicy.DATE)
    _write_new(path, content)
    return path


def _place(directory: Path, title: str, content: str, current: Path | None) -> tuple[Path, bool]:
    """Write a retitled or relocated note; returns its path and whether it moved.

    A title whose allocated name is the note's own file, bare or date-suffixed,
    is rewritten in place.
    """
    bare = directory / f"{sanitize(title) or EMPTY_SLUG_BASE}{NOTE_SUFFIX}"
    path = bare if bare == current else allocate(directory, sanitize(title), NOTE_SUFFIX, policy=CollisionPolicy.DATE)
    if current is not None and path == current:
        current.write_text(content, encoding="utf-8")
        return path, False
    _write_new(path, content)
    return path, True


def _read(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


class NoteStore:
    def __init__(self, db: Database):
        self.db = db

    async def create_note(self, title: str, content: str, tags: list[str] | None, project_id: int) -> Note:
        if not title or not title.strip():
            raise ValidationError("Title and project_id are required")
        project = await require_project(self.db, project_id)
        notes_dir = project_root(project) / NOTES_DIR
        content = content or ""

        try:
            path = await run_sync(_allocate_and_write, notes_dir, title, content)
        except OSError as e:
            logger.error(f"Failed to write note '{title}' in {notes_dir}: {e}")
            raise StorageError(f"Failed to write note file: {e}") from e

        # No rollback: if the insert fails the file stays on disk.
        note = await db_call(self.db.add_note, title, str(path), normalize_tags(tags), project_id)
        return note.model_copy(update={"content": content})

    async def update_note(
        self,
        note_id: int,
        title: str | None = None,
        content: str | None = None,
        tags: list[str] | None = None,
        project_id: int | None = None,
    ) -> Note:
        """Rewrite a note; a new title or project moves its file.

        Omitted fields keep their stored values. When the file moves, the old
        file is removed best-effort: a failure is logged and the update still
        succeeds.
        """
        note = await db_call(self.db.get_note, note_id)
        if note is None:
            raise NotFoundError("Note", note_id)
        if title is not None and not title.strip():
            raise ValidationError("Title cannot be empty")

        new_title = title if title is not None else note.title
        new_project_id = project_id if project_id is not None else note.project_id
        new_tags = normalize_tags(tags) if tags is not None else note.tags
        if content is None:
            content = await self._read_content(note)

        project = await require_project(self.db, new_project_id)
        current = Path(note.file_path) if note.file_path else None
        moved = new_title != note.title or new_project_id != note.project_id

        try:
            if moved or current is None:
                target_dir = project_root(project) / NOTES_DIR
                new_path, relocated = await run_sync(_place, target_dir, new_title, content, current)
                if relocated:
                    logger.info(f"Moved note {note_id} from {current} to {new_path}")
                    if current is not None:
                        await run_sync(remove_file_best_effort, current, "old note file")
            else:
                new_path = current
                await run_sync(current.write_text, content, encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write note {note_id}: {e}")
            raise StorageError(f"Failed to write note file: {e}") from e

        await db_call(self.db.update_note, note_id, new_title, str(new_path), new_tags, new_project_id)
        return note.model_copy(
            update={
                "title": new_title,
                "file_path": str(new_path),
                "tags": new_tags,
                "project_id": new_project_id,
                "content": content,
            }
        )

    async def _read_content(self, note: Note) -> str:
        if not note.file_path:
            logger.warning(f"Note {note.id} has no file path; using empty content")
            return ""
        try:
            return await run_sync(_read, note.file_path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read note {note.id} at {note.file_path}: {e}")
            return ""

    async def get_all_notes(self, project_id: int | None = None) -> list[Note]:
        """List notes with content inlined; an unreadable file yields empty content."""
        notes = await db_call(self.db.list_notes, project_id)
        return [n.model_copy(update={"content": await self._read_content(n)}) for n in notes]

    async def get_note(self, note_id: int) -> Note:
        note = await db_call(self.db.get_note, note_id)
        if note is None:
            raise NotFoundError("Note", note_id)
        return note.model_copy(update={"content": await self._read_content(note)})

    async def delete_note(self, note_id: int) -> None:
        note = await db_call(self.db.get_note, note_id)
        if note is None:
            raise NotFoundError("Note", note_id)
        await db_call(self.db.delete_note, note_id)
        await run_sync(remove_file_best_effort, note.file_path, "note file")
