"""Project store: one row plus a <projects>/<slug>/{notes,citations} directory per project."""

from __future__ import annotations

import logging
import shutil
import sqlite3
from dataclasses import dataclass
from pathlib import Path

from research_helper.errors import NotFoundError, StorageError, ValidationError
from research_helper.infrastructure.async_utils import run_sync
from research_helper.infrastructure.db import Database
from research_helper.models import Project
from research_helper.services.common import db_call
from research_helper.services.paths import CollisionPolicy, allocate, sanitize

logger = logging.getLogger(__name__)

NOTES_DIR = "notes"
CITATIONS_DIR = "citations"
LEGACY_PAPERS_DIR = "papers"


@dataclass
class MigrationResult:
    project_id: int
    name: str
    action: str  # "unchanged" | "migrated" | "created" | "failed"
    old_path: str | None = None
    new_path: str | None = None
    notes_updated: int = 0
    citations_updated: int = 0
    error: str | None = None


def is_project_dir(path: Path) -> bool:
    return path.is_dir() and (path / NOTES_DIR).is_dir() and (path / CITATIONS_DIR).is_dir()


class ProjectStore:
    def __init__(self, db: Database, projects_dir: Path):
        self.db = db
        self.projects_dir = Path(projects_dir)

    async def create_project(self, name: str) -> Project:
        if not name or not name.strip():
            raise ValidationError("Project name is required")
        name = name.strip()

        try:
            directory = await run_sync(self._create_directories, sanitize(name))
        except OSError as e:
            logger.error(f"Failed to create directories for project '{name}': {e}")
            raise StorageError(f"Failed to create project directory: {e}") from e
        logger.info(f"Project directories created at: {directory}")

        # No rollback: if the insert fails the directory stays on disk.
        return await db_call(self.db.add_project, name, str(directory))

    def _create_directories(self, slug: str) -> Path:
        self.projects_dir.mkdir(parents=True, exist_ok=True)
        directory = allocate(self.projects_dir, slug, policy=CollisionPolicy.NUMERIC)
        directory.mkdir()
        (directory / NOTES_DIR).mkdir()
        (directory / CITATIONS_DIR).mkdir()
        return directory

    async def get_all_projects(self) -> list[Project]:
        return await db_call(self.db.list_projects)

    async def get_project(self, project_id: int) -> Project:
        project = await db_call(self.db.get_project, project_id)
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    async def delete_project(self, project_id: int) -> None:
        """Delete the row only; the directory tree and member rows are left in place."""
        if not await db_call(self.db.delete_project, project_id):
            raise NotFoundError("Project", project_id)
        logger.info(f"Deleted project {project_id} (directory and member rows kept)")

    # --- Migration from id-keyed directories ---

    async def migrate_project_directories(self) -> list[MigrationResult]:
        """Move every project onto the name-keyed layout.

        Legacy layouts are ``<projects>/<id>`` and ``<projects>/<id>-<slug>``
        with PDFs under ``papers/``. Their contents are copied, never moved,
        so the old tree remains as a backup.
        """
        logger.info("Starting project directory migration")
        results = []
        for project in await db_call(self.db.list_projects):
            try:
                result = await run_sync(self._migrate_one, project)
            except (OSError, sqlite3.Error, StorageError) as e:
                logger.exception(f"Migration failed for project {project.id} ({project.name})")
                result = MigrationResult(
                    project_id=project.id, name=project.name, action="failed",
                    old_path=project.directory_path, error=str(e),
                )
            results.append(result)
        logger.info(f"Migration finished for {len(results)} project(s)")
        return results

    def _legacy_candidates(self, project: Project) -> list[Path]:
        candidates = []
        if project.directory_path:
            candidates.append(Path(project.directory_path))
        candidates.append(self.projects_dir / str(project.id))
        candidates.append(self.projects_dir / f"{project.id}-{sanitize(project.name)}")
        return candidates

    def _migrate_one(self, project: Project) -> MigrationResult:
        current = Path(project.directory_path) if project.directory_path else None
        if current is not None and is_project_dir(current):
            return MigrationResult(
                project_id=project.id, name=project.name, action="unchanged",
                old_path=str(current), new_path=str(current),
            )

        legacy = next((p for p in self._legacy_candidates(project) if p.is_dir()), None)
        self.projects_dir.mkdir(parents=True, exist_ok=True)
        new_dir = allocate(self.projects_dir, sanitize(project.name), policy=CollisionPolicy.NUMERIC)
        logger.info(f"Migrating project '{project.name}' (ID: {project.id}) from {legacy} to {new_dir}")

        if legacy is None:
            new_dir.mkdir()
            (new_dir / NOTES_DIR).mkdir()
            (new_dir / CITATIONS_DIR).mkdir()
            self.db.update_project_directory(project.id, str(new_dir))
            return MigrationResult(
                project_id=project.id, name=project.name, action="created",
                old_path=project.directory_path, new_path=str(new_dir),
            )

        shutil.copytree(legacy, new_dir)
        papers = new_dir / LEGACY_PAPERS_DIR
        if papers.is_dir() and not (new_dir / CITATIONS_DIR).exists():
            papers.rename(new_dir / CITATIONS_DIR)
        (new_dir / NOTES_DIR).mkdir(exist_ok=True)
        (new_dir / CITATIONS_DIR).mkdir(exist_ok=True)

        notes_updated = 0
        for note in self.db.list_notes(project.id):
            if note.file_path:
                new_path = new_dir / NOTES_DIR / Path(note.file_path).name
                self.db.update_note_path(note.id, str(new_path))
                notes_updated += 1

        citations_updated = 0
        for citation in self.db.list_citations(project.id):
            if citation.file_path:
                new_path = new_dir / CITATIONS_DIR / Path(citation.file_path).name
                self.db.update_citation_path(citation.id, str(new_path))
                citations_updated += 1

        self.db.update_project_directory(project.id, str(new_dir))
        return MigrationResult(
            project_id=project.id, name=project.name, action="migrated",
            old_path=str(legacy), new_path=str(new_dir),
            notes_updated=notes_updated, citations_updated=citations_updated,
        )
