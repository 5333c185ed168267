"""Report rows whose directory or file is gone. Nothing is repaired."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from research_helper.infrastructure.async_utils import run_sync
from research_helper.infrastructure.db import Database
from research_helper.services.common import db_call
from research_helper.services.projects import is_project_dir


@dataclass
class Problem:
    kind: str  # "project" | "note" | "citation"
    record_id: int
    path: str | None
    detail: str


@dataclass
class ConsistencyReport:
    projects_checked: int = 0
    notes_checked: int = 0
    citations_checked: int = 0
    problems: list[Problem] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.problems


def _file_missing(path: str | None) -> bool:
    return not path or not Path(path).is_file()


async def check_consistency(db: Database) -> ConsistencyReport:
    report = ConsistencyReport()

    for project in await db_call(db.list_projects):
        report.projects_checked += 1
        path = project.directory_path
        if not path or not await run_sync(is_project_dir, Path(path)):
            report.problems.append(
                Problem("project", project.id, path, "directory missing or lacks notes/ and citations/")
            )

    for note in await db_call(db.list_notes):
        report.notes_checked += 1
        if await run_sync(_file_missing, note.file_path):
            report.problems.append(Problem("note", note.id, note.file_path, "markdown file missing"))

    for citation in await db_call(db.list_citations):
        report.citations_checked += 1
        if await run_sync(_file_missing, citation.file_path):
            report.problems.append(Problem("citation", citation.id, citation.file_path, "PDF file missing"))

    return report
