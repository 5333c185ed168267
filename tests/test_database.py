"""Tests for the SQLite record store.

Focus on catching issues with:
- JSON encoding of tags and annotations
- Typed records failing loudly on malformed rows
- Upgrading database files written before the path columns existed
"""

import sqlite3
from datetime import date

import pytest

from research_helper.errors import StorageError
from research_helper.infrastructure.db import Database
from research_helper.models import TaskStatus


class TestProjects:
    def test_add_and_get_project(self, db):
        project = db.add_project("My Thesis", "/data/projects/my_thesis")

        fetched = db.get_project(project.id)
        assert fetched is not None
        assert fetched.name == "My Thesis"
        assert fetched.directory_path == "/data/projects/my_thesis"
        assert fetched.created_at.tzinfo is not None

    def test_missing_project_is_none(self, db):
        assert db.get_project(42) is None

    def test_list_projects_newest_first(self, db):
        first = db.add_project("First", "/a")
        second = db.add_project("Second", "/b")
        assert [p.id for p in db.list_projects()] == [second.id, first.id]

    def test_delete_project(self, db):
        project = db.add_project("Gone", "/gone")
        assert db.delete_project(project.id) is True
        assert db.delete_project(project.id) is False


class TestJSONColumns:
    def test_note_tags_round_trip(self, db):
        project = db.add_project("P", "/p")
        note = db.add_note("Idea", "/p/notes/idea.md", ["ml", "reading"], project.id)

        assert db.get_note(note.id).tags == ["ml", "reading"]

    def test_citation_annotations_default_to_empty_list(self, db):
        project = db.add_project("P", "/p")
        citation = db.add_citation("Paper", "http://x/p.pdf", "/p/citations/paper.pdf", project.id)

        assert citation.annotations == []
        assert db.get_citation(citation.id).annotations == []

    def test_update_citation_annotations(self, db):
        project = db.add_project("P", "/p")
        citation = db.add_citation("Paper", "http://x/p.pdf", "/p/citations/paper.pdf", project.id)

        updated = db.update_citation(citation.id, annotations=[{"page": 3, "text": "key result"}])
        assert updated.title == "Paper"
        assert db.get_citation(citation.id).annotations == [{"page": 3, "text": "key result"}]

    def test_list_filters_by_project(self, db):
        a = db.add_project("A", "/a")
        b = db.add_project("B", "/b")
        db.add_note("In A", "/a/notes/in_a.md", [], a.id)
        db.add_note("In B", "/b/notes/in_b.md", [], b.id)

        assert [n.title for n in db.list_notes(a.id)] == ["In A"]
        assert len(db.list_notes()) == 2


class TestTasks:
    def test_tasks_sorted_by_due_date_nulls_last(self, db):
        project = db.add_project("P", "/p")
        db.add_task("No date", project.id)
        db.add_task("Later", project.id, date(2025, 6, 1))
        db.add_task("Sooner", project.id, date(2025, 1, 15))

        assert [t.title for t in db.list_tasks()] == ["Sooner", "Later", "No date"]

    def test_update_task_keeps_due_date_unless_given(self, db):
        project = db.add_project("P", "/p")
        task = db.add_task("Write intro", project.id, date(2025, 2, 1))

        renamed = db.update_task(task.id, title="Write introduction")
        assert renamed.due_date == date(2025, 2, 1)

        cleared = db.update_task(task.id, due_date=None)
        assert cleared.due_date is None
        assert cleared.title == "Write introduction"

    def test_update_task_status(self, db):
        project = db.add_project("P", "/p")
        task = db.add_task("Read", project.id)

        assert db.update_task_status(task.id, "completed").status is TaskStatus.COMPLETED
        assert db.update_task_status(999, "completed") is None


class TestMalformedRows:
    def test_bad_tags_json_raises_storage_error(self, db):
        project = db.add_project("P", "/p")
        note = db.add_note("Idea", "/p/notes/idea.md", [], project.id)
        db.conn.execute("UPDATE notes SET tags = ? WHERE id = ?", ("not json", note.id))

        with pytest.raises(StorageError):
            db.get_note(note.id)

    def test_unknown_task_status_raises_storage_error(self, db):
        project = db.add_project("P", "/p")
        task = db.add_task("Read", project.id)
        db.conn.execute("UPDATE tasks SET status = 'archived' WHERE id = ?", (task.id,))

        with pytest.raises(StorageError, match="Malformed task record"):
            db.get_task(task.id)


def test_legacy_database_gains_path_columns(tmp_path):
    """A file created before directory_path/file_path existed opens and upgrades."""
    db_path = tmp_path / "legacy.db"
    conn = sqlite3.connect(db_path)
    conn.executescript("""
        CREATE TABLE projects (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL, created_at TEXT NOT NULL);
        CREATE TABLE notes (
            id INTEGER PRIMARY KEY AUTOINCREMENT, title TEXT NOT NULL, tags TEXT NOT NULL DEFAULT '[]',
            project_id INTEGER NOT NULL, created_at TEXT NOT NULL
        );
        INSERT INTO projects (name, created_at) VALUES ('Old Project', '2023-01-01T00:00:00+00:00');
    """)
    conn.commit()
    conn.close()

    db = Database(db_path)
    try:
        project = db.list_projects()[0]
        assert project.name == "Old Project"
        assert project.directory_path is None
        db.update_project_directory(project.id, "/new/old_project")
        assert db.get_project(project.id).directory_path == "/new/old_project"
    finally:
        db.close()


def test_timestamp_due_date_reads_as_date(db):
    """Rows written by older clients hold full ISO timestamps."""
    project = db.add_project("P", "/p")
    task = db.add_task("Legacy", project.id)
    db.conn.execute("UPDATE tasks SET due_date = ? WHERE id = ?", ("2024-05-01T22:00:00.000Z", task.id))

    assert db.get_task(task.id).due_date == date(2024, 5, 1)
    assert [t.due_date for t in db.list_tasks()] == [date(2024, 5, 1)]
