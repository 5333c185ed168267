"""SQLite record store for projects, notes, citations and tasks."""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from datetime import date, datetime, timezone
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from research_helper.errors import StorageError
from research_helper.models import Citation, Note, Project, Task

logger = logging.getLogger(__name__)

# Sentinel for distinguishing "not provided" from None in update_task
UNSET = object()

# Columns added after the first schema revision; legacy files are upgraded on open.
_LEGACY_COLUMNS = {
    "projects": {"directory_path": "TEXT"},
    "notes": {"file_path": "TEXT"},
}


class Database:
    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._init_schema()

    def _init_schema(self):
        with self._lock:
            self.conn.executescript("""
                CREATE TABLE IF NOT EXISTS projects (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    directory_path TEXT,
                    created_at TEXT NOT NULL
                );
                CREATE TABLE IF NOT EXISTS notes (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    file_path TEXT,
                    tags TEXT NOT NULL DEFAULT '[]',
                    project_id INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (project_id) REFERENCES projects(id)
                );
                CREATE TABLE IF NOT EXISTS citations (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    url TEXT NOT NULL,
                    file_path TEXT,
                    annotations TEXT,
                    project_id INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (project_id) REFERENCES projects(id)
                );
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    due_date TEXT,
                    status TEXT NOT NULL DEFAULT 'pending',
                    project_id INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (project_id) REFERENCES projects(id)
                );
            """)
            for table, columns in _LEGACY_COLUMNS.items():
                existing = {r["name"] for r in self.conn.execute(f"PRAGMA table_info({table})")}
                for column, decl in columns.items():
                    if column not in existing:
                        logger.info(f"Upgrading {table}: adding column {column}")
                        self.conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {decl}")
            self.conn.commit()

    def close(self):
        with self._lock:
            self.conn.close()

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        with self._lock:
            cur = self.conn.execute(sql, params)
            self.conn.commit()
            return cur

    def _fetchone(self, sql: str, params: tuple = ()) -> sqlite3.Row | None:
        with self._lock:
            return self.conn.execute(sql, params).fetchone()

    def _fetchall(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._lock:
            return self.conn.execute(sql, params).fetchall()

    # --- Projects ---

    def add_project(self, name: str, directory_path: str) -> Project:
        now = _now()
        cur = self._execute(
            "INSERT INTO projects (name, directory_path, created_at) VALUES (?, ?, ?)",
            (name, directory_path, now),
        )
        return _to_record(Project, id=cur.lastrowid, name=name, directory_path=directory_path, created_at=now)

    def get_project(self, project_id: int) -> Project | None:
        row = self._fetchone("SELECT * FROM projects WHERE id = ?", (project_id,))
        return _row_to_project(row) if row else None

    def list_projects(self) -> list[Project]:
        rows = self._fetchall("SELECT * FROM projects ORDER BY created_at DESC, id DESC")
        return [_row_to_project(r) for r in rows]

    def update_project_directory(self, project_id: int, directory_path: str) -> None:
        self._execute("UPDATE projects SET directory_path = ? WHERE id = ?", (directory_path, project_id))

    def delete_project(self, project_id: int) -> bool:
        cur = self._execute("DELETE FROM projects WHERE id = ?", (project_id,))
        return cur.rowcount > 0

    # --- Notes ---

    def add_note(self, title: str, file_path: str, tags: list[str], project_id: int) -> Note:
        now = _now()
        cur = self._execute(
            "INSERT INTO notes (title, file_path, tags, project_id, created_at) VALUES (?, ?, ?, ?, ?)",
            (title, file_path, json.dumps(tags), project_id, now),
        )
        return _to_record(
            Note, id=cur.lastrowid, title=title, file_path=file_path, tags=tags, project_id=project_id, created_at=now
        )

    def get_note(self, note_id: int) -> Note | None:
        row = self._fetchone("SELECT * FROM notes WHERE id = ?", (note_id,))
        return _row_to_note(row) if row else None

    def list_notes(self, project_id: int | None = None) -> list[Note]:
        if project_id is None:
            rows = self._fetchall("SELECT * FROM notes ORDER BY created_at DESC, id DESC")
        else:
            rows = self._fetchall(
                "SELECT * FROM notes WHERE project_id = ? ORDER BY created_at DESC, id DESC", (project_id,)
            )
        return [_row_to_note(r) for r in rows]

    def update_note(self, note_id: int, title: str, file_path: str, tags: list[str], project_id: int) -> None:
        self._execute(
            "UPDATE notes SET title = ?, file_path = ?, tags = ?, project_id = ? WHERE id = ?",
            (title, file_path, json.dumps(tags), project_id, note_id),
        )

    def update_note_path(self, note_id: int, file_path: str) -> None:
        self._execute("UPDATE notes SET file_path = ? WHERE id = ?", (file_path, note_id))

    def delete_note(self, note_id: int) -> bool:
        cur = self._execute("DELETE FROM notes WHERE id = ?", (note_id,))
        return cur.rowcount > 0

    # --- Citations ---

    def add_citation(self, title: str, url: str, file_path: str, project_id: int) -> Citation:
        now = _now()
        cur = self._execute(
            "INSERT INTO citations (title, url, file_path, annotations, project_id, created_at) "
            "VALUES (?, ?, ?, NULL, ?, ?)",
            (title, url, file_path, project_id, now),
        )
        return _to_record(
            Citation, id=cur.lastrowid, title=title, url=url, file_path=file_path, annotations=[],
            project_id=project_id, created_at=now,
        )

    def get_citation(self, citation_id: int) -> Citation | None:
        row = self._fetchone("SELECT * FROM citations WHERE id = ?", (citation_id,))
        return _row_to_citation(row) if row else None

    def list_citations(self, project_id: int | None = None) -> list[Citation]:
        if project_id is None:
            rows = self._fetchall("SELECT * FROM citations ORDER BY created_at DESC, id DESC")
        else:
            rows = self._fetchall(
                "SELECT * FROM citations WHERE project_id = ? ORDER BY created_at DESC, id DESC", (project_id,)
            )
        return [_row_to_citation(r) for r in rows]

    def update_citation(
        self, citation_id: int, title: str | None = None, url: str | None = None, annotations: list | None = None
    ) -> Citation | None:
        with self._lock:
            row = self.conn.execute("SELECT * FROM citations WHERE id = ?", (citation_id,)).fetchone()
            if not row:
                return None
            current = _row_to_citation(row)
            new_title = title if title is not None else current.title
            new_url = url if url is not None else current.url
            new_annotations = annotations if annotations is not None else current.annotations
            self.conn.execute(
                "UPDATE citations SET title = ?, url = ?, annotations = ? WHERE id = ?",
                (new_title, new_url, json.dumps(new_annotations), citation_id),
            )
            self.conn.commit()
        return current.model_copy(update={"title": new_title, "url": new_url, "annotations": new_annotations})

    def update_citation_path(self, citation_id: int, file_path: str) -> None:
        self._execute("UPDATE citations SET file_path = ? WHERE id = ?", (file_path, citation_id))

    def delete_citation(self, citation_id: int) -> bool:
        cur = self._execute("DELETE FROM citations WHERE id = ?", (citation_id,))
        return cur.rowcount > 0

    # --- Tasks ---

    def add_task(self, title: str, project_id: int, due_date: date | None = None, status: str = "pending") -> Task:
        now = _now()
        due = due_date.isoformat() if due_date else None
        cur = self._execute(
            "INSERT INTO tasks (title, due_date, status, project_id, created_at) VALUES (?, ?, ?, ?, ?)",
            (title, due, status, project_id, now),
        )
        return _to_record(
            Task, id=cur.lastrowid, title=title, due_date=due, status=status, project_id=project_id, created_at=now
        )

    def get_task(self, task_id: int) -> Task | None:
        row = self._fetchone("SELECT * FROM tasks WHERE id = ?", (task_id,))
        return _row_to_task(row) if row else None

    def list_tasks(self, project_id: int | None = None) -> list[Task]:
        order = "ORDER BY due_date IS NULL, due_date ASC, created_at DESC, id DESC"
        if project_id is None:
            rows = self._fetchall(f"SELECT * FROM tasks {order}")
        else:
            rows = self._fetchall(f"SELECT * FROM tasks WHERE project_id = ? {order}", (project_id,))
        return [_row_to_task(r) for r in rows]

    def update_task(
        self,
        task_id: int,
        title: str | None = None,
        due_date: date | None = UNSET,
        status: str | None = None,
        project_id: int | None = None,
    ) -> Task | None:
        with self._lock:
            row = self.conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
            if not row:
                return None
            new_title = title if title is not None else row["title"]
            if due_date is UNSET:
                new_due = row["due_date"]
            else:
                new_due = due_date.isoformat() if due_date else None
            new_status = status if status is not None else row["status"]
            new_project = project_id if project_id is not None else row["project_id"]
            self.conn.execute(
                "UPDATE tasks SET title = ?, due_date = ?, status = ?, project_id = ? WHERE id = ?",
                (new_title, new_due, new_status, new_project, task_id),
            )
            self.conn.commit()
        return _to_record(
            Task, id=task_id, title=new_title, due_date=new_due, status=new_status, project_id=new_project,
            created_at=row["created_at"],
        )

    def update_task_status(self, task_id: int, status: str) -> Task | None:
        cur = self._execute("UPDATE tasks SET status = ? WHERE id = ?", (status, task_id))
        if cur.rowcount == 0:
            return None
        return self.get_task(task_id)

    def delete_task(self, task_id: int) -> bool:
        cur = self._execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        return cur.rowcount > 0


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_record(model, **fields):
    """Build a typed record, turning a shape mismatch into a StorageError."""
    try:
        return model(**fields)
    except PydanticValidationError as e:
        raise StorageError(f"Malformed {model.__name__.lower()} record: {e.error_count()} invalid field(s)") from e


def _load_json_list(raw: str | None, column: str) -> list:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageError(f"Column {column} does not hold valid JSON") from e
    if not isinstance(value, list):
        raise StorageError(f"Column {column} does not hold a JSON array")
    return value


def _row_to_project(r: sqlite3.Row) -> Project:
    return _to_record(
        Project, id=r["id"], name=r["name"], directory_path=r["directory_path"], created_at=r["created_at"]
    )


def _row_to_note(r: sqlite3.Row) -> Note:
    return _to_record(
        Note,
        id=r["id"],
        title=r["title"],
        file_path=r["file_path"],
        tags=_load_json_list(r["tags"], "notes.tags"),
        project_id=r["project_id"],
        created_at=r["created_at"],
    )


def _row_to_citation(r: sqlite3.Row) -> Citation:
    return _to_record(
        Citation,
        id=r["id"],
        title=r["title"],
        url=r["url"],
        file_path=r["file_path"],
        annotations=_load_json_list(r["annotations"], "citations.annotations"),
        project_id=r["project_id"],
        created_at=r["created_at"],
    )


def _row_to_task(r: sqlite3.Row) -> Task:
    return _to_record(
        Task,
        id=r["id"],
        title=r["title"],
        due_date=r["due_date"],
        status=r["status"],
        project_id=r["project_id"],
        created_at=r["created_at"],
    )
