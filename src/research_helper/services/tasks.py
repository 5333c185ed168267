"""Task store: plain CRUD over the tasks table."""

from __future__ import annotations

from datetime import date

from research_helper.errors import NotFoundError, ValidationError
from research_helper.infrastructure.db import UNSET, Database
from research_helper.models import Task, TaskStatus
from research_helper.services.common import db_call, require_project

VALID_STATUSES = ", ".join(s.value for s in TaskStatus)


def parse_status(status: str | None) -> TaskStatus:
    try:
        return TaskStatus(status)
    except ValueError:
        raise ValidationError(f"Valid status is required ({VALID_STATUSES})") from None


class TaskStore:
    def __init__(self, db: Database):
        self.db = db

    async def create_task(
        self, title: str, project_id: int, due_date: date | None = None, status: str | None = None
    ) -> Task:
        if not title or not title.strip():
            raise ValidationError("Title and project_id are required")
        task_status = parse_status(status) if status is not None else TaskStatus.PENDING
        await require_project(self.db, project_id)
        return await db_call(self.db.add_task, title, project_id, due_date, task_status.value)

    async def get_all_tasks(self, project_id: int | None = None) -> list[Task]:
        return await db_call(self.db.list_tasks, project_id)

    async def get_task(self, task_id: int) -> Task:
        task = await db_call(self.db.get_task, task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    async def update_status(self, task_id: int, status: str | None) -> Task:
        task_status = parse_status(status)
        task = await db_call(self.db.update_task_status, task_id, task_status.value)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    async def update_task(self, task_id: int, changes: dict) -> Task:
        """Apply a partial update; keys absent from ``changes`` are left alone.

        ``due_date: None`` clears the due date, while ``None`` for any other
        key means "unchanged".
        """
        unknown = set(changes) - {"title", "due_date", "status", "project_id"}
        if unknown:
            raise ValidationError(f"Unknown task field(s): {', '.join(sorted(unknown))}")

        title = changes.get("title")
        if title is not None and not title.strip():
            raise ValidationError("Title cannot be empty")
        status = changes.get("status")
        if status is not None:
            status = parse_status(status).value
        project_id = changes.get("project_id")
        if project_id is not None:
            await require_project(self.db, project_id)

        task = await db_call(
            self.db.update_task,
            task_id,
            title=title,
            due_date=changes.get("due_date") if "due_date" in changes else UNSET,
            status=status,
            project_id=project_id,
        )
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    async def delete_task(self, task_id: int) -> None:
        if not await db_call(self.db.delete_task, task_id):
            raise NotFoundError("Task", task_id)
