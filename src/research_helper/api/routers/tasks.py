"""Task CRUD + status endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from research_helper.api.deps import get_tasks
from research_helper.api.schemas import TaskCreate, TaskOut, TaskStatusUpdate, TaskUpdate
from research_helper.services.tasks import TaskStore

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=list[TaskOut])
async def list_tasks(project_id: int | None = None, store: TaskStore = Depends(get_tasks)):
    return [t.model_dump() for t in await store.get_all_tasks(project_id)]


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(task_id: int, store: TaskStore = Depends(get_tasks)):
    return (await store.get_task(task_id)).model_dump()


@router.post("", response_model=TaskOut, status_code=201)
async def create_task(body: TaskCreate, store: TaskStore = Depends(get_tasks)):
    task = await store.create_task(body.title, body.project_id, due_date=body.due_date, status=body.status)
    return task.model_dump()


@router.patch("/{task_id}/status", response_model=TaskOut)
async def update_task_status(task_id: int, body: TaskStatusUpdate, store: TaskStore = Depends(get_tasks)):
    return (await store.update_status(task_id, body.status)).model_dump()


@router.put("/{task_id}", response_model=TaskOut)
async def update_task(task_id: int, body: TaskUpdate, store: TaskStore = Depends(get_tasks)):
    # Only fields present in the request body are changed
    return (await store.update_task(task_id, body.model_dump(exclude_unset=True))).model_dump()


@router.delete("/{task_id}", status_code=204)
async def delete_task(task_id: int, store: TaskStore = Depends(get_tasks)):
    await store.delete_task(task_id)
