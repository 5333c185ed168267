"""Project CRUD endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from research_helper.api.deps import get_projects
from research_helper.api.schemas import ProjectCreate, ProjectOut
from research_helper.services.projects import ProjectStore

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=list[ProjectOut])
async def list_projects_endpoint(store: ProjectStore = Depends(get_projects)):
    return [p.model_dump() for p in await store.get_all_projects()]


@router.get("/{project_id}", response_model=ProjectOut)
async def get_project_endpoint(project_id: int, store: ProjectStore = Depends(get_projects)):
    return (await store.get_project(project_id)).model_dump()


@router.post("", response_model=ProjectOut, status_code=201)
async def create_project_endpoint(body: ProjectCreate, store: ProjectStore = Depends(get_projects)):
    return (await store.create_project(body.name)).model_dump()


@router.delete("/{project_id}", status_code=204)
async def delete_project_endpoint(project_id: int, store: ProjectStore = Depends(get_projects)):
    await store.delete_project(project_id)
