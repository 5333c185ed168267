"""Request/response models for the API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from research_helper.models import DueDate, TaskStatus


# --- Projects ---

class ProjectCreate(BaseModel):
    name: str


class ProjectOut(BaseModel):
    id: int
    name: str
    directory_path: str | None
    created_at: datetime


# --- Notes ---

class NoteCreate(BaseModel):
    title: str
    content: str = ""
    tags: list[str] = Field(default_factory=list)
    project_id: int


class NoteUpdate(BaseModel):
    title: str | None = None
    content: str | None = None
    tags: list[str] | None = None
    project_id: int | None = None


class NoteOut(BaseModel):
    id: int
    title: str
    content: str
    file_path: str | None
    tags: list[str]
    project_id: int
    created_at: datetime


# --- Citations ---

class CitationCreate(BaseModel):
    title: str
    url: str
    project_id: int


class CitationUpdate(BaseModel):
    title: str | None = None
    url: str | None = None
    annotations: list | None = None


class CitationOut(BaseModel):
    id: int
    title: str
    url: str
    file_path: str | None
    annotations: list
    project_id: int
    created_at: datetime


class ArxivImport(BaseModel):
    arxiv_id: str
    project_id: int


class ArxivPaperOut(BaseModel):
    id: str
    arxiv_id: str
    title: str
    authors: list[str]
    summary: str
    pdf_url: str
    arxiv_url: str
    published: str
    categories: list[str]


# --- Tasks ---

class TaskCreate(BaseModel):
    title: str
    due_date: DueDate = None
    status: str | None = None
    project_id: int


class TaskUpdate(BaseModel):
    title: str | None = None
    due_date: DueDate = None
    status: str | None = None
    project_id: int | None = None


class TaskStatusUpdate(BaseModel):
    status: str | None = None


class TaskOut(BaseModel):
    id: int
    title: str
    due_date: DueDate
    status: TaskStatus
    project_id: int
    created_at: datetime
