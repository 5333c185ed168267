"""Pydantic records for projects, notes, citations and tasks."""

from __future__ import annotations

import enum
from datetime import date, datetime, timezone
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _date_part(value):
    """Reduce a full ISO timestamp such as ``2024-05-01T22:00:00.000Z`` to its date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        try:
            return datetime.fromisoformat(value).date()
        except ValueError:
            return value  # left for the date validator to reject
    return value


# Older clients send and store due dates as timestamps
DueDate = Annotated[date | None, BeforeValidator(_date_part)]


class TaskStatus(enum.StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class Project(BaseModel):
    id: int
    name: str
    directory_path: str | None = None  # root folder holding notes/ and citations/; None on legacy rows
    created_at: datetime = Field(default_factory=utcnow)


class Note(BaseModel):
    id: int
    title: str
    file_path: str | None = None  # markdown file under <project>/notes/
    tags: list[str] = Field(default_factory=list)
    project_id: int
    created_at: datetime = Field(default_factory=utcnow)
    content: str = ""  # read from file_path, never persisted in the row


class Citation(BaseModel):
    id: int
    title: str
    url: str
    file_path: str | None = None  # downloaded PDF under <project>/citations/
    annotations: list = Field(default_factory=list)
    project_id: int
    created_at: datetime = Field(default_factory=utcnow)


class Task(BaseModel):
    id: int
    title: str
    due_date: DueDate = None
    status: TaskStatus = TaskStatus.PENDING
    project_id: int
    created_at: datetime = Field(default_factory=utcnow)


class ArxivPaper(BaseModel):
    id: str  # entry id as returned by arXiv, e.g. http://arxiv.org/abs/2103.12345v2
    arxiv_id: str  # bare id without version
    title: str
    authors: list[str] = Field(default_factory=list)
    summary: str = ""
    pdf_url: str = ""
    arxiv_url: str = ""
    published: str = ""
    categories: list[str] = Field(default_factory=list)


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Tags behave as a set: drop blanks and duplicates, keep first-seen order."""
    seen: list[str] = []
    for tag in tags or []:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen
