"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from research_helper.infrastructure.arxiv import ArxivGateway
from research_helper.services.citations import CitationStore
from research_helper.services.notes import NoteStore
from research_helper.services.projects import ProjectStore
from research_helper.services.tasks import TaskStore


def get_projects(request: Request) -> ProjectStore:
    return request.app.state.projects


def get_notes(request: Request) -> NoteStore:
    return request.app.state.notes


def get_citations(request: Request) -> CitationStore:
    return request.app.state.citations


def get_tasks(request: Request) -> TaskStore:
    return request.app.state.tasks


def get_arxiv(request: Request) -> ArxivGateway:
    return request.app.state.arxiv
