"""Helpers shared by the stores: database calls, project lookup, best-effort file ops."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from research_helper.errors import NotFoundError, StorageError
from research_helper.infrastructure.async_utils import run_sync
from research_helper.infrastructure.db import Database
from research_helper.models import Project

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def db_call(func: Callable[..., T], *args, **kwargs) -> T:
    """Run a Database method off the loop; sqlite failures become StorageError."""
    try:
        return await run_sync(func, *args, **kwargs)
    except sqlite3.Error as e:
        logger.error(f"Database error in {func.__name__}: {e}")
        raise StorageError(f"Database error: {e}") from e


async def require_project(db: Database, project_id: int) -> Project:
    project = await db_call(db.get_project, project_id)
    if project is None:
        raise NotFoundError("Project", project_id)
    return project


def project_root(project: Project) -> Path:
    if not project.directory_path:
        raise StorageError(f"Project {project.id} has no directory; run `research-helper migrate`")
    return Path(project.directory_path)


def remove_file_best_effort(path: str | Path | None, what: str) -> bool:
    """Delete ``path``; a failure is logged and reported, never raised."""
    if not path:
        return False
    try:
        Path(path).unlink(missing_ok=True)
        return True
    except OSError as e:
        logger.warning(f"Could not delete {what} {path}: {e}")
        return False
