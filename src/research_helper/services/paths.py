"""Slugs and collision-free locations inside a project's directory tree."""

from __future__ import annotations

import enum
import re
from datetime import date
from pathlib import Path

EMPTY_SLUG_BASE = "untitled"

_UNSAFE = re.compile(r"[^a-z0-9]")
_UNDERSCORE_RUN = re.compile(r"_+")


class CollisionPolicy(enum.StrEnum):
    NUMERIC = "numeric"  # slug, slug_1, slug_2, ...
    DATE = "date"  # slug, then slug_YYYY-MM-DD once


def sanitize(name: str, collapse: bool = False) -> str:
    """Lowercase ``name`` and replace every character outside [a-z0-9] with ``_``.

    With ``collapse`` runs of underscores become a single one. Empty input
    gives an empty slug; callers that need a non-empty base go through
    :func:`allocate`, which substitutes ``untitled``.
    """
    slug = _UNSAFE.sub("_", name.lower())
    if collapse:
        slug = _UNDERSCORE_RUN.sub("_", slug)
    return slug


def allocate(
    parent: Path,
    slug: str,
    suffix: str = "",
    policy: CollisionPolicy = CollisionPolicy.NUMERIC,
    today: date | None = None,
) -> Path:
    """Return a path under ``parent`` for ``slug`` + ``suffix`` that does not exist yet.

    This is an existence check, not a reservation: two callers racing for the
    same slug can both receive the same path, and the loser fails when it
    creates the file or directory.

    With ``CollisionPolicy.DATE`` the date suffix is tried once and returned
    even if it exists too, so two same-day collisions on one title still
    collide.
    """
    base = slug or EMPTY_SLUG_BASE
    candidate = parent / f"{base}{suffix}"
    if not candidate.exists():
        return candidate

    if policy is CollisionPolicy.DATE:
        stamp = (today or date.today()).isoformat()
        return parent / f"{base}_{stamp}{suffix}"

    counter = 1
    while True:
        candidate = parent / f"{base}_{counter}{suffix}"
        if not candidate.exists():
            return candidate
        counter += 1
