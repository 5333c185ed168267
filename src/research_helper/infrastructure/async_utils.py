"""Run blocking sqlite and filesystem calls without stalling the event loop."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")


async def run_sync(func: Callable[..., T], *args, **kwargs) -> T:
    """Execute ``func`` in a worker thread and suspend the caller until it returns."""
    return await asyncio.to_thread(func, *args, **kwargs)
