# -*- coding: utf-8 -*-
"""Helpers for detached (fire-and-forget) asyncio tasks."""

from __future__ import annotations

import asyncio
from typing import Coroutine, Optional

from loguru import logger


def log_task_result(task: asyncio.Task) -> None:
    """Done-callback: log anything a detached task raised, so it is never lost."""
    if task.cancelled():
        logger.trace("Task {} cancelled.", task.get_name())
        return
    exc = task.exception()
    if exc is not None:
        logger.opt(exception=exc).error("Unhandled error in task {}.", task.get_name())


class TaskGroup:
    """Keeps strong references to detached tasks until they finish."""

    def __init__(self):
        self._tasks: set[asyncio.Task] = set()

    def spawn(self, coro: Coroutine, name: Optional[str] = None) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(log_task_result)
        return task

    def __len__(self):
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every outstanding task, including ones spawned meanwhile."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
