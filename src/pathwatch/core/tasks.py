"""Background tasks whose failures reach the loop exception handler."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

from pathwatch.core.logging import get_logger

logger = get_logger("tasks")


def _escalate_failure(task: asyncio.Task[None]) -> None:
    """Hand an exception that escaped a task to the loop's exception handler."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is None:
        return
    logger.error("task_failed", task=task.get_name(), error=str(exc))
    task.get_loop().call_exception_handler(
        {
            "message": f"Unhandled failure in {task.get_name()}",
            "exception": exc,
            "task": task,
        }
    )


def spawn_task(
    factory: Callable[[], Coroutine[Any, Any, None]], name: str
) -> asyncio.Task[None]:
    """Schedule a coroutine on the running loop.

    Raises RuntimeError when no loop is running; backends treat that as a
    failure to establish the watch.
    """
    loop = asyncio.get_running_loop()
    task = loop.create_task(factory(), name=name)
    task.add_done_callback(_escalate_failure)
    return task
