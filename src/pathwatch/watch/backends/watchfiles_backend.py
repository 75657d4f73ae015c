"""watchfiles backend: notify (inotify/FSEvents/ReadDirectoryChangesW) via awatch.

The watch attaches inside an asyncio task, after ``watch()`` has returned.
``close()`` sets the stop event and cancels the task, so a handle closed
before the task ever ran never attaches.
"""

from __future__ import annotations

import asyncio
import contextlib
import errno
import os
from collections.abc import Hashable, Mapping

from watchfiles import Change, awatch

from pathwatch.core.logging import get_logger
from pathwatch.core.tasks import spawn_task
from pathwatch.watch.adapter import ErrorCallback, RawCallback, WatchBackend, WatchHandle
from pathwatch.watch.events import EventKind

logger = get_logger("watch.watchfiles")

WATCHFILES_EVENT_MAP: Mapping[Hashable, EventKind | None] = {
    Change.added: EventKind.CREATE,
    Change.modified: EventKind.CHANGE,
    Change.deleted: EventKind.DELETE,
}

# Within a path, a deletion replays before a re-creation in the same batch
_BATCH_ORDER = {Change.deleted: 0, Change.added: 1, Change.modified: 2}


def _batch_key(entry: tuple[Change, str]) -> tuple[str, int]:
    code, changed = entry
    return changed, _BATCH_ORDER[code]


class WatchfilesBackend(WatchBackend):
    """Non-recursive single-path watch using ``watchfiles.awatch``."""

    name = "watchfiles"

    def __init__(self, debounce_ms: int = 50, step_ms: int = 50) -> None:
        self.debounce_ms = debounce_ms
        self.step_ms = step_ms

    @property
    def event_map(self) -> Mapping[Hashable, EventKind | None]:
        return WATCHFILES_EVENT_MAP

    def watch(self, path: str, on_raw: RawCallback, on_error: ErrorCallback) -> WatchHandle:
        # notify cannot attach to a missing path; fail where the caller can see it
        if not os.path.exists(path):
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)

        stop_event = asyncio.Event()

        async def run() -> None:
            stream = awatch(
                path,
                watch_filter=None,
                debounce=self.debounce_ms,
                step=self.step_ms,
                stop_event=stop_event,
                recursive=False,
                ignore_permission_denied=True,
            )
            try:
                async with contextlib.aclosing(stream):
                    async for changes in stream:
                        for code, changed in sorted(changes, key=_batch_key):
                            if stop_event.is_set():
                                return
                            on_raw(code, changed)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if stop_event.is_set():
                    return
                stop_event.set()
                on_error(e)

        task = spawn_task(run, name=f"watchfiles:{path}")

        def release() -> None:
            stop_event.set()
            task.cancel()
            logger.debug("watch_released", path=path)

        return WatchHandle(path, release)
