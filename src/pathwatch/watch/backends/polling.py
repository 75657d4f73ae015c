"""Polling backend: periodic stat() of a single path.

Works where native notifications do not (network mounts, WSL /mnt/*) and can
watch a path that does not exist yet. The first stat happens inside the task,
so a handle closed before the task ran never attaches.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Hashable, Mapping
from typing import NamedTuple

from pathwatch.core.logging import get_logger
from pathwatch.core.tasks import spawn_task
from pathwatch.watch.adapter import ErrorCallback, RawCallback, WatchBackend, WatchHandle
from pathwatch.watch.events import EventKind

logger = get_logger("watch.polling")

POLLING_EVENT_MAP: Mapping[Hashable, EventKind | None] = {
    "created": EventKind.CREATE,
    "modified": EventKind.CHANGE,
    "deleted": EventKind.DELETE,
}


class StatSignature(NamedTuple):
    """What a poll compares between two stat() calls."""

    mtime_ns: int
    size: int
    inode: int


def stat_signature(path: str) -> StatSignature | None:
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return None
    return StatSignature(mtime_ns=st.st_mtime_ns, size=st.st_size, inode=st.st_ino)


def classify_change(old: StatSignature | None, new: StatSignature | None) -> str | None:
    """Return the polling event code for a transition, or None if nothing changed."""
    if old is None and new is None:
        return None
    if old is None:
        return "created"
    if new is None:
        return "deleted"
    if old != new:
        return "modified"
    return None


class PollingBackend(WatchBackend):
    """Single-path watch by stat() polling."""

    name = "polling"

    def __init__(self, poll_interval_sec: float = 0.1) -> None:
        self.poll_interval_sec = poll_interval_sec

    @property
    def event_map(self) -> Mapping[Hashable, EventKind | None]:
        return POLLING_EVENT_MAP

    def watch(self, path: str, on_raw: RawCallback, on_error: ErrorCallback) -> WatchHandle:
        handle: WatchHandle

        async def run() -> None:
            try:
                previous = stat_signature(path)
                logger.debug("poll_attached", path=path, exists=previous is not None)
                while not handle.closed:
                    await asyncio.sleep(self.poll_interval_sec)
                    current = stat_signature(path)
                    code = classify_change(previous, current)
                    previous = current
                    if code is not None and not handle.closed:
                        on_raw(code, path)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if handle.closed:
                    return
                handle.close()
                on_error(e)

        task = spawn_task(run, name=f"polling:{path}")
        handle = WatchHandle(path, task.cancel)
        return handle
