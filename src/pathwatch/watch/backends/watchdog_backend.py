"""watchdog backend: an Observer thread per watch, events handed to the loop.

A file is watched through its containing directory (non-recursive) and the
directory's events are filtered down to the target. A directory target is
watched directly and every event is passed through with its reported path.
"""

from __future__ import annotations

import asyncio
import errno
import os
from collections.abc import Callable, Hashable, Mapping

from watchdog.events import (
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CLOSED_NO_WRITE,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    EVENT_TYPE_OPENED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from pathwatch.core.logging import get_logger
from pathwatch.watch.adapter import ErrorCallback, RawCallback, WatchBackend, WatchHandle
from pathwatch.watch.events import EventKind

logger = get_logger("watch.watchdog")

WATCHDOG_EVENT_MAP: Mapping[Hashable, EventKind | None] = {
    EVENT_TYPE_CREATED: EventKind.CREATE,
    EVENT_TYPE_MODIFIED: EventKind.CHANGE,
    EVENT_TYPE_MOVED: EventKind.RENAME,
    EVENT_TYPE_DELETED: EventKind.DELETE,
    # Access notifications say nothing about content or existence
    EVENT_TYPE_OPENED: None,
    EVENT_TYPE_CLOSED: None,
    EVENT_TYPE_CLOSED_NO_WRITE: None,
}


class _TargetEventHandler(FileSystemEventHandler):
    """Receives observer-thread events and forwards those that concern the target."""

    def __init__(self, target: str, whole_directory: bool, deliver: Callable[[str, str], None]):
        super().__init__()
        self.target = target
        self.whole_directory = whole_directory
        self.deliver = deliver

    def dispatch(self, event: FileSystemEvent) -> None:
        src_path = os.fsdecode(event.src_path)
        dest_path = os.fsdecode(event.dest_path) if event.dest_path else ""
        moved = event.event_type == EVENT_TYPE_MOVED

        if self.whole_directory:
            self.deliver(event.event_type, dest_path if moved else src_path)
            return

        if src_path == self.target:
            self.deliver(event.event_type, dest_path if moved else src_path)
        elif moved and dest_path == self.target:
            # Something was renamed onto the target: from its point of view it appeared
            self.deliver(EVENT_TYPE_CREATED, self.target)


class WatchdogBackend(WatchBackend):
    """Single-path watch using a dedicated ``watchdog`` Observer."""

    name = "watchdog"

    def __init__(self, join_timeout_sec: float = 2.0) -> None:
        self.join_timeout_sec = join_timeout_sec

    @property
    def event_map(self) -> Mapping[Hashable, EventKind | None]:
        return WATCHDOG_EVENT_MAP

    def watch(self, path: str, on_raw: RawCallback, on_error: ErrorCallback) -> WatchHandle:
        loop = asyncio.get_running_loop()
        target = os.path.abspath(path)
        whole_directory = os.path.isdir(target)
        watch_dir = target if whole_directory else os.path.dirname(target)
        if not os.path.isdir(watch_dir):
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), watch_dir)

        observer = Observer()

        def release() -> None:
            observer.stop()
            if observer.is_alive():
                # A DELETE closes the handle from a loop callback; join elsewhere
                if loop.is_closed():
                    observer.join(timeout=self.join_timeout_sec)
                else:
                    loop.run_in_executor(None, observer.join, self.join_timeout_sec)
            logger.debug("watch_released", path=target)

        handle = WatchHandle(path, release)

        def dispatch(code: str, reported_path: str) -> None:
            # Runs on the loop thread
            if handle.closed:
                return
            try:
                on_raw(code, reported_path)
            except Exception as e:
                handle.close()
                on_error(e)

        def deliver(code: str, reported_path: str) -> None:
            # Runs on the observer thread
            if handle.closed:
                return
            try:
                loop.call_soon_threadsafe(dispatch, code, reported_path)
            except RuntimeError:
                logger.debug("event_dropped_loop_closed", path=reported_path, code=code)

        observer.schedule(
            _TargetEventHandler(target, whole_directory, deliver),
            watch_dir,
            recursive=False,
        )
        observer.daemon = True
        observer.start()
        return handle
