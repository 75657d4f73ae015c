"""Tests for watch/backends/watchdog_backend.py."""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path

import pytest
from watchdog.events import (
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    EVENT_TYPE_OPENED,
    FileClosedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from pathwatch.watch.adapter import WatcherAdapter
from pathwatch.watch.backends.watchdog_backend import (
    WATCHDOG_EVENT_MAP,
    WatchdogBackend,
    _TargetEventHandler,
)
from pathwatch.watch.events import EventKind

EVENT_TIMEOUT = 5.0


class TestWatchdogEventMap:
    @pytest.mark.parametrize(
        ("code", "kind"),
        [
            (EVENT_TYPE_CREATED, EventKind.CREATE),
            (EVENT_TYPE_MODIFIED, EventKind.CHANGE),
            (EVENT_TYPE_MOVED, EventKind.RENAME),
            (EVENT_TYPE_DELETED, EventKind.DELETE),
            (EVENT_TYPE_OPENED, None),
            (EVENT_TYPE_CLOSED, None),
        ],
    )
    def test_mapping(self, code: str, kind: EventKind | None) -> None:
        assert WATCHDOG_EVENT_MAP[code] is kind


class TestTargetEventHandler:
    """Filtering of directory events down to a single target."""

    @pytest.fixture
    def delivered(self) -> list[tuple[str, str]]:
        return []

    @pytest.fixture
    def handler(self, delivered: list[tuple[str, str]]) -> _TargetEventHandler:
        return _TargetEventHandler(
            "/w/a.txt", False, lambda code, path: delivered.append((code, path))
        )

    def test_target_event_delivered(
        self, handler: _TargetEventHandler, delivered: list[tuple[str, str]]
    ) -> None:
        handler.dispatch(FileModifiedEvent("/w/a.txt"))

        assert delivered == [(EVENT_TYPE_MODIFIED, "/w/a.txt")]

    def test_sibling_event_filtered(
        self, handler: _TargetEventHandler, delivered: list[tuple[str, str]]
    ) -> None:
        handler.dispatch(FileModifiedEvent("/w/b.txt"))
        handler.dispatch(FileDeletedEvent("/w/b.txt"))

        assert delivered == []

    def test_move_reported_at_destination(
        self, handler: _TargetEventHandler, delivered: list[tuple[str, str]]
    ) -> None:
        handler.dispatch(FileMovedEvent("/w/a.txt", "/w/renamed.txt"))

        assert delivered == [(EVENT_TYPE_MOVED, "/w/renamed.txt")]

    def test_move_onto_target_is_create(
        self, handler: _TargetEventHandler, delivered: list[tuple[str, str]]
    ) -> None:
        """An atomic save (write temp, rename over) looks like creation of the target."""
        handler.dispatch(FileMovedEvent("/w/.a.txt.tmp", "/w/a.txt"))

        assert delivered == [(EVENT_TYPE_CREATED, "/w/a.txt")]

    def test_access_events_passed_for_adapter_to_ignore(
        self, handler: _TargetEventHandler, delivered: list[tuple[str, str]]
    ) -> None:
        handler.dispatch(FileClosedEvent("/w/a.txt"))

        assert delivered == [(EVENT_TYPE_CLOSED, "/w/a.txt")]

    def test_whole_directory_passes_children(self, delivered: list[tuple[str, str]]) -> None:
        handler = _TargetEventHandler(
            "/w", True, lambda code, path: delivered.append((code, path))
        )

        handler.dispatch(FileCreatedEvent("/w/new.txt"))

        assert delivered == [(EVENT_TYPE_CREATED, "/w/new.txt")]


class TestWatchdogBackend:
    """Behavior against a real Observer."""

    @pytest.fixture
    def adapter(self) -> WatcherAdapter:
        return WatcherAdapter(WatchdogBackend(join_timeout_sec=2.0))

    @pytest.mark.asyncio
    async def test_missing_directory_refused(self, adapter: WatcherAdapter, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            adapter.watch(str(tmp_path / "nope" / "a.txt"), lambda kind, p: None)

    @pytest.mark.asyncio
    async def test_missing_file_in_existing_directory_accepted(
        self, adapter: WatcherAdapter, tmp_path: Path
    ) -> None:
        handle = adapter.watch(str(tmp_path / "later.txt"), lambda kind, p: None)
        handle.close()

        assert handle.closed

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_reports_modification_on_loop(
        self, adapter: WatcherAdapter, tmp_path: Path
    ) -> None:
        path = tmp_path / "a.txt"
        path.write_text("one")
        queue: asyncio.Queue[tuple[EventKind, str]] = asyncio.Queue()

        handle = adapter.watch(str(path), lambda kind, p: queue.put_nowait((kind, p)))
        try:
            await asyncio.sleep(0.2)
            path.write_text("two")
            kind, reported = await asyncio.wait_for(queue.get(), EVENT_TIMEOUT)
        finally:
            handle.close()

        assert kind is EventKind.CHANGE
        assert reported == str(path)

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_reports_rename_at_new_path(
        self, adapter: WatcherAdapter, tmp_path: Path
    ) -> None:
        path = tmp_path / "a.txt"
        path.write_text("one")
        target = tmp_path / "b.txt"
        queue: asyncio.Queue[tuple[EventKind, str]] = asyncio.Queue()

        handle = adapter.watch(str(path), lambda kind, p: queue.put_nowait((kind, p)))
        try:
            await asyncio.sleep(0.2)
            path.rename(target)
            kind, reported = await asyncio.wait_for(queue.get(), EVENT_TIMEOUT)
        finally:
            handle.close()

        assert kind is EventKind.RENAME
        assert reported == str(target)


class RecordingObserver:
    """Stands in for an Observer whose thread is slow to wind down."""

    def __init__(self) -> None:
        self.daemon = False
        self.stopped = False
        self.join_threads: list[int] = []

    def schedule(self, handler: object, path: str, recursive: bool = False) -> None:
        self.path = path

    def start(self) -> None:
        pass

    def stop(self) -> None:
        self.stopped = True

    def is_alive(self) -> bool:
        return True

    def join(self, timeout: float | None = None) -> None:
        self.join_threads.append(threading.get_ident())


class TestWatchdogRelease:
    """Closing a handle stops its Observer without blocking the loop thread."""

    @pytest.mark.asyncio
    async def test_join_runs_off_loop_thread(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        observers: list[RecordingObserver] = []

        def make_observer() -> RecordingObserver:
            observers.append(RecordingObserver())
            return observers[-1]

        monkeypatch.setattr("pathwatch.watch.backends.watchdog_backend.Observer", make_observer)
        adapter = WatcherAdapter(WatchdogBackend())

        handle = adapter.watch(str(tmp_path / "a.txt"), lambda kind, p: None)
        handle.close()
        (observer,) = observers
        for _ in range(100):
            if observer.join_threads:
                break
            await asyncio.sleep(0.01)

        assert observer.stopped
        assert observer.daemon
        assert len(observer.join_threads) == 1
        assert observer.join_threads[0] != threading.get_ident()
