"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages, and
provides an in-memory watch backend so entity behavior can be driven
deterministically.
"""

import sys
from collections.abc import Callable, Hashable, Mapping
from pathlib import Path
from typing import Any

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local pathwatch package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from pathwatch.config.models import FileConfig  # noqa: E402
from pathwatch.file import File  # noqa: E402
from pathwatch.watch.adapter import (  # noqa: E402
    ErrorCallback,
    RawCallback,
    WatchBackend,
    WatcherAdapter,
    WatchHandle,
)
from pathwatch.watch.events import EventKind  # noqa: E402

FAKE_EVENT_MAP: Mapping[Hashable, EventKind | None] = {
    "add": EventKind.CREATE,
    "mod": EventKind.CHANGE,
    "mv": EventKind.RENAME,
    "rm": EventKind.DELETE,
    "touch": None,
}


class FakeWatch:
    """One watch issued by FakeBackend."""

    def __init__(self, path: str, on_raw: RawCallback, on_error: ErrorCallback) -> None:
        self.path = path
        self.on_raw = on_raw
        self.on_error = on_error
        self.handle = WatchHandle(path, self._release)
        self.release_count = 0

    def _release(self) -> None:
        self.release_count += 1


class FakeBackend(WatchBackend):
    """Backend whose events are injected by the test, delivered synchronously."""

    name = "fake"

    def __init__(self) -> None:
        self.watches: list[FakeWatch] = []
        self.failures_remaining = 0

    @property
    def event_map(self) -> Mapping[Hashable, EventKind | None]:
        return FAKE_EVENT_MAP

    def watch(self, path: str, on_raw: RawCallback, on_error: ErrorCallback) -> WatchHandle:
        if self.failures_remaining > 0:
            self.failures_remaining -= 1
            raise OSError(28, "inotify watch limit reached", path)
        watch = FakeWatch(path, on_raw, on_error)
        self.watches.append(watch)
        return watch.handle

    @property
    def open_watches(self) -> list[FakeWatch]:
        return [w for w in self.watches if not w.handle.closed]

    def emit(self, code: Any, path: str | None = None) -> None:
        """Deliver a native event to every open watch."""
        for watch in self.open_watches:
            watch.on_raw(code, path if path is not None else watch.path)

    def fail(self, error: BaseException) -> None:
        """Report a backend failure to every open watch."""
        for watch in self.open_watches:
            watch.on_error(error)


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def adapter(fake_backend: FakeBackend) -> WatcherAdapter:
    return WatcherAdapter(fake_backend)


@pytest.fixture
def file_config() -> FileConfig:
    """Short resurrection delay so state machine tests stay fast."""
    return FileConfig(resurrection_delay_sec=0.01)


@pytest.fixture
def make_file(adapter: WatcherAdapter, file_config: FileConfig) -> Callable[..., File]:
    """Factory for File entities wired to the fake backend."""

    def _make(path: Path | str, **kwargs: Any) -> File:
        kwargs.setdefault("adapter", adapter)
        kwargs.setdefault("config", file_config)
        return File(path, **kwargs)

    return _make

