"""Watcher adapter: one watch contract over heterogeneous native backends.

Design:
- Each backend declares an explicit table from its own event codes to
  ``EventKind``. ``None`` marks a code the backend is known to emit but that
  carries no meaning for a single watched path (e.g. open/close notifications).
- A code missing from the table is a configuration error. It is raised, never
  dropped.
- ``watch()`` always returns a handle synchronously. Backends that attach
  asynchronously must still release the native resource when ``close()`` runs
  before attachment finished.
- Reported paths are passed through untouched, even when they differ from the
  watched path.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable, Mapping
from typing import TYPE_CHECKING, Any

from pathwatch.core.errors import ConfigError
from pathwatch.core.logging import get_logger
from pathwatch.watch.events import EventKind, WatchEvent

if TYPE_CHECKING:
    from pathwatch.config.models import WatcherConfig

logger = get_logger("watch.adapter")

RawCallback = Callable[[Any, str], None]
EventCallback = Callable[[EventKind, str], None]
ErrorCallback = Callable[[BaseException], None]


class WatchHandle:
    """An idempotently closable native watch.

    ``release`` is invoked at most once, on the first ``close()``.
    """

    def __init__(self, path: str, release: Callable[[], None] | None = None) -> None:
        self.path = path
        self._release = release
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        release, self._release = self._release, None
        if release is not None:
            release()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<{type(self).__name__} {self.path!r} {state}>"


class WatchBackend(ABC):
    """A native watch implementation with its own event vocabulary."""

    #: Backend identifier used in configuration
    name: str = ""

    @property
    @abstractmethod
    def event_map(self) -> Mapping[Hashable, EventKind | None]:
        """Exhaustive mapping from native event codes to canonical kinds."""

    @abstractmethod
    def watch(self, path: str, on_raw: RawCallback, on_error: ErrorCallback) -> WatchHandle:
        """Start watching path.

        ``on_raw(code, reported_path)`` and ``on_error(exc)`` must be invoked
        on the event loop thread. After ``on_error`` the watch is dead.
        Raises synchronously (typically ``OSError``) when the watch cannot be
        set up at all.
        """


class WatcherAdapter:
    """Translates a backend's native events into canonical ``EventKind`` values."""

    def __init__(self, backend: WatchBackend) -> None:
        self._backend = backend

    @property
    def backend(self) -> WatchBackend:
        return self._backend

    @property
    def backend_name(self) -> str:
        return self._backend.name

    def translate(self, code: Any) -> EventKind | None:
        """Map a native code. Returns None for known-but-ignored codes.

        Raises:
            ConfigError: If the backend has no mapping entry for code.
        """
        event_map = self._backend.event_map
        if code not in event_map:
            raise ConfigError.unmapped_event(self._backend.name, code)
        return event_map[code]

    def translate_event(self, code: Any, path: str) -> WatchEvent | None:
        kind = self.translate(code)
        if kind is None:
            return None
        return WatchEvent(kind=kind, path=path)

    def watch(
        self,
        path: str,
        on_event: EventCallback,
        on_error: ErrorCallback | None = None,
    ) -> WatchHandle:
        """Watch a single path; ``on_event(kind, path)`` fires once per canonical event."""

        def on_raw(code: Any, reported_path: str) -> None:
            event = self.translate_event(code, reported_path)
            if event is None:
                logger.debug("native_event_ignored", backend=self.backend_name, code=repr(code))
                return
            logger.debug(
                "native_event",
                backend=self.backend_name,
                kind=event.kind.value,
                path=event.path,
            )
            on_event(event.kind, event.path)

        def on_backend_error(error: BaseException) -> None:
            logger.warning(
                "native_watch_error",
                backend=self.backend_name,
                path=path,
                error=str(error),
            )
            if on_error is None:
                raise error
            on_error(error)

        handle = self._backend.watch(path, on_raw, on_backend_error)
        logger.debug("native_watch_started", backend=self.backend_name, path=path)
        return handle


def create_adapter(config: WatcherConfig) -> WatcherAdapter:
    """Build the adapter for the backend named in config."""
    from pathwatch.watch.backends import BACKENDS

    factory = BACKENDS.get(config.backend)
    if factory is None:
        raise ConfigError.unknown_backend(config.backend, sorted(BACKENDS))
    return WatcherAdapter(factory(config))
