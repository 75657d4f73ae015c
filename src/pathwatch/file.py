"""A single filesystem entry that can be watched, read from, and written to.

Design:
- Exactly one native watch per entity, opened lazily by the first subscriber
  and closed when the last subscription is disposed.
- Contents are cached after a read or write and invalidated by change events.
  The digest always describes the cached contents (``None`` when unknown).
- A delete event is not reported immediately. The native watch is dropped and
  the path is re-checked after a short delay: if it exists again the deletion
  was a delete-then-recreate save and subscribers see a change instead.

Every method runs on the event loop thread; backends deliver native events
there too, so no locks guard entity state. One writer per entity is assumed.
"""

from __future__ import annotations

import asyncio
import hashlib
import os
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import IO, TYPE_CHECKING, Any

from pathwatch.codec import DEFAULT_ENCODING, Codec, get_codec, is_default
from pathwatch.config.models import FileConfig
from pathwatch.core.emitter import Disposable, Emitter
from pathwatch.core.errors import WatchError
from pathwatch.core.logging import get_logger
from pathwatch.core.tasks import spawn_task
from pathwatch.directory import Directory
from pathwatch.watch.events import EventKind

if TYPE_CHECKING:
    from pathwatch.watch.adapter import WatcherAdapter, WatchHandle

logger = get_logger("file")

DID_CHANGE = "did-change"
DID_RENAME = "did-rename"
DID_DELETE = "did-delete"
WILL_THROW_WATCH_ERROR = "will-throw-watch-error"

_DEFAULT_CODEC = get_codec(DEFAULT_ENCODING)


class WatchState(Enum):
    """Where an entity stands in its watch lifecycle."""

    UNWATCHED = "unwatched"
    WATCHING = "watching"
    PENDING_RESURRECTION_CHECK = "pending_resurrection_check"


@dataclass
class WatchErrorEvent:
    """Payload of ``will-throw-watch-error``.

    A handler must call ``handle()``; otherwise the entity raises ``error``
    once every handler has run.
    """

    error: WatchError
    cause: BaseException
    handled: bool = False

    def handle(self) -> None:
        self.handled = True


class File:
    """An individual file on disk, identified by path.

    Constructing a File touches nothing on disk; the path need not exist.

    Example::

        adapter = create_adapter(WatcherConfig())
        file = File("/project/notes.txt", adapter=adapter)
        sub = file.on_did_change(lambda: print("changed"))
        text = await file.read()
        ...
        sub.dispose()
    """

    def __init__(
        self,
        file_path: str | os.PathLike[str],
        symlink: bool = False,
        *,
        adapter: WatcherAdapter | None = None,
        config: FileConfig | None = None,
        rewatch_on_rename: bool = False,
    ) -> None:
        self._config = config or FileConfig()
        self._adapter = adapter
        self._rewatch_on_rename = rewatch_on_rename
        self._symlink = symlink

        self.path = os.path.abspath(os.fspath(file_path))
        self.real_path: str | None = None
        self.encoding = DEFAULT_ENCODING
        self._codec: Codec = _DEFAULT_CODEC
        self.cached_contents: str | None = None
        self.digest: str | None = None
        self.subscription_count = 0

        self._emitter = Emitter()
        self._watch_handle: WatchHandle | None = None
        self._resurrection_task: asyncio.Task[None] | None = None

        if self._config.default_encoding != DEFAULT_ENCODING:
            self.set_encoding(self._config.default_encoding)

    def __repr__(self) -> str:
        return f"File({self.path!r})"

    async def create(self) -> bool:
        """Create the file on disk if it does not exist yet.

        Missing parent directories are created first.

        Returns:
            True if the file was created, False if it already existed.
        """
        if await self.exists():
            return False
        await self.get_parent().create()
        await self.write("")
        return True

    # -- Event subscription ------------------------------------------------

    def on_did_change(self, callback: Callable[[], Any]) -> Disposable:
        """Invoke callback when the file's contents change."""
        return self._subscribe(DID_CHANGE, callback)

    def on_did_rename(self, callback: Callable[[], Any]) -> Disposable:
        """Invoke callback when the file's path changes."""
        return self._subscribe(DID_RENAME, callback)

    def on_did_delete(self, callback: Callable[[], Any]) -> Disposable:
        """Invoke callback when the file is deleted."""
        return self._subscribe(DID_DELETE, callback)

    def on_will_throw_watch_error(self, callback: Callable[[WatchErrorEvent], Any]) -> Disposable:
        """Invoke callback when the native watch fails.

        The entity has already dropped its native watch when the callback
        runs. Call ``event.handle()`` to stop the error from being raised.
        Does not count as a subscription.
        """
        return self._emitter.on(WILL_THROW_WATCH_ERROR, callback)

    def _subscribe(self, channel: str, callback: Callable[[], Any]) -> Disposable:
        subscription = self._emitter.on(channel, callback)
        self._will_add_subscription()
        return self._track_unsubscription(subscription)

    def _will_add_subscription(self) -> None:
        self.subscription_count += 1
        self._ensure_native_watch()

    def _did_remove_subscription(self) -> None:
        self.subscription_count = max(0, self.subscription_count - 1)
        if self.subscription_count == 0:
            self._unsubscribe_from_native_change_events()

    def _track_unsubscription(self, subscription: Disposable) -> Disposable:
        def unsubscribe() -> None:
            subscription.dispose()
            self._did_remove_subscription()

        return Disposable(unsubscribe)

    def has_subscriptions(self) -> bool:
        return self.subscription_count > 0

    @property
    def state(self) -> WatchState:
        if self._resurrection_task is not None and not self._resurrection_task.done():
            return WatchState.PENDING_RESURRECTION_CHECK
        if self._watch_handle is not None:
            return WatchState.WATCHING
        return WatchState.UNWATCHED

    # -- File metadata -----------------------------------------------------

    def is_file(self) -> bool:
        return True

    def is_directory(self) -> bool:
        return False

    def is_symbolic_link(self) -> bool:
        return self._symlink

    async def exists(self) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, os.path.exists, self.path)

    def exists_sync(self) -> bool:
        return os.path.exists(self.path)

    async def get_digest(self) -> str | None:
        """Digest of the contents, reading the file if they are not cached.

        Returns None if the file does not exist.
        """
        if self.digest is not None:
            return self.digest
        await self.read()
        return self.digest

    def get_digest_sync(self) -> str | None:
        if self.digest is None:
            self.read_sync()
        return self.digest

    def _set_contents(self, contents: str | None) -> None:
        self.cached_contents = contents
        if contents is None:
            self.digest = None
        else:
            self.digest = hashlib.new(
                self._config.digest_algorithm, contents.encode("utf-8")
            ).hexdigest()

    def set_encoding(self, encoding: str = DEFAULT_ENCODING) -> None:
        """Set the character encoding used to read and write the file.

        Raises:
            EncodingError: If encoding is unknown. Raised here, before any I/O.
        """
        self._codec = _DEFAULT_CODEC if is_default(encoding) else get_codec(encoding)
        self.encoding = encoding

    def get_encoding(self) -> str:
        return self.encoding

    # -- Managing paths ----------------------------------------------------

    def get_path(self) -> str:
        return self.path

    def set_path(self, path: str) -> None:
        self.path = os.path.abspath(path)
        self.real_path = None

    def get_real_path_sync(self) -> str:
        """Fully resolved path; the plain path if it cannot be resolved."""
        if self.real_path is None:
            try:
                self.real_path = os.path.realpath(self.path, strict=True)
            except OSError:
                self.real_path = self.path
        return self.real_path

    async def get_real_path(self) -> str:
        """Fully resolved path.

        Raises:
            OSError: If the path cannot be resolved (e.g. it does not exist).
        """
        if self.real_path is None:
            loop = asyncio.get_running_loop()
            path = self.path
            self.real_path = await loop.run_in_executor(
                None, lambda: os.path.realpath(path, strict=True)
            )
        return self.real_path

    def get_base_name(self) -> str:
        return os.path.basename(self.path)

    def get_parent(self) -> Directory:
        return Directory(os.path.dirname(self.path))

    # -- Reading and writing -----------------------------------------------

    def create_read_stream(self) -> IO[str]:
        """Open the file for reading text in the configured encoding."""
        return open(self.path, encoding=self._codec.python_name, newline="")

    def create_write_stream(self) -> IO[str]:
        """Open the file for writing text in the configured encoding (truncates)."""
        return open(self.path, "w", encoding=self._codec.python_name, newline="")

    async def read(self, flush_cache: bool = False) -> str | None:
        """Read the file's contents.

        Args:
            flush_cache: Read from disk even if contents are cached.

        Returns:
            The contents, or None if the file does not exist.

        Raises:
            OSError: Any read failure other than the file being absent.
        """
        if self.cached_contents is not None and not flush_cache:
            return self.cached_contents

        contents = await self._read_stream()
        self._set_contents(contents)
        return contents

    async def _read_stream(self) -> str | None:
        loop = asyncio.get_running_loop()
        path = self.path
        chunk_size = self._config.read_chunk_size
        decoder = self._codec.incremental_decoder()

        try:
            stream = await loop.run_in_executor(None, lambda: open(path, "rb"))
        except FileNotFoundError:
            return None

        parts: list[str] = []
        try:
            while chunk := await loop.run_in_executor(None, stream.read, chunk_size):
                parts.append(decoder.decode(chunk))
            parts.append(decoder.decode(b"", True))
        finally:
            stream.close()
        return "".join(parts)

    def read_sync(self, flush_cache: bool = False) -> str | None:
        """Blocking variant of ``read()``. Returns None if the file does not exist."""
        if not self.exists_sync():
            self._set_contents(None)
        elif self.cached_contents is None or flush_cache:
            try:
                with self.create_read_stream() as stream:
                    contents: str | None = stream.read()
            except FileNotFoundError:
                contents = None
            self._set_contents(contents)
        return self.cached_contents

    async def write(self, text: str) -> None:
        """Overwrite the file with text, creating it if needed."""
        previously_existed = await self.exists()
        data = self._codec.encode(text)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, _write_bytes, self.path, data)
        self._set_contents(text)
        if not previously_existed and self.has_subscriptions():
            self._ensure_native_watch()

    def write_sync(self, text: str) -> None:
        """Blocking variant of ``write()``."""
        previously_existed = self.exists_sync()
        _write_bytes(self.path, self._codec.encode(text))
        self._set_contents(text)
        if not previously_existed and self.has_subscriptions():
            self._ensure_native_watch()

    # -- Native events -----------------------------------------------------

    def _handle_native_change_event(self, kind: EventKind, event_path: str) -> None:
        logger.debug("file_event", path=self.path, kind=kind.value, event_path=event_path)
        if kind is EventKind.DELETE:
            self._unsubscribe_from_native_change_events()
            self._detect_resurrection_after_delay()
        elif kind is EventKind.RENAME:
            self.set_path(event_path)
            if self._rewatch_on_rename and self._watch_handle is not None:
                self._unsubscribe_from_native_change_events()
                self._ensure_native_watch()
            self._emitter.emit(DID_RENAME)
        else:
            # CHANGE, or CREATE: something new now sits at the watched path
            self.cached_contents = None
            self.digest = None
            self._emitter.emit(DID_CHANGE)

    def _handle_watch_error(self, cause: BaseException) -> None:
        self._unsubscribe_from_native_change_events()
        event = WatchErrorEvent(
            error=WatchError.backend_failure(self.path, str(cause) or type(cause).__name__),
            cause=cause,
        )
        self._emitter.emit(WILL_THROW_WATCH_ERROR, event)
        if not event.handled:
            logger.error("watch_error_unhandled", path=self.path, error=str(event.error))
            raise event.error from cause

    def _detect_resurrection_after_delay(self) -> None:
        if self._resurrection_task is not None and not self._resurrection_task.done():
            return
        self._resurrection_task = spawn_task(
            self._detect_resurrection, name=f"resurrection-check:{self.path}"
        )

    async def _detect_resurrection(self) -> None:
        await asyncio.sleep(self._config.resurrection_delay_sec)
        exists = await self.exists()
        self._resurrection_task = None
        logger.debug(
            "resurrection_check",
            path=self.path,
            exists=exists,
            subscriptions=self.subscription_count,
        )
        if exists:
            # Re-watch only for live subscribers
            if self.has_subscriptions():
                self._ensure_native_watch()
            self._handle_native_change_event(EventKind.CHANGE, self.path)
        else:
            self._set_contents(None)
            self._emitter.emit(DID_DELETE)

    def _ensure_native_watch(self) -> None:
        """Open the native watch if none is active. Failures are logged, not raised."""
        try:
            self._subscribe_to_native_change_events()
        except Exception as e:
            logger.warning(
                "native_watch_failed",
                path=self.path,
                error=str(e),
                error_type=type(e).__name__,
            )

    def _subscribe_to_native_change_events(self) -> None:
        if self._watch_handle is not None:
            return
        if self._adapter is None:
            raise RuntimeError("No watcher adapter configured")
        self._watch_handle = self._adapter.watch(
            self.path,
            self._handle_native_change_event,
            self._handle_watch_error,
        )

    def _unsubscribe_from_native_change_events(self) -> None:
        if self._watch_handle is not None:
            handle, self._watch_handle = self._watch_handle, None
            handle.close()

    def dispose(self) -> None:
        """Release everything the entity holds: pending check, native watch, subscribers."""
        if self._resurrection_task is not None:
            self._resurrection_task.cancel()
            self._resurrection_task = None
        self._unsubscribe_from_native_change_events()
        self._emitter.dispose()
        self.subscription_count = 0


def _write_bytes(path: str, data: bytes) -> None:
    with open(path, "wb") as f:
        f.write(data)
