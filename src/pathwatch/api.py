"""Factory that wires configuration, the watcher adapter and entities together."""

from __future__ import annotations

import os
import weakref

from pathwatch.config.models import PathWatchConfig
from pathwatch.core.logging import get_logger
from pathwatch.directory import Directory
from pathwatch.file import File
from pathwatch.watch.adapter import WatcherAdapter, create_adapter

logger = get_logger("api")


class PathWatcher:
    """Creates File and Directory entities sharing one backend.

    The backend is chosen once, from ``config.watcher.backend``, when the
    watcher is constructed. Pass ``adapter`` to inject one directly.

    Example::

        watcher = PathWatcher(load_config())
        file = watcher.file("/project/notes.txt")
        file.on_did_change(reload_notes)
        ...
        watcher.close()
    """

    def __init__(
        self,
        config: PathWatchConfig | None = None,
        *,
        adapter: WatcherAdapter | None = None,
    ) -> None:
        self.config = config or PathWatchConfig()
        self.adapter = adapter or create_adapter(self.config.watcher)
        # Entities the caller drops are collected; close() reaches only live ones
        self._files: weakref.WeakSet[File] = weakref.WeakSet()
        self._closed = False
        logger.debug("path_watcher_created", backend=self.adapter.backend_name)

    @property
    def closed(self) -> bool:
        return self._closed

    def file(self, path: str | os.PathLike[str], symlink: bool = False) -> File:
        """Create a File entity for path. The path need not exist."""
        if self._closed:
            raise RuntimeError("PathWatcher is closed")
        entity = File(
            path,
            symlink,
            adapter=self.adapter,
            config=self.config.file,
            rewatch_on_rename=self.config.watcher.rewatch_on_rename,
        )
        self._files.add(entity)
        return entity

    def directory(self, path: str | os.PathLike[str]) -> Directory:
        return Directory(os.fspath(path))

    def close(self) -> None:
        """Dispose every File created by this watcher. Idempotent."""
        if self._closed:
            return
        self._closed = True
        files = list(self._files)
        self._files = weakref.WeakSet()
        for entity in files:
            entity.dispose()
        logger.debug("path_watcher_closed", files=len(files))

    def __enter__(self) -> PathWatcher:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
