"""Watcher adapter and canonical watch events."""

from pathwatch.watch.adapter import (
    WatchBackend,
    WatcherAdapter,
    WatchHandle,
    create_adapter,
)
from pathwatch.watch.events import EventKind, WatchEvent

__all__ = [
    "EventKind",
    "WatchBackend",
    "WatchEvent",
    "WatchHandle",
    "WatcherAdapter",
    "create_adapter",
]
