"""pathwatch: watched file entities over pluggable native watch backends."""

from pathwatch.api import PathWatcher
from pathwatch.codec import Codec, get_codec
from pathwatch.config import PathWatchConfig, load_config
from pathwatch.core.emitter import Disposable
from pathwatch.core.errors import ConfigError, EncodingError, PathWatchError, WatchError
from pathwatch.directory import Directory
from pathwatch.file import File, WatchErrorEvent, WatchState
from pathwatch.watch import EventKind, WatcherAdapter, WatchEvent, WatchHandle, create_adapter

__version__ = "0.1.0"

__all__ = [
    "Codec",
    "ConfigError",
    "create_adapter",
    "Directory",
    "Disposable",
    "EncodingError",
    "EventKind",
    "File",
    "get_codec",
    "load_config",
    "PathWatchConfig",
    "PathWatchError",
    "PathWatcher",
    "WatchError",
    "WatchErrorEvent",
    "WatchEvent",
    "WatchHandle",
    "WatcherAdapter",
    "WatchState",
]
