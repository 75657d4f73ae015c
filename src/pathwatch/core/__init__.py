"""Core module exports."""

from pathwatch.core.emitter import Disposable, Emitter
from pathwatch.core.errors import (
    ConfigError,
    EncodingError,
    ErrorCode,
    PathWatchError,
    WatchError,
)
from pathwatch.core.logging import configure_logging, get_log_file_path, get_logger

__all__ = [
    # Errors
    "ConfigError",
    "EncodingError",
    "ErrorCode",
    "PathWatchError",
    "WatchError",
    # Events
    "Disposable",
    "Emitter",
    # Logging
    "configure_logging",
    "get_log_file_path",
    "get_logger",
]
