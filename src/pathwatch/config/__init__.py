"""Config module exports."""

from pathwatch.config.loader import load_config
from pathwatch.config.models import (
    FileConfig,
    LoggingConfig,
    LogOutputConfig,
    PathWatchConfig,
    WatcherConfig,
)

__all__ = [
    "load_config",
    "FileConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "PathWatchConfig",
    "WatcherConfig",
]
