"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (PATHWATCH__SECTION__KEY)
3. Explicit YAML file passed to load_config()
4. Global YAML (~/.config/pathwatch/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    PATHWATCH__<SECTION>__<KEY>=<VALUE>

Examples:
    PATHWATCH__LOGGING__LEVEL=DEBUG
    PATHWATCH__WATCHER__BACKEND=polling
    PATHWATCH__FILE__RESURRECTION_DELAY_SEC=0.1
"""

import hashlib
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
BackendName = Literal["watchfiles", "watchdog", "polling"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        PATHWATCH__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every native event.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class WatcherConfig(BaseModel):
    """Native watch backend selection and tuning.

    Env vars:
        PATHWATCH__WATCHER__BACKEND: watchfiles, watchdog or polling
        PATHWATCH__WATCHER__DEBOUNCE_MS: watchfiles debounce window
        PATHWATCH__WATCHER__POLL_INTERVAL_SEC: polling backend interval
        PATHWATCH__WATCHER__REWATCH_ON_RENAME: re-issue the watch after a rename
    """

    backend: BackendName = Field(
        default="watchfiles",
        description="Native backend used by every entity created from this config.",
    )
    debounce_ms: int = Field(
        default=50,
        description="watchfiles: time to group native notifications before delivery.",
    )
    step_ms: int = Field(
        default=50,
        description="watchfiles: how often the Rust side is checked for new changes.",
    )
    poll_interval_sec: float = Field(
        default=0.1,
        description="polling: seconds between stat() calls. "
        "Lower values detect changes faster at the cost of CPU.",
    )
    observer_join_timeout_sec: float = Field(
        default=2.0,
        description="watchdog: how long close() waits for the observer thread.",
    )
    rewatch_on_rename: bool = Field(
        default=False,
        description="Close the native watch and re-open it under the new path after a rename. "
        "Backends that stop reporting a renamed path lose later events without it.",
    )

    @field_validator("debounce_ms", "step_ms")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Must be >= 0, got {v}")
        return v

    @field_validator("poll_interval_sec", "observer_join_timeout_sec")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Must be > 0, got {v}")
        return v


class FileConfig(BaseModel):
    """File entity defaults.

    Env vars:
        PATHWATCH__FILE__DEFAULT_ENCODING: Encoding for new entities
        PATHWATCH__FILE__RESURRECTION_DELAY_SEC: Delay before re-checking a deleted path
        PATHWATCH__FILE__DIGEST_ALGORITHM: hashlib algorithm for content digests
    """

    default_encoding: str = Field(
        default="utf8",
        description="Encoding assigned to new entities. Non-default names are validated.",
    )
    resurrection_delay_sec: float = Field(
        default=0.05,
        description="Wait after a delete event before checking whether the path came back. "
        "Absorbs delete-then-recreate saves.",
    )
    digest_algorithm: str = Field(
        default="sha1",
        description="hashlib algorithm used for content digests.",
    )
    read_chunk_size: int = Field(
        default=64 * 1024,
        description="Bytes per chunk for streamed reads.",
    )

    @field_validator("resurrection_delay_sec")
    @classmethod
    def validate_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"Delay must be >= 0, got {v}")
        return v

    @field_validator("digest_algorithm")
    @classmethod
    def validate_digest_algorithm(cls, v: str) -> str:
        if v.lower() not in hashlib.algorithms_available:
            raise ValueError(f"Unknown digest algorithm: {v}")
        if v.lower().startswith("shake_"):
            raise ValueError(f"Variable-length digests are not supported: {v}")
        return v.lower()

    @field_validator("read_chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Chunk size must be > 0, got {v}")
        return v


class PathWatchConfig(BaseModel):
    """Root configuration for pathwatch.

    All settings can be configured via:
    1. Environment variables: PATHWATCH__SECTION__KEY
    2. YAML config files (explicit or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    watcher: WatcherConfig = Field(default_factory=WatcherConfig)
    file: FileConfig = Field(default_factory=FileConfig)
