"""pathwatch error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Encoding
- 4xxx: Watch

Missing files are not errors: reads resolve to ``None`` and existence checks
to ``False``. Other I/O failures surface as the ``OSError`` raised by the
operating system.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_UNKNOWN_BACKEND = 2003
    WATCH_EVENT_UNMAPPED = 2004

    # Encoding (3xxx)
    ENCODING_UNSUPPORTED = 3001

    # Watch (4xxx)
    WATCH_BACKEND_FAILURE = 4001


@dataclass(frozen=True, slots=True)
class PathWatchError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'ENCODING_UNSUPPORTED')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured log payloads."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(PathWatchError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def unknown_backend(cls, name: str, available: list[str]) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_UNKNOWN_BACKEND,
            message=f"Unknown watch backend '{name}' (available: {', '.join(available)})",
            details={"backend": name, "available": available},
        )

    @classmethod
    def unmapped_event(cls, backend: str, event_code: Any) -> "ConfigError":
        return cls(
            code=ErrorCode.WATCH_EVENT_UNMAPPED,
            message=f"Backend '{backend}' reported event code {event_code!r} with no mapping",
            details={"backend": backend, "event_code": repr(event_code)},
        )


class EncodingError(PathWatchError):
    """Character encoding errors."""

    @classmethod
    def unsupported(cls, encoding: str) -> "EncodingError":
        return cls(
            code=ErrorCode.ENCODING_UNSUPPORTED,
            message=f"Unsupported encoding: {encoding}",
            details={"encoding": encoding},
        )


class WatchError(PathWatchError):
    """Native watch backend failures."""

    @classmethod
    def backend_failure(cls, path: str, reason: str) -> "WatchError":
        return cls(
            code=ErrorCode.WATCH_BACKEND_FAILURE,
            message=f"Watch failed for {path}: {reason}",
            retryable=True,
            details={"path": path, "reason": reason},
        )
