"""Canonical, backend-independent watch events."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EventKind(Enum):
    """Kind of filesystem change, whatever backend reported it."""

    CREATE = "create"
    CHANGE = "change"
    RENAME = "rename"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class WatchEvent:
    """A canonical event at a reported path."""

    kind: EventKind
    path: str
