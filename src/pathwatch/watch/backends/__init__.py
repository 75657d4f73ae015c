"""Native watch backends, selected by name at startup."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from pathwatch.watch.backends.polling import POLLING_EVENT_MAP, PollingBackend
from pathwatch.watch.backends.watchdog_backend import WATCHDOG_EVENT_MAP, WatchdogBackend
from pathwatch.watch.backends.watchfiles_backend import WATCHFILES_EVENT_MAP, WatchfilesBackend

if TYPE_CHECKING:
    from pathwatch.config.models import WatcherConfig
    from pathwatch.watch.adapter import WatchBackend

BACKENDS: dict[str, Callable[[WatcherConfig], WatchBackend]] = {
    "watchfiles": lambda c: WatchfilesBackend(debounce_ms=c.debounce_ms, step_ms=c.step_ms),
    "watchdog": lambda c: WatchdogBackend(join_timeout_sec=c.observer_join_timeout_sec),
    "polling": lambda c: PollingBackend(poll_interval_sec=c.poll_interval_sec),
}

__all__ = [
    "BACKENDS",
    "POLLING_EVENT_MAP",
    "PollingBackend",
    "WATCHDOG_EVENT_MAP",
    "WatchdogBackend",
    "WATCHFILES_EVENT_MAP",
    "WatchfilesBackend",
]
