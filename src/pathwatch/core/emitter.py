"""Named-channel event emitter with disposable registrations."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


class Disposable:
    """A registration that can be released exactly once.

    Calling ``dispose()`` again is a no-op.
    """

    __slots__ = ("_action", "_disposed")

    def __init__(self, action: Callable[[], None] | None = None) -> None:
        self._action = action
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        action, self._action = self._action, None
        if action is not None:
            action()

    def __enter__(self) -> Disposable:
        return self

    def __exit__(self, *args: object) -> None:
        self.dispose()


class Emitter:
    """Dispatches values to the handlers registered on a channel.

    Handlers run synchronously in registration order. A handler that raises
    aborts the emit and the exception propagates to the emitter.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[..., Any]]] = {}
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def on(self, channel: str, handler: Callable[..., Any]) -> Disposable:
        """Register handler on channel. Returns a Disposable that unregisters it."""
        if self._disposed:
            raise RuntimeError("Emitter has been disposed")
        if not callable(handler):
            raise TypeError(f"Handler must be callable, got {type(handler).__name__}")

        self._handlers.setdefault(channel, []).append(handler)
        return Disposable(lambda: self._off(channel, handler))

    def _off(self, channel: str, handler: Callable[..., Any]) -> None:
        handlers = self._handlers.get(channel)
        if not handlers:
            return
        # Remove one registration; the same callable may be registered twice
        try:
            handlers.remove(handler)
        except ValueError:
            return
        if not handlers:
            del self._handlers[channel]

    def emit(self, channel: str, *args: Any) -> None:
        """Invoke every handler registered on channel with args."""
        # Snapshot so handlers may unsubscribe while dispatching
        for handler in list(self._handlers.get(channel, ())):
            handler(*args)

    def listener_count(self, channel: str) -> int:
        return len(self._handlers.get(channel, ()))

    def clear(self) -> None:
        self._handlers.clear()

    def dispose(self) -> None:
        self.clear()
        self._disposed = True
