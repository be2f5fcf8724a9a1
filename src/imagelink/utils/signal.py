"""In-process observers that work without a Qt event loop.

``Signal`` carries connectivity snapshots and settings changes;
``ObservableProperty`` holds the manifest loader's list, loading flag and
error text so a front end can bind to them.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

LOGGER = logging.getLogger(__name__)

Handler = Callable[..., Any]


class Signal:
    """Ordered, thread-safe list of callbacks.

    Handlers run on the emitting thread, outside the internal lock, so a
    handler may connect or disconnect others.  A handler that raises is
    logged and skipped.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._handlers: list[Handler] = []
        self._lock = threading.Lock()

    def connect(self, handler: Handler) -> Handler:
        """Register *handler* once; returns it so this works as a decorator."""
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)
        return handler

    def disconnect(self, handler: Handler) -> bool:
        with self._lock:
            try:
                self._handlers.remove(handler)
            except ValueError:
                return False
            return True

    def emit(self, *args: Any, **kwargs: Any) -> int:
        """Call every handler; returns how many completed without raising."""
        with self._lock:
            handlers = tuple(self._handlers)
        delivered = 0
        for handler in handlers:
            try:
                handler(*args, **kwargs)
            except Exception:
                LOGGER.exception("Handler %r for signal %r failed", handler, self.name)
            else:
                delivered += 1
        return delivered

    @property
    def handler_count(self) -> int:
        with self._lock:
            return len(self._handlers)


class ObservableProperty:
    """A value whose changes are announced as ``changed(new, old)``.

    Assigning an equal value is a no-op.
    """

    def __init__(self, initial_value: Any = None, name: str = "") -> None:
        self._value = initial_value
        self._lock = threading.Lock()
        self.changed = Signal(name)

    @property
    def value(self) -> Any:
        with self._lock:
            return self._value

    @value.setter
    def value(self, new_value: Any) -> None:
        self.set(new_value)

    def set(self, new_value: Any) -> bool:
        """Store *new_value*; returns ``True`` when it differed."""
        with self._lock:
            old_value = self._value
            if old_value == new_value:
                return False
            self._value = new_value
        self.changed.emit(new_value, old_value)
        return True

    def bind(self, handler: Handler, *, immediate: bool = False) -> Handler:
        """Connect *handler*; with *immediate* it first receives ``(value, None)``."""
        self.changed.connect(handler)
        if immediate:
            handler(self.value, None)
        return handler
