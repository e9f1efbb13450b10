"""Minimal event emitter standing in for the statsd daemon's event bus."""

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class FlushEmitter:
    """Dispatches named events to subscribed listeners.

    statsd notifies backends through a ``flush`` event carrying the flush
    timestamp and the metrics snapshot. A listener that raises is logged
    and the remaining listeners still run.

    Example:
        ```python
        emitter = FlushEmitter()
        emitter.on("flush", backend.flush)
        emitter.emit("flush", time.time(), snapshot)
        ```
    """

    def __init__(self) -> None:
        self._listeners: defaultdict[str, list[Listener]] = defaultdict(list)

    def on(self, event: str, listener: Listener) -> None:
        """Subscribe a listener to an event."""
        if not callable(listener):
            raise TypeError("listener must be callable")
        self._listeners[event].append(listener)

    def off(self, event: str, listener: Listener) -> None:
        """Unsubscribe a listener; unknown listeners are ignored."""
        if listener in self._listeners.get(event, []):
            self._listeners[event].remove(listener)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> int:
        """Call every listener of an event with the given arguments.

        Returns:
            Number of listeners notified.
        """
        listeners = list(self._listeners.get(event, []))
        for listener in listeners:
            try:
                listener(*args)
            except Exception:
                logger.exception("Listener for %s event failed", event)
        return len(listeners)
