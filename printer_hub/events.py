"""Synchronous publish/subscribe for printer, registry and service events."""

from __future__ import annotations

from collections.abc import Callable
import contextlib
import logging

from .models import PrinterEvent

_LOGGER = logging.getLogger(__name__)

EventListener = Callable[[PrinterEvent], None]


class EventBus:
    """Delivers events to listeners in subscription order."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[EventListener]] = {}

    def on(self, event_type: str, callback: EventListener) -> Callable[[], None]:
        """Subscribe to an event type and return an unsubscribe function."""
        self._listeners.setdefault(str(getattr(event_type, "value", event_type)), []).append(callback)

        def _remove() -> None:
            self.off(event_type, callback)

        return _remove

    def off(self, event_type: str, callback: EventListener) -> None:
        listeners = self._listeners.get(str(getattr(event_type, "value", event_type)))
        if listeners is not None:
            with contextlib.suppress(ValueError):
                listeners.remove(callback)

    def emit(self, event: PrinterEvent) -> None:
        key = str(getattr(event.type, "value", event.type))
        for callback in list(self._listeners.get(key, ())):
            try:
                callback(event)
            except Exception:
                _LOGGER.exception("Listener for %s event failed", key)

    def listener_count(self, event_type: str) -> int:
        return len(self._listeners.get(str(getattr(event_type, "value", event_type)), ()))

    def clear(self) -> None:
        self._listeners.clear()
