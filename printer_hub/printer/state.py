"""Status and event bookkeeping owned by each printer driver."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any

from ..events import EventBus, EventListener
from ..models import PrinterEvent, PrinterEventType, PrinterStatus

_LOGGER = logging.getLogger(__name__)


class PrinterStateTracker:
    """Holds a printer's single status value and its event stream.

    Status changes emit ``status_changed``; setting the current status again
    emits nothing.
    """

    def __init__(self, printer_id: str) -> None:
        self._printer_id = printer_id
        self._status = PrinterStatus.OFFLINE
        self._bus = EventBus()
        self.last_error: str | None = None

    @property
    def status(self) -> PrinterStatus:
        return self._status

    def set_status(self, status: PrinterStatus) -> bool:
        """Set the status; return True if it changed."""
        if status == self._status:
            return False
        old_status = self._status
        self._status = status
        _LOGGER.debug("Printer %s status %s -> %s", self._printer_id, old_status.value, status.value)
        self.emit(
            PrinterEventType.STATUS_CHANGED,
            {"old_status": old_status, "new_status": status},
        )
        return True

    def emit(self, event_type: PrinterEventType, data: dict[str, Any] | None = None) -> None:
        self._bus.emit(PrinterEvent(type=event_type, printer_id=self._printer_id, data=data or {}))

    def on(self, event_type: str, callback: EventListener) -> Callable[[], None]:
        return self._bus.on(event_type, callback)

    def off(self, event_type: str, callback: EventListener) -> None:
        self._bus.off(event_type, callback)

    def clear_listeners(self) -> None:
        self._bus.clear()
