"""Error types raised by the printer hub."""

from __future__ import annotations

from enum import Enum


class PrinterErrorCode(str, Enum):
    """Failure kinds shared by drivers, the registry and the service."""

    CONNECTION_FAILED = "CONNECTION_FAILED"
    PRINTER_OFFLINE = "PRINTER_OFFLINE"
    OUT_OF_PAPER = "OUT_OF_PAPER"
    COVER_OPEN = "COVER_OPEN"
    PAPER_JAM = "PAPER_JAM"
    OVERHEAT = "OVERHEAT"
    LOW_VOLTAGE = "LOW_VOLTAGE"
    COMMAND_ERROR = "COMMAND_ERROR"
    TIMEOUT = "TIMEOUT"
    INVALID_CONFIG = "INVALID_CONFIG"
    PRINTER_NOT_FOUND = "PRINTER_NOT_FOUND"
    UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"


class PrinterError(Exception):
    """A printer failure carrying a taxonomy code.

    ``cause`` keeps the underlying exception when one was wrapped; raising
    sites also chain it with ``raise ... from`` so tracebacks show both.
    """

    def __init__(
        self,
        message: str,
        code: PrinterErrorCode,
        printer_id: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.printer_id = printer_id
        self.cause = cause

    def __repr__(self) -> str:
        return f"PrinterError(code={self.code.value!r}, message={self.message!r}, printer_id={self.printer_id!r})"


class ServiceNotInitializedError(PrinterError):
    """Raised when the service is used before ``initialize()``."""

    def __init__(self, message: str = "Printer service is not initialized") -> None:
        super().__init__(message, PrinterErrorCode.INVALID_CONFIG)
