"""Printer drivers for ESC/POS thermal printers.

Drivers talk to printers over USB, serial, network (raw TCP) and Bluetooth
RFCOMM connections through python-escpos.
"""

from __future__ import annotations

from .driver import EscposPrinterDriver
from .interface import PrinterDriver
from .print_operations import ContentRenderer
from .state import PrinterStateTracker
from .transports import open_connection

__all__ = [
    "ContentRenderer",
    "EscposPrinterDriver",
    "PrinterDriver",
    "PrinterStateTracker",
    "open_connection",
]
