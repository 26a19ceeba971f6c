"""Manage ESC/POS thermal receipt printers."""

from __future__ import annotations

from .config_store import ConfigStore, JsonConfigStore
from .content import (
    BarcodeFormat,
    PrintBarcode,
    PrintContent,
    PrintCut,
    PrintFeed,
    PrintImage,
    PrintLine,
    PrintQRCode,
    PrintText,
    QRErrorLevel,
    TextFormat,
    content_from_dict,
)
from .context import PrinterContext, ServiceSettings, create_printer_context
from .discovery import DiscoverySettings, discover_printers
from .exceptions import PrinterError, PrinterErrorCode, ServiceNotInitializedError
from .factory import PrinterFactory
from .models import (
    FontSize,
    FontStyle,
    JobPriority,
    JobStatus,
    PaperSize,
    PrinterConfig,
    PrinterConnectionType,
    PrinterDiscoveryResult,
    PrinterEvent,
    PrinterEventType,
    PrinterInfo,
    PrinterStatus,
    PrinterType,
    PrintJob,
    PrintJobConfig,
    TextAlignment,
)
from .printer import EscposPrinterDriver, PrinterDriver
from .registry import PrinterRegistry
from .service import PrinterService
from .templates import create_cbx_pos_89e_config, format_printer_error

__version__ = "1.0.0"

__all__ = [
    "BarcodeFormat",
    "ConfigStore",
    "DiscoverySettings",
    "EscposPrinterDriver",
    "FontSize",
    "FontStyle",
    "JobPriority",
    "JobStatus",
    "JsonConfigStore",
    "PaperSize",
    "PrintBarcode",
    "PrintContent",
    "PrintCut",
    "PrintFeed",
    "PrintImage",
    "PrintJob",
    "PrintJobConfig",
    "PrintLine",
    "PrintQRCode",
    "PrintText",
    "PrinterConfig",
    "PrinterConnectionType",
    "PrinterContext",
    "PrinterDiscoveryResult",
    "PrinterDriver",
    "PrinterError",
    "PrinterErrorCode",
    "PrinterEvent",
    "PrinterEventType",
    "PrinterFactory",
    "PrinterInfo",
    "PrinterRegistry",
    "PrinterService",
    "PrinterStatus",
    "PrinterType",
    "QRErrorLevel",
    "ServiceNotInitializedError",
    "ServiceSettings",
    "TextAlignment",
    "TextFormat",
    "content_from_dict",
    "create_cbx_pos_89e_config",
    "create_printer_context",
    "discover_printers",
    "format_printer_error",
]
