"""Configuration templates and ready-made print content."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
import time
from typing import Any

from .const import DEFAULT_CHARACTER_SET, DEFAULT_RETRY_ATTEMPTS, PAPER_WIDTH_CHARS
from .content import (
    BarcodeFormat,
    PrintBarcode,
    PrintContent,
    PrintCut,
    PrintFeed,
    PrintLine,
    PrintQRCode,
    PrintText,
    QRErrorLevel,
    TextFormat,
)
from .models import (
    FontSize,
    PaperSize,
    PrinterConfig,
    PrinterConnectionType,
    PrinterType,
    TextAlignment,
)

CONFIG_TEMPLATES: dict[PrinterType, dict[str, Any]] = {
    PrinterType.CBX_POS_89E: {"name": "CBX POS 89E Thermal Printer", "timeout": 3000},
    PrinterType.EPSON: {"name": "Epson Thermal Printer", "timeout": 4000},
    PrinterType.STAR: {"name": "Star Thermal Printer", "timeout": 4000},
    PrinterType.GENERIC: {"name": "Generic ESC/POS Printer", "timeout": 5000},
}

CONNECTION_EXAMPLES: dict[PrinterConnectionType, list[str]] = {
    PrinterConnectionType.USB: ["0416:5011", "/dev/usb/lp0", "CBX_POS_89E"],
    PrinterConnectionType.SERIAL: ["COM1", "COM3", "/dev/ttyUSB0", "/dev/ttyACM0"],
    PrinterConnectionType.NETWORK: ["192.168.1.100:9100", "10.0.0.50:9100", "printer.local:9100"],
    PrinterConnectionType.BLUETOOTH: ["bt:/dev/rfcomm0", "bluetooth:COM5", "00:11:22:33:44:55"],
}

_CENTER = TextFormat(alignment=TextAlignment.CENTER)
_CENTER_BOLD = TextFormat(alignment=TextAlignment.CENTER, bold=True)


def get_config_template(printer_type: PrinterType | str) -> dict[str, Any]:
    """Return default ``PrinterConfig`` field values for a printer type.

    The result lacks ``id``, ``connection_type`` and ``connection_string``;
    callers supply those.
    """
    template = CONFIG_TEMPLATES.get(PrinterType(printer_type), CONFIG_TEMPLATES[PrinterType.GENERIC])
    return {
        "name": template["name"],
        "type": PrinterType(printer_type),
        "paper_size": PaperSize.MM_80,
        "character_set": DEFAULT_CHARACTER_SET,
        "timeout": template["timeout"],
        "retry_attempts": DEFAULT_RETRY_ATTEMPTS,
        "is_default": False,
    }


def get_connection_examples(connection_type: PrinterConnectionType | str | None = None) -> Any:
    """Return example connection strings for one transport, or all of them keyed by transport."""
    if connection_type is None:
        return {ctype.value: list(examples) for ctype, examples in CONNECTION_EXAMPLES.items()}
    return list(CONNECTION_EXAMPLES.get(PrinterConnectionType(connection_type), []))


def create_cbx_pos_89e_config(name: str, connection_string: str, **options: Any) -> PrinterConfig:
    """Build a CBX POS 89E config; every option given by the caller wins over the defaults."""
    values: dict[str, Any] = {
        "id": f"cbx_{time.time_ns() // 1_000_000}",
        "type": PrinterType.CBX_POS_89E,
        "connection_type": PrinterConnectionType.USB,
        "paper_size": PaperSize.MM_80,
        "character_set": DEFAULT_CHARACTER_SET,
        "timeout": CONFIG_TEMPLATES[PrinterType.CBX_POS_89E]["timeout"],
        "retry_attempts": DEFAULT_RETRY_ATTEMPTS,
        "is_default": False,
    }
    values.update(options)
    values["name"] = name
    values["connection_string"] = connection_string
    return PrinterConfig(**values)


def _columns(config: PrinterConfig | None) -> int:
    if config is None:
        return PAPER_WIDTH_CHARS[PaperSize.MM_80.value]
    try:
        return PaperSize(config.paper_size).chars_per_line
    except ValueError:
        return PAPER_WIDTH_CHARS[PaperSize.MM_80.value]


def _pad(left: str, right: str, width: int) -> str:
    return left + " " * max(1, width - len(left) - len(right)) + right


def create_test_page_content(config: PrinterConfig) -> list[PrintContent]:
    """Content printed by a driver's test page."""
    printer_type = getattr(config.type, "value", config.type)
    paper_size = getattr(config.paper_size, "value", config.paper_size)
    return [
        PrintText("=== PRINTER TEST PAGE ===", _CENTER_BOLD),
        PrintText(f"Printer: {config.name}"),
        PrintText(f"Type: {printer_type}"),
        PrintText(f"Paper Size: {paper_size}"),
        PrintText(f"Connection: {config.connection_string}"),
        PrintLine(),
        PrintText("Test completed successfully!", _CENTER),
        PrintFeed(2),
        PrintCut(partial=False),
    ]


def create_test_print_content(printer_name: str, now: datetime | None = None) -> list[PrintContent]:
    """A formatting showcase covering styles, sizes and alignment."""
    now = now or datetime.now()
    return [
        PrintText("*** PRINTER TEST ***", _CENTER_BOLD),
        PrintFeed(1),
        PrintText(f"Printer: {printer_name}"),
        PrintText(f"Test Time: {now:%Y-%m-%d %H:%M:%S}"),
        PrintFeed(1),
        PrintText("Text Formatting Tests:"),
        PrintText("Normal text"),
        PrintText("Bold text", TextFormat(bold=True)),
        PrintText("Underlined text", TextFormat(underline=True)),
        PrintText("Small text", TextFormat(size=FontSize.SMALL)),
        PrintText("Large text", TextFormat(size=FontSize.LARGE)),
        PrintFeed(1),
        PrintText("Alignment Tests:"),
        PrintText("Left aligned", TextFormat(alignment=TextAlignment.LEFT)),
        PrintText("Center aligned", _CENTER),
        PrintText("Right aligned", TextFormat(alignment=TextAlignment.RIGHT)),
        PrintFeed(1),
        PrintLine(character="="),
        PrintText("Test completed successfully!", _CENTER),
        PrintFeed(3),
        PrintCut(partial=False),
    ]


def create_hello_world_content(printer_id: str, now: datetime | None = None) -> list[PrintContent]:
    now = now or datetime.now()
    return [
        PrintLine(character="="),
        PrintText("HELLO WORLD!", TextFormat(alignment=TextAlignment.CENTER, bold=True, size=FontSize.LARGE)),
        PrintText("Thermal Printer Test", _CENTER),
        PrintLine(character="="),
        PrintFeed(1),
        PrintText(f"Printed at: {now:%Y-%m-%d %H:%M:%S}"),
        PrintText(f"Printer ID: {printer_id}"),
        PrintFeed(2),
        PrintCut(partial=False),
    ]


def create_receipt_content(
    title: str,
    items: Sequence[Mapping[str, Any]],
    total: str,
    *,
    store_name: str | None = None,
    address: str | None = None,
    phone: str | None = None,
    footer: str | None = None,
    config: PrinterConfig | None = None,
    now: datetime | None = None,
) -> list[PrintContent]:
    """Build a receipt.

    Each item is a mapping with ``name``, ``price`` and optional ``qty``.
    Prices are right-aligned to the paper width of ``config`` (80 mm when
    omitted).
    """
    width = _columns(config)
    now = now or datetime.now()
    content: list[PrintContent] = []
    if store_name:
        content.append(
            PrintText(store_name, TextFormat(alignment=TextAlignment.CENTER, bold=True, size=FontSize.LARGE))
        )
    if address:
        content.append(PrintText(address, _CENTER))
    if phone:
        content.append(PrintText(phone, _CENTER))
    content.append(PrintLine(character="=", length=width))
    content.append(PrintText(title, _CENTER_BOLD))
    content.append(PrintFeed(1))

    for item in items:
        qty = item.get("qty")
        label = f"{qty}x {item['name']}" if qty else str(item["name"])
        content.append(PrintText(_pad(label, str(item["price"]), width)))

    content.append(PrintLine(character="-", length=width))
    content.append(PrintText(_pad("TOTAL:", total, width), TextFormat(bold=True)))
    content.append(PrintFeed(1))
    content.append(PrintText(f"Date: {now:%Y-%m-%d %H:%M:%S}", _CENTER))
    if footer:
        content.append(PrintFeed(1))
        content.append(PrintText(footer, _CENTER))
    content.append(PrintFeed(3))
    content.append(PrintCut(partial=False))
    return content


def create_barcode_content(data: str, barcode_format: BarcodeFormat | str = BarcodeFormat.CODE128) -> list[PrintContent]:
    return [
        PrintFeed(1),
        PrintBarcode(data=data, format=BarcodeFormat(barcode_format), height=60, width=2, include_text=True),
        PrintFeed(2),
    ]


def create_qr_code_content(
    data: str, size: int = 6, error_level: QRErrorLevel | str = QRErrorLevel.M
) -> list[PrintContent]:
    return [
        PrintFeed(1),
        PrintQRCode(data=data, size=size, error_level=QRErrorLevel(error_level)),
        PrintFeed(2),
    ]


def format_printer_error(error: BaseException | object) -> str:
    """Render an error for display: ``CODE: message`` for printer errors."""
    code = getattr(error, "code", None)
    message = getattr(error, "message", None)
    if code is not None and message is not None:
        return f"{getattr(code, 'value', code)}: {message}"
    if isinstance(error, BaseException):
        return str(error)
    return str(message if message is not None else error)
