"""Name and port heuristics used to classify discovered printers."""

from __future__ import annotations

import re

from ..const import THERMAL_PRINTER_KEYWORDS
from ..models import PrinterConnectionType, PrinterType

_DOTTED_QUAD = re.compile(r"\b\d{1,3}(\.\d{1,3}){3}\b")
_SERIAL_PORT = re.compile(r"^(?:serial:|com\d+:?$)")


def _keyword_pattern(keyword: str) -> str:
    # Short tokens such as "rp" or "pos" only count at the start of a word ("RP-80", not "Corp")
    if len(keyword) <= 3 and keyword.isalnum():
        return rf"(?<![a-z0-9]){re.escape(keyword)}"
    return re.escape(keyword)


_THERMAL_PATTERN = re.compile("|".join(_keyword_pattern(k) for k in THERMAL_PRINTER_KEYWORDS))


def is_likely_thermal_printer(name: str) -> bool:
    """Return True if a device or queue name looks like a receipt printer."""
    return bool(_THERMAL_PATTERN.search(name.lower()))


def guess_printer_type(name: str) -> PrinterType:
    value = name.lower()
    if "cbx" in value or "89e" in value:
        return PrinterType.CBX_POS_89E
    if "epson" in value:
        return PrinterType.EPSON
    if "star" in value:
        return PrinterType.STAR
    return PrinterType.GENERIC


def guess_connection_type(port: str) -> PrinterConnectionType:
    """Guess the transport from a spooler port name or device URI."""
    value = port.lower()
    if _SERIAL_PORT.match(value) or "/dev/tty" in value:
        return PrinterConnectionType.SERIAL
    if "usb" in value or "hid" in value:
        return PrinterConnectionType.USB
    if "ip" in value or value.startswith("socket://") or _DOTTED_QUAD.search(value):
        return PrinterConnectionType.NETWORK
    return PrinterConnectionType.USB


_ID_SEPARATORS = re.compile(r"[\s.:/]+")


def make_result_id(prefix: str, name: str) -> str:
    slug = _ID_SEPARATORS.sub("_", name.strip())
    return f"{prefix}_{slug}"
