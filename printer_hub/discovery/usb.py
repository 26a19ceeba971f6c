"""USB printer discovery through pyusb, falling back to ``lsusb``."""

from __future__ import annotations

import asyncio
import logging
import re
import sys

from ..const import THERMAL_PRINTER_VIDS
from ..models import PrinterConnectionType, PrinterDiscoveryResult
from .commands import run_command
from .heuristics import guess_printer_type, is_likely_thermal_printer

_LOGGER = logging.getLogger(__name__)

_LSUSB_LINE = re.compile(r"ID\s+([0-9a-fA-F]{4}):([0-9a-fA-F]{4})\s*(.*)$")


def _usb_result(vendor_id: int, product_id: int, label: str, serial: str | None = None) -> PrinterDiscoveryResult:
    result_id = f"usb_{vendor_id:04x}_{product_id:04x}"
    if serial:
        result_id = f"{result_id}_{serial}"
    return PrinterDiscoveryResult(
        id=result_id,
        name=f"{label} ({vendor_id:04X}:{product_id:04X})",
        type=guess_printer_type(label),
        connection_type=PrinterConnectionType.USB,
        connection_string=f"{vendor_id:04x}:{product_id:04x}",
        is_available=True,
    )


def _is_candidate(vendor_id: int, label: str) -> bool:
    return vendor_id in THERMAL_PRINTER_VIDS or is_likely_thermal_printer(label)


def enumerate_usb_printers() -> list[PrinterDiscoveryResult]:
    """Enumerate USB receipt printers with pyusb (blocking).

    Raises ``ImportError`` without pyusb and ``usb.core.NoBackendError``
    without libusb, so the caller can fall back to ``lsusb``.
    """
    import usb.core  # noqa: PLC0415
    import usb.util  # noqa: PLC0415

    printers: list[PrinterDiscoveryResult] = []
    for device in usb.core.find(find_all=True):
        try:
            manufacturer = usb.util.get_string(device, device.iManufacturer) or "Unknown"
            product = usb.util.get_string(device, device.iProduct) or "USB Device"
        except Exception:
            # String descriptors need device permissions
            manufacturer, product = "Unknown", "USB Device"
        label = f"{manufacturer} {product}"
        if not _is_candidate(device.idVendor, label):
            continue
        serial = None
        try:
            if device.iSerialNumber:
                serial = usb.util.get_string(device, device.iSerialNumber)
        except Exception:
            serial = None
        printers.append(_usb_result(device.idVendor, device.idProduct, label, serial))
    return printers


def parse_lsusb_output(output: str) -> list[PrinterDiscoveryResult]:
    """Pick receipt printers out of ``lsusb`` output."""
    printers: list[PrinterDiscoveryResult] = []
    for line in output.splitlines():
        match = _LSUSB_LINE.search(line)
        if not match:
            continue
        vendor_id = int(match.group(1), 16)
        product_id = int(match.group(2), 16)
        label = match.group(3).strip() or "USB Device"
        if _is_candidate(vendor_id, label):
            printers.append(_usb_result(vendor_id, product_id, label))
    return printers


async def discover_usb_printers() -> list[PrinterDiscoveryResult]:
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, enumerate_usb_printers)
    except Exception as err:
        _LOGGER.debug("pyusb enumeration unavailable: %s", err)

    if not sys.platform.startswith("linux"):
        return []
    return parse_lsusb_output(await run_command(["lsusb"]))
