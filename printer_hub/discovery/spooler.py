"""Discovery of receipt printers known to the OS print spooler."""

from __future__ import annotations

import json
import logging
import re
import sys

from ..const import DEFAULT_NETWORK_PORT, DISCOVERY_COMMAND_TIMEOUT_S
from ..models import PrinterConnectionType, PrinterDiscoveryResult
from ..validation import validate_serial_connection
from .commands import run_command
from .heuristics import (
    guess_connection_type,
    guess_printer_type,
    is_likely_thermal_printer,
    make_result_id,
)

_LOGGER = logging.getLogger(__name__)

_SOCKET_URI = re.compile(r"^(?:socket|tcp)://([^:/]+)(?::(\d+))?", re.IGNORECASE)
_WINDOWS_IP_PORT = re.compile(r"^IP_(\d{1,3}(?:\.\d{1,3}){3})$", re.IGNORECASE)

_POWERSHELL_QUERY = "Get-Printer | Select-Object Name,PortName,PrinterStatus | ConvertTo-Json"


def parse_lpstat_printers(output: str) -> list[tuple[str, bool]]:
    """Parse ``lpstat -p`` into ``(queue name, enabled)`` pairs."""
    queues: list[tuple[str, bool]] = []
    for line in output.splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] == "printer":
            queues.append((parts[1], "disabled" not in line.lower()))
    return queues


def parse_lpstat_devices(output: str) -> dict[str, str]:
    """Parse ``lpstat -v`` into a queue name to device URI mapping."""
    devices: dict[str, str] = {}
    for line in output.splitlines():
        if not line.startswith("device for "):
            continue
        name, sep, uri = line[len("device for "):].partition(":")
        if sep:
            devices[name.strip()] = uri.strip()
    return devices


def parse_powershell_printers(output: str) -> list[tuple[str, str, bool]]:
    """Parse ``Get-Printer`` JSON into ``(name, port, available)`` triples."""
    if not output.strip():
        return []
    data = json.loads(output)
    if isinstance(data, dict):
        data = [data]
    printers: list[tuple[str, str, bool]] = []
    for entry in data:
        name = entry.get("Name")
        if not name:
            continue
        # PrinterStatus 0 is Normal
        status = entry.get("PrinterStatus", 0)
        printers.append((name, entry.get("PortName") or "", status in (0, "Normal")))
    return printers


def spooler_result(name: str, port: str, available: bool) -> PrinterDiscoveryResult:
    """Map a spooler queue to a discovery result.

    Queues backed by a raw socket or a serial port are reported with that
    address; anything else is reported by queue name for spooled printing.
    """
    connection_type = PrinterConnectionType.USB
    connection_string = name
    socket_match = _SOCKET_URI.match(port)
    ip_match = _WINDOWS_IP_PORT.match(port)
    if socket_match:
        connection_type = PrinterConnectionType.NETWORK
        connection_string = f"{socket_match.group(1)}:{socket_match.group(2) or DEFAULT_NETWORK_PORT}"
    elif ip_match:
        connection_type = PrinterConnectionType.NETWORK
        connection_string = f"{ip_match.group(1)}:{DEFAULT_NETWORK_PORT}"
    elif guess_connection_type(port) is PrinterConnectionType.SERIAL:
        device = port.split(":", 1)[1] if port.lower().startswith("serial:") else port
        device = device.split("?", 1)[0].rstrip(":")
        if validate_serial_connection(device):
            connection_type = PrinterConnectionType.SERIAL
            connection_string = device

    return PrinterDiscoveryResult(
        id=make_result_id("discovered", name),
        name=name,
        type=guess_printer_type(name),
        connection_type=connection_type,
        connection_string=connection_string,
        is_available=available,
    )


async def _discover_cups(timeout: float) -> list[PrinterDiscoveryResult]:
    queues = parse_lpstat_printers(await run_command(["lpstat", "-p"], timeout))
    try:
        devices = parse_lpstat_devices(await run_command(["lpstat", "-v"], timeout))
    except (OSError, RuntimeError) as err:
        _LOGGER.debug("lpstat -v failed: %s", err)
        devices = {}
    return [
        spooler_result(name, devices.get(name, ""), enabled)
        for name, enabled in queues
        if is_likely_thermal_printer(name) or is_likely_thermal_printer(devices.get(name, ""))
    ]


async def _discover_windows(timeout: float) -> list[PrinterDiscoveryResult]:
    output = await run_command(
        ["powershell", "-NoProfile", "-Command", _POWERSHELL_QUERY], timeout
    )
    return [
        spooler_result(name, port, available)
        for name, port, available in parse_powershell_printers(output)
        if is_likely_thermal_printer(name)
    ]


async def discover_spooler_printers(
    timeout: float = DISCOVERY_COMMAND_TIMEOUT_S,
) -> list[PrinterDiscoveryResult]:
    """Return receipt printers configured in CUPS or the Windows spooler."""
    if sys.platform == "win32":
        return await _discover_windows(timeout)
    return await _discover_cups(timeout)
