"""Open python-escpos printer objects from a printer configuration."""

from __future__ import annotations

import logging
import re
import sys
from typing import Any

from ..const import (
    DEFAULT_BAUDRATE,
    DEFAULT_IN_EP,
    DEFAULT_OUT_EP,
    DEFAULT_TIMEOUT_MS,
)
from ..exceptions import PrinterError, PrinterErrorCode
from ..models import PrinterConfig, PrinterConnectionType
from ..security import sanitize_log_message, validate_timeout
from ..validation import RFCOMM_PATTERN, WINDOWS_SERIAL_PATTERN

_LOGGER = logging.getLogger(__name__)

_USB_ID_PATTERN = re.compile(r"^(?:0x)?([0-9a-fA-F]{1,4}):(?:0x)?([0-9a-fA-F]{1,4})$")
_BLUETOOTH_PREFIXES = ("bluetooth:", "bt:")


# Late import of python-escpos so that importing the package never needs a USB backend
def _get_printer_class(name: str) -> type[Any]:
    from escpos import printer as escpos_printer

    return getattr(escpos_printer, name)  # type: ignore[no-any-return]


def _get_profile_obj(profile: str | None) -> Any:
    """Get the escpos profile object for a profile name."""
    if profile:
        try:
            from escpos import profile as escpos_profile

            return escpos_profile.get_profile(profile)
        except Exception as e:
            _LOGGER.debug("Unknown printer profile '%s': %s", profile, sanitize_log_message(str(e)))
    return None


def parse_usb_ids(connection_string: str) -> tuple[int, int] | None:
    """Parse ``VVVV:PPPP`` into vendor and product ids, or return None."""
    match = _USB_ID_PATTERN.match(connection_string.strip())
    if match is None:
        return None
    return int(match.group(1), 16), int(match.group(2), 16)


def parse_network_address(connection_string: str) -> tuple[str, int]:
    host, _, port = connection_string.rpartition(":")
    if not host:
        raise PrinterError(
            f"Invalid network address: {connection_string}", PrinterErrorCode.INVALID_CONFIG
        )
    return host, int(port)


def bluetooth_device_path(connection_string: str) -> str | None:
    """Return the serial device behind a Bluetooth connection string, if any."""
    value = connection_string
    for prefix in _BLUETOOTH_PREFIXES:
        if value.lower().startswith(prefix):
            value = value[len(prefix):]
            break
    if RFCOMM_PATTERN.match(value) or WINDOWS_SERIAL_PATTERN.match(value):
        return value
    return None


def is_bidirectional(config: PrinterConfig) -> bool:
    """Return True if status can be read back over the configured transport."""
    ctype = PrinterConnectionType(config.connection_type)
    if ctype in (PrinterConnectionType.NETWORK, PrinterConnectionType.SERIAL):
        return True
    if ctype is PrinterConnectionType.BLUETOOTH:
        return bluetooth_device_path(config.connection_string) is not None
    return parse_usb_ids(config.connection_string) is not None


def is_spooled(config: PrinterConfig) -> bool:
    """Return True if the connection string names an OS spooler printer."""
    if PrinterConnectionType(config.connection_type) is not PrinterConnectionType.USB:
        return False
    cs = config.connection_string
    return parse_usb_ids(cs) is None and not cs.startswith("/dev/")


def describe_connection(config: PrinterConfig) -> str:
    """Return a human-readable connection info string."""
    ctype = PrinterConnectionType(config.connection_type)
    if ctype is PrinterConnectionType.USB:
        ids = parse_usb_ids(config.connection_string)
        if ids is not None:
            return f"USB {ids[0]:04X}:{ids[1]:04X}"
        return f"USB {config.connection_string}"
    return f"{ctype.value.capitalize()} {config.connection_string}"


def _open_usb(config: PrinterConfig, timeout_s: float, kwargs: dict[str, Any]) -> Any:
    ids = parse_usb_ids(config.connection_string)
    if ids is not None:
        return _get_printer_class("Usb")(
            ids[0],
            ids[1],
            timeout=int(timeout_s * 1000),  # USB timeout in milliseconds
            in_ep=DEFAULT_IN_EP,
            out_ep=DEFAULT_OUT_EP,
            **kwargs,
        )
    if config.connection_string.startswith("/dev/"):
        return _get_printer_class("File")(devfile=config.connection_string, **kwargs)
    # Anything else is a printer known to the OS spooler
    spooler = "Win32Raw" if sys.platform == "win32" else "CupsPrinter"
    return _get_printer_class(spooler)(printer_name=config.connection_string, **kwargs)


def _open_serial(devfile: str, timeout_s: float, kwargs: dict[str, Any]) -> Any:
    return _get_printer_class("Serial")(
        devfile=devfile,
        baudrate=DEFAULT_BAUDRATE,
        timeout=timeout_s,
        **kwargs,
    )


def open_connection(config: PrinterConfig) -> Any:
    """Create and open a python-escpos printer for ``config``.

    Blocking; call it from an executor.
    """
    timeout_s = validate_timeout(config.timeout, DEFAULT_TIMEOUT_MS)
    profile_obj = _get_profile_obj(config.profile)
    kwargs: dict[str, Any] = {"profile": profile_obj} if profile_obj is not None else {}
    ctype = PrinterConnectionType(config.connection_type)

    if ctype is PrinterConnectionType.NETWORK:
        host, port = parse_network_address(config.connection_string)
        printer = _get_printer_class("Network")(host, port=port, timeout=timeout_s, **kwargs)
    elif ctype is PrinterConnectionType.SERIAL:
        printer = _open_serial(config.connection_string, timeout_s, kwargs)
    elif ctype is PrinterConnectionType.BLUETOOTH:
        devfile = bluetooth_device_path(config.connection_string)
        if devfile is None:
            raise PrinterError(
                "Bluetooth printers must be paired to an RFCOMM serial port",
                PrinterErrorCode.UNSUPPORTED_OPERATION,
                config.id,
            )
        printer = _open_serial(devfile, timeout_s, kwargs)
    else:
        printer = _open_usb(config, timeout_s, kwargs)

    if hasattr(printer, "open"):
        printer.open()
    _LOGGER.debug("Opened %s for printer %s", describe_connection(config), config.id)
    return printer
