"""Connection string and configuration checks shared by the factory and the store."""

from __future__ import annotations

from dataclasses import asdict
import logging
import re

import voluptuous as vol

from .const import MAX_CONNECTION_STRING_LENGTH
from .models import PrinterConfig, PrinterConnectionType
from .schemas import PRINTER_CONFIG_SCHEMA
from .security import sanitize_log_message

_LOGGER = logging.getLogger(__name__)

WINDOWS_SERIAL_PATTERN = re.compile(r"^COM\d+$", re.IGNORECASE)
UNIX_SERIAL_PATTERN = re.compile(r"^/dev/(tty(USB|ACM|S)\d+|cu\..+)$")
RFCOMM_PATTERN = re.compile(r"^/dev/rfcomm\d+$")


def validate_usb_connection(connection_string: str) -> bool:
    return 0 < len(connection_string) < MAX_CONNECTION_STRING_LENGTH


def validate_serial_connection(connection_string: str) -> bool:
    return bool(
        WINDOWS_SERIAL_PATTERN.match(connection_string) or UNIX_SERIAL_PATTERN.match(connection_string)
    )


def validate_network_connection(connection_string: str) -> bool:
    """Accept ``host:port`` with a port in 1-65535."""
    parts = connection_string.split(":")
    if len(parts) != 2 or not parts[0]:
        return False
    try:
        port = int(parts[1], 10)
    except ValueError:
        return False
    return 0 < port <= 65535


def validate_bluetooth_connection(connection_string: str) -> bool:
    """Accept a device address, a ``bt``-tagged name or an RFCOMM port."""
    return (
        ":" in connection_string
        or "bt" in connection_string.lower()
        or bool(RFCOMM_PATTERN.match(connection_string))
        or bool(WINDOWS_SERIAL_PATTERN.match(connection_string))
    )


_CONNECTION_VALIDATORS = {
    PrinterConnectionType.USB: validate_usb_connection,
    PrinterConnectionType.SERIAL: validate_serial_connection,
    PrinterConnectionType.NETWORK: validate_network_connection,
    PrinterConnectionType.BLUETOOTH: validate_bluetooth_connection,
}


def validate_connection_string(connection_string: str, connection_type: PrinterConnectionType | str) -> bool:
    """Check the shape of a connection string for its transport."""
    try:
        validator = _CONNECTION_VALIDATORS[PrinterConnectionType(connection_type)]
    except (KeyError, ValueError):
        return False
    if not isinstance(connection_string, str):
        return False
    return validator(connection_string)


def check_config_fields(config: PrinterConfig) -> None:
    """Run the generic field checks; raises ``voluptuous.Invalid``."""
    PRINTER_CONFIG_SCHEMA(asdict(config))


def is_valid_config(config: PrinterConfig) -> bool:
    """Return True if the config passes the generic field checks."""
    try:
        check_config_fields(config)
    except vol.Invalid as err:
        _LOGGER.debug(
            "Printer config %s failed validation: %s",
            sanitize_log_message(str(getattr(config, "id", ""))),
            err,
        )
        return False
    return True
