"""Construct printer drivers from configuration records."""

from __future__ import annotations

import codecs
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
import logging
import time
from typing import Any

import voluptuous as vol

from .capabilities import get_profile_names
from .exceptions import PrinterError, PrinterErrorCode
from .models import PaperSize, PrinterConfig, PrinterConnectionType, PrinterType
from .printer.driver import Connector, EscposPrinterDriver
from .printer.encoding import get_codec_name
from .printer.interface import PrinterDriver
from .security import sanitize_log_message
from .templates import get_config_template
from .validation import check_config_fields, validate_connection_string

_LOGGER = logging.getLogger(__name__)

PrinterConstructor = Callable[[PrinterConfig], PrinterDriver]
ConfigValidator = Callable[[PrinterConfig], bool]

_WIRED_TRANSPORTS = frozenset(
    {PrinterConnectionType.USB, PrinterConnectionType.SERIAL, PrinterConnectionType.NETWORK}
)


def _tag(printer_type: PrinterType | str) -> str:
    return str(getattr(printer_type, "value", printer_type))


@dataclass
class PrinterTypeRegistration:
    """How to build and check printers of one type."""

    constructor: PrinterConstructor
    validator: ConfigValidator | None = None
    description: str = ""
    paper_sizes: frozenset[PaperSize] = field(default_factory=lambda: frozenset(PaperSize))
    connection_types: frozenset[PrinterConnectionType] = field(
        default_factory=lambda: frozenset(PrinterConnectionType)
    )


def validate_escpos_options(config: PrinterConfig) -> bool:
    """Check that the character set has a codec and the profile is known."""
    if config.character_set:
        try:
            codecs.lookup(get_codec_name(config.character_set))
        except LookupError:
            return False
    if config.profile and config.profile not in get_profile_names():
        return False
    return True


class PrinterFactory:
    """Builds drivers through a table of registered printer types.

    Validation runs in two phases: generic field checks shared by every
    type, then the checks of the type's registration.
    """

    def __init__(self, connector: Connector | None = None, *, register_builtin_types: bool = True) -> None:
        self._connector = connector
        self._registrations: dict[PrinterType | str, PrinterTypeRegistration] = {}
        if register_builtin_types:
            self._register_builtin_types()

    def _create_escpos_driver(self, config: PrinterConfig) -> PrinterDriver:
        return EscposPrinterDriver(config, self._connector)

    def _register_builtin_types(self) -> None:
        self.register_printer_type(
            PrinterType.CBX_POS_89E,
            self._create_escpos_driver,
            validate_escpos_options,
            description="CBX POS 89E thermal receipt printer",
            paper_sizes=[PaperSize.MM_80, PaperSize.MM_58, PaperSize.MM_57],
            connection_types=_WIRED_TRANSPORTS,
        )
        self.register_printer_type(
            PrinterType.EPSON,
            self._create_escpos_driver,
            validate_escpos_options,
            description="Epson TM series thermal printer",
            paper_sizes=[PaperSize.MM_80, PaperSize.MM_58],
            connection_types=_WIRED_TRANSPORTS,
        )
        self.register_printer_type(
            PrinterType.STAR,
            self._create_escpos_driver,
            validate_escpos_options,
            description="Star thermal printer in ESC/POS emulation mode",
            paper_sizes=[PaperSize.MM_80, PaperSize.MM_58],
            connection_types=_WIRED_TRANSPORTS,
        )
        self.register_printer_type(
            PrinterType.GENERIC,
            self._create_escpos_driver,
            validate_escpos_options,
            description="Generic ESC/POS compatible printer",
        )

    def register_printer_type(
        self,
        printer_type: PrinterType | str,
        constructor: PrinterConstructor,
        validator: ConfigValidator | None = None,
        *,
        description: str = "",
        paper_sizes: Iterable[PaperSize] | None = None,
        connection_types: Iterable[PrinterConnectionType] | None = None,
    ) -> None:
        """Register (or replace) the constructor and checks for a printer type."""
        registration = PrinterTypeRegistration(constructor=constructor, validator=validator, description=description)
        if paper_sizes is not None:
            registration.paper_sizes = frozenset(paper_sizes)
        if connection_types is not None:
            registration.connection_types = frozenset(connection_types)
        self._registrations[printer_type] = registration
        _LOGGER.debug("Registered printer type %s", getattr(printer_type, "value", printer_type))

    def get_supported_types(self) -> list[PrinterType | str]:
        return list(self._registrations)

    def is_type_supported(self, printer_type: PrinterType | str) -> bool:
        return printer_type in self._registrations

    def _find_problem(self, config: PrinterConfig) -> str | None:
        """Return the first validation problem of ``config``, or None."""
        try:
            check_config_fields(config)
        except vol.Invalid as err:
            return str(err)

        tag = _tag(config.type)
        registration = self._registrations.get(config.type)
        if registration is None:
            return f"printer type {tag} is not registered"
        if config.paper_size not in registration.paper_sizes:
            return f"paper size {config.paper_size.value} is not supported by {tag}"
        if config.connection_type not in registration.connection_types:
            return f"{config.connection_type.value} connections are not supported by {tag}"
        if not validate_connection_string(config.connection_string, config.connection_type):
            return f"invalid {config.connection_type.value} connection string"
        if registration.validator is not None and not registration.validator(config):
            return f"rejected by the {tag} validator"
        return None

    def validate_config(self, config: PrinterConfig) -> bool:
        """Return True if ``config`` passes both validation phases; never raises."""
        try:
            problem = self._find_problem(config)
        except Exception as err:
            _LOGGER.debug("Validation of printer config raised: %s", sanitize_log_message(str(err)))
            return False
        if problem is not None:
            _LOGGER.debug(
                "Printer config %s is invalid: %s",
                sanitize_log_message(str(getattr(config, "id", ""))),
                problem,
            )
            return False
        return True

    def create_printer(self, config: PrinterConfig) -> PrinterDriver:
        """Validate ``config`` and build its driver.

        A built-in type tag this factory has no registration for is reported
        as unsupported; any other failed check is an invalid config.
        """
        try:
            problem = self._find_problem(config)
        except Exception as err:
            problem = str(err) or type(err).__name__
        if problem is not None:
            printer_type = getattr(config, "type", None)
            if isinstance(printer_type, PrinterType) and not self.is_type_supported(printer_type):
                raise PrinterError(
                    f"Unsupported printer type: {printer_type.value}",
                    PrinterErrorCode.UNSUPPORTED_OPERATION,
                    config.id,
                )
            raise PrinterError(
                f"Invalid printer configuration: {problem}",
                PrinterErrorCode.INVALID_CONFIG,
                getattr(config, "id", None),
            )

        registration = self._registrations[config.type]
        try:
            driver = registration.constructor(config)
        except Exception as err:
            raise PrinterError(
                f"Failed to create printer {config.id}: {sanitize_log_message(str(err))}",
                PrinterErrorCode.INVALID_CONFIG,
                config.id,
                err,
            ) from err
        _LOGGER.debug("Created %s driver for printer %s", _tag(config.type), config.id)
        return driver

    def create_default_config(self, printer_type: PrinterType | str, **overrides: Any) -> PrinterConfig:
        """Return a config for ``printer_type`` filled from its template."""
        values: dict[str, Any] = {
            "id": f"printer_{time.time_ns() // 1_000_000}",
            "connection_type": PrinterConnectionType.USB,
            "connection_string": "",
            **get_config_template(printer_type),
        }
        values.update(overrides)
        return PrinterConfig(**values)

    def detect_printer_type(self, connection_string: str) -> list[PrinterType]:
        """Recommend printer types for a connection string, best guess first."""
        value = connection_string.lower()
        recommendations: list[PrinterType] = []
        if any(token in value for token in ("cbx", "89e", "pos")):
            recommendations.append(PrinterType.CBX_POS_89E)
        if any(token in value for token in ("epson", "tm-")):
            recommendations.append(PrinterType.EPSON)
        if any(token in value for token in ("star", "tsp")):
            recommendations.append(PrinterType.STAR)
        recommendations.append(PrinterType.GENERIC)
        return [t for t in recommendations if self.is_type_supported(t)] or [PrinterType.GENERIC]

    def get_type_info(self, printer_type: PrinterType | str) -> dict[str, Any] | None:
        registration = self._registrations.get(printer_type)
        if registration is None:
            return None
        return {
            "type": getattr(printer_type, "value", printer_type),
            "description": registration.description,
            "paper_sizes": sorted(p.value for p in registration.paper_sizes),
            "connection_types": sorted(c.value for c in registration.connection_types),
            "has_validator": registration.validator is not None,
        }
