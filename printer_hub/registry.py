"""Registry of configured printers and their drivers."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import fields
import logging
from typing import Any

from .const import (
    EVENT_DEFAULT_PRINTER_CHANGED,
    EVENT_PRINTER_CONFIG_UPDATED,
    EVENT_PRINTER_REGISTERED,
    EVENT_PRINTER_UNREGISTERED,
)
from .discovery import DiscoverySettings, discover_printers
from .events import EventBus, EventListener
from .exceptions import PrinterError, PrinterErrorCode
from .factory import PrinterFactory
from .models import (
    PrinterConfig,
    PrinterDiscoveryResult,
    PrinterEvent,
    PrinterEventType,
    normalize_config_keys,
)
from .printer.interface import PrinterDriver
from .security import sanitize_log_message

_LOGGER = logging.getLogger(__name__)

_CONFIG_FIELDS = frozenset(f.name for f in fields(PrinterConfig))


class PrinterRegistry:
    """Owns every printer driver and tracks the default printer.

    Driver events are re-emitted unchanged on the registry's own stream,
    next to the registry lifecycle events, so one subscription covers all
    printers. While the registry holds printers exactly one of them is the
    default.
    """

    def __init__(
        self,
        factory: PrinterFactory | None = None,
        discovery_settings: DiscoverySettings | None = None,
    ) -> None:
        self._factory = factory or PrinterFactory()
        self._discovery_settings = discovery_settings or DiscoverySettings()
        self._printers: dict[str, PrinterDriver] = {}
        self._configs: dict[str, PrinterConfig] = {}
        self._forwarders: dict[str, list[Callable[[], None]]] = {}
        self._default_id: str | None = None
        self._bus = EventBus()

    @property
    def factory(self) -> PrinterFactory:
        return self._factory

    @property
    def default_printer_id(self) -> str | None:
        return self._default_id

    def _emit(self, event_type: str, printer_id: str | None = None, **data: Any) -> None:
        self._bus.emit(PrinterEvent(type=event_type, printer_id=printer_id, data=data))

    def _forward_events(self, printer_id: str, driver: PrinterDriver) -> None:
        self._forwarders[printer_id] = [driver.on(event_type, self._bus.emit) for event_type in PrinterEventType]

    def _stop_forwarding(self, printer_id: str) -> None:
        for unsubscribe in self._forwarders.pop(printer_id, []):
            unsubscribe()

    def _require(self, printer_id: str) -> PrinterDriver:
        driver = self._printers.get(printer_id)
        if driver is None:
            raise PrinterError(
                f"Printer not found: {sanitize_log_message(str(printer_id))}",
                PrinterErrorCode.PRINTER_NOT_FOUND,
                printer_id,
            )
        return driver

    def _set_default(self, printer_id: str | None) -> None:
        """Move the default flag and emit ``default_printer_changed`` if it moved."""
        old_id = self._default_id
        for config_id, config in self._configs.items():
            config.is_default = config_id == printer_id
        if old_id == printer_id:
            return
        self._default_id = printer_id
        _LOGGER.debug("Default printer changed from %s to %s", old_id, printer_id)
        self._emit(EVENT_DEFAULT_PRINTER_CHANGED, printer_id, old_default=old_id, new_default=printer_id)

    async def register_printer(self, config: PrinterConfig) -> str:
        """Create and register a driver for ``config``; return its id."""
        if config.id in self._printers:
            raise PrinterError(
                f"Printer {sanitize_log_message(config.id)} is already registered",
                PrinterErrorCode.INVALID_CONFIG,
                config.id,
            )
        driver = self._factory.create_printer(config)
        stored = config.copy()
        self._printers[config.id] = driver
        self._configs[config.id] = stored
        self._forward_events(config.id, driver)
        _LOGGER.info("Registered printer %s (%s)", config.id, sanitize_log_message(config.name))
        self._emit(EVENT_PRINTER_REGISTERED, config.id, config=stored.copy())

        if self._default_id is None or config.is_default:
            self._set_default(config.id)
        else:
            stored.is_default = False
        return config.id

    async def unregister_printer(self, printer_id: str) -> None:
        """Dispose a printer's driver and forget it."""
        driver = self._require(printer_id)
        self._stop_forwarding(printer_id)
        try:
            await driver.dispose()
        except Exception as err:
            _LOGGER.warning("Failed to dispose printer %s: %s", printer_id, sanitize_log_message(str(err)))
        del self._printers[printer_id]
        del self._configs[printer_id]
        _LOGGER.info("Unregistered printer %s", printer_id)
        self._emit(EVENT_PRINTER_UNREGISTERED, printer_id)

        if self._default_id == printer_id:
            self._set_default(next(iter(self._printers), None))

    def get_printer(self, printer_id: str) -> PrinterDriver | None:
        return self._printers.get(printer_id)

    def get_all_printers(self) -> list[PrinterDriver]:
        return list(self._printers.values())

    def get_available_printers(self) -> list[PrinterDriver]:
        """Return the printers that currently hold an open connection."""
        return [driver for driver in self._printers.values() if driver.is_connected()]

    async def set_default_printer(self, printer_id: str) -> None:
        self._require(printer_id)
        self._set_default(printer_id)

    def get_default_printer(self) -> PrinterDriver | None:
        if self._default_id is None:
            return None
        return self._printers.get(self._default_id)

    def get_printer_config(self, printer_id: str) -> PrinterConfig | None:
        config = self._configs.get(printer_id)
        return config.copy() if config is not None else None

    def get_all_configs(self) -> list[PrinterConfig]:
        return [config.copy() for config in self._configs.values()]

    async def update_printer_config(self, printer_id: str, updates: Mapping[str, Any]) -> PrinterConfig:
        """Apply ``updates`` to a printer's config and rebuild its driver.

        ``updates`` may use snake_case or camelCase keys. The id cannot be
        changed. The new driver is connected only if the old one was.
        """
        old_driver = self._require(printer_id)
        changes = normalize_config_keys(updates)
        changes.pop("id", None)
        make_default = bool(changes.pop("is_default", False))
        unknown = sorted(str(key) for key in changes if key not in _CONFIG_FIELDS)
        if unknown:
            raise PrinterError(
                f"Unknown printer configuration field(s): {sanitize_log_message(', '.join(unknown))}",
                PrinterErrorCode.INVALID_CONFIG,
                printer_id,
            )
        merged = self._configs[printer_id].copy(**changes)

        # Validates the merged config before the old driver is touched
        new_driver = self._factory.create_printer(merged)

        was_connected = old_driver.is_connected()
        self._stop_forwarding(printer_id)
        try:
            await old_driver.dispose()
        except Exception as err:
            _LOGGER.warning("Failed to dispose printer %s: %s", printer_id, sanitize_log_message(str(err)))

        self._printers[printer_id] = new_driver
        self._configs[printer_id] = merged
        self._forward_events(printer_id, new_driver)
        if make_default:
            self._set_default(printer_id)
        _LOGGER.info("Updated configuration of printer %s", printer_id)
        self._emit(EVENT_PRINTER_CONFIG_UPDATED, printer_id, config=merged.copy())

        if was_connected:
            await new_driver.connect()
        return merged.copy()

    async def discover_printers(self) -> list[PrinterDiscoveryResult]:
        return await discover_printers(self._discovery_settings)

    async def validate_printer(self, printer_id: str) -> bool:
        """Run a printer's self-test; False for unknown printers or failures."""
        driver = self._printers.get(printer_id)
        if driver is None:
            return False
        try:
            return await driver.self_test()
        except Exception as err:
            _LOGGER.debug("Self-test of printer %s raised: %s", printer_id, sanitize_log_message(str(err)))
            return False

    def on(self, event_type: str, callback: EventListener) -> Callable[[], None]:
        return self._bus.on(event_type, callback)

    def off(self, event_type: str, callback: EventListener) -> None:
        self._bus.off(event_type, callback)

    async def dispose(self) -> None:
        """Dispose every driver and empty the registry.

        A driver that fails to dispose is logged and does not stop the
        others. Subscribers of the registry itself are kept.
        """
        errors: list[tuple[str, Exception]] = []
        for printer_id, driver in list(self._printers.items()):
            self._stop_forwarding(printer_id)
            try:
                await driver.dispose()
            except Exception as err:
                errors.append((printer_id, err))
        for printer_id, err in errors:
            _LOGGER.warning("Failed to dispose printer %s: %s", printer_id, sanitize_log_message(str(err)))
        self._printers.clear()
        self._configs.clear()
        self._forwarders.clear()
        self._default_id = None
        _LOGGER.debug("Printer registry disposed (%s disposal errors)", len(errors))
