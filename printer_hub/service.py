"""Printer service: the single entry point for printing and printer management."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
import logging
from typing import Any

from .config_store import ConfigStore, parse_config_document
from .const import (
    DEFAULT_CHARACTER_SET,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_TIMEOUT_MS,
    EVENT_DEFAULT_PRINTER_CHANGED,
    EVENT_PRINTER_ADDED,
    EVENT_PRINTER_CONFIG_UPDATED,
    EVENT_PRINTER_REGISTERED,
    EVENT_PRINTER_REMOVED,
    EVENT_PRINTER_UNREGISTERED,
    EVENT_SERVICE_INITIALIZED,
    EVENT_SERVICE_SHUTDOWN,
)
from .content import PrintContent, PrintText
from .events import EventBus, EventListener
from .exceptions import PrinterError, PrinterErrorCode, ServiceNotInitializedError
from .models import (
    PaperSize,
    PrinterConfig,
    PrinterDiscoveryResult,
    PrinterEvent,
    PrinterEventType,
    PrinterInfo,
    PrinterStatus,
    PrinterType,
    PrintJob,
    PrintJobConfig,
)
from .printer.interface import PrinterDriver
from .registry import PrinterRegistry
from .security import sanitize_log_message
from .templates import create_hello_world_content, create_test_print_content

_LOGGER = logging.getLogger(__name__)

_FORWARDED_EVENTS: tuple[str, ...] = (
    EVENT_PRINTER_REGISTERED,
    EVENT_PRINTER_UNREGISTERED,
    EVENT_DEFAULT_PRINTER_CHANGED,
    EVENT_PRINTER_CONFIG_UPDATED,
    *(event_type.value for event_type in PrinterEventType),
)


class PrinterService:
    """Facade over the printer registry and the configuration store.

    Every operation that touches printers or stored configurations requires
    ``initialize()`` first. Printing is the only place that connects a
    printer on demand.
    """

    def __init__(self, registry: PrinterRegistry, config_store: ConfigStore) -> None:
        self._registry = registry
        self._store = config_store
        self._initialized = False
        self._bus = EventBus()
        for event_type in _FORWARDED_EVENTS:
            self._registry.on(event_type, self._bus.emit)

    @property
    def registry(self) -> PrinterRegistry:
        return self._registry

    def is_initialized(self) -> bool:
        return self._initialized

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise ServiceNotInitializedError()

    def _emit(self, event_type: str, printer_id: str | None = None, **data: Any) -> None:
        self._bus.emit(PrinterEvent(type=event_type, printer_id=printer_id, data=data))

    async def _register_all(self, configs: Sequence[PrinterConfig]) -> int:
        registered = 0
        for config in configs:
            try:
                await self._registry.register_printer(config)
            except PrinterError as err:
                _LOGGER.warning("Failed to register printer %s: %s", config.id, err.message)
                continue
            registered += 1
        return registered

    async def initialize(self) -> None:
        """Load stored configurations and register their printers."""
        if self._initialized:
            return
        try:
            await self._store.initialize()
            configs = await self._store.load_all_configs()
        except PrinterError:
            raise
        except Exception as err:
            raise PrinterError(
                f"Failed to initialize printer service: {sanitize_log_message(str(err))}",
                PrinterErrorCode.INVALID_CONFIG,
                cause=err,
            ) from err

        registered = await self._register_all(configs)
        self._initialized = True
        _LOGGER.info("Printer service initialized with %s of %s printers", registered, len(configs))
        self._emit(EVENT_SERVICE_INITIALIZED, printers=registered)

    async def shutdown(self) -> None:
        """Dispose all printers and the store; a no-op when not initialized."""
        if not self._initialized:
            return
        await self._registry.dispose()
        await self._store.dispose()
        self._initialized = False
        _LOGGER.info("Printer service shut down")
        self._emit(EVENT_SERVICE_SHUTDOWN)

    def _resolve(self, printer_id: str | None) -> PrinterDriver:
        """Return the named printer, or the default one when no id is given."""
        if printer_id is None:
            driver = self._registry.get_default_printer()
            if driver is None:
                raise PrinterError("No default printer configured", PrinterErrorCode.PRINTER_NOT_FOUND)
            return driver
        driver = self._registry.get_printer(printer_id)
        if driver is None:
            raise PrinterError(
                f"Printer '{sanitize_log_message(str(printer_id))}' not found",
                PrinterErrorCode.PRINTER_NOT_FOUND,
                printer_id,
            )
        return driver

    async def _sync_store_default(self) -> None:
        default_id = self._registry.default_printer_id
        if default_id is not None and await self._store.load_config(default_id) is not None:
            await self._store.set_default_config(default_id)

    async def print(
        self,
        printer_id: str | None,
        content: Sequence[PrintContent | Mapping[str, Any]],
        job_config: PrintJobConfig | None = None,
    ) -> str:
        """Print ``content`` on a printer (the default one if ``printer_id`` is None).

        Connects the printer first when it is not connected. Returns the job id.
        """
        self._ensure_initialized()
        driver = self._resolve(printer_id)
        if not driver.is_connected():
            await driver.connect()
        return await driver.print(content, job_config)

    async def print_text(
        self, printer_id: str | None, text: str, job_config: PrintJobConfig | None = None
    ) -> str:
        return await self.print(printer_id, [PrintText(content=text)], job_config)

    async def quick_print(self, text: str, printer_id: str | None = None) -> str:
        self._ensure_initialized()
        driver = self._resolve(printer_id)
        if not driver.is_connected():
            await driver.connect()
        return await driver.print_text(text)

    async def print_hello_world(self, printer_id: str | None = None) -> str:
        self._ensure_initialized()
        driver = self._resolve(printer_id)
        return await self.print(driver.id, create_hello_world_content(driver.id))

    async def print_formatting_test(self, printer_id: str | None = None) -> str:
        """Print a page exercising every text style, size and alignment."""
        self._ensure_initialized()
        driver = self._resolve(printer_id)
        return await self.print(driver.id, create_test_print_content(driver.config.name))

    async def add_printer(self, config: PrinterConfig) -> str:
        """Register a printer and store its configuration."""
        self._ensure_initialized()
        printer_id = await self._registry.register_printer(config)
        stored = self._registry.get_printer_config(printer_id) or config
        try:
            await self._store.save_config(stored)
        except PrinterError:
            await self._registry.unregister_printer(printer_id)
            raise
        await self._sync_store_default()
        self._emit(EVENT_PRINTER_ADDED, printer_id, config=stored)
        return printer_id

    async def remove_printer(self, printer_id: str) -> None:
        self._ensure_initialized()
        await self._registry.unregister_printer(printer_id)
        try:
            await self._store.delete_config(printer_id)
        except PrinterError as err:
            if err.code is not PrinterErrorCode.PRINTER_NOT_FOUND:
                raise
            _LOGGER.debug("Printer %s had no stored configuration", printer_id)
        await self._sync_store_default()
        self._emit(EVENT_PRINTER_REMOVED, printer_id)

    async def update_printer(self, printer_id: str, updates: Mapping[str, Any]) -> PrinterConfig:
        """Change a printer's configuration and store the result.

        If the rebuilt printer fails to reconnect, the new configuration is
        still stored before the error is raised.
        """
        self._ensure_initialized()
        before = self._registry.get_printer_config(printer_id)
        try:
            updated = await self._registry.update_printer_config(printer_id, updates)
        except PrinterError:
            applied = self._registry.get_printer_config(printer_id)
            if applied is not None and applied != before:
                await self._store.save_config(applied)
                await self._sync_store_default()
            raise
        await self._store.save_config(updated)
        await self._sync_store_default()
        return updated

    async def set_default_printer(self, printer_id: str) -> None:
        self._ensure_initialized()
        await self._registry.set_default_printer(printer_id)
        await self._sync_store_default()

    def list_printers(self) -> list[PrinterInfo]:
        self._ensure_initialized()
        return [driver.info for driver in self._registry.get_all_printers()]

    async def get_printer_info(self, printer_id: str) -> PrinterInfo:
        self._ensure_initialized()
        return await self._resolve(printer_id).get_info()

    async def connect_printer(self, printer_id: str) -> None:
        self._ensure_initialized()
        await self._resolve(printer_id).connect()

    async def disconnect_printer(self, printer_id: str) -> None:
        self._ensure_initialized()
        await self._resolve(printer_id).disconnect()

    async def test_printer(self, printer_id: str) -> bool:
        self._ensure_initialized()
        return await self._registry.validate_printer(printer_id)

    async def recover_printer(self, printer_id: str) -> PrinterStatus:
        self._ensure_initialized()
        return await self._resolve(printer_id).recover()

    def get_job_status(self, job_id: str) -> PrintJob | None:
        """Look a job up in the recent history of every printer."""
        self._ensure_initialized()
        for driver in self._registry.get_all_printers():
            job = driver.get_job(job_id)
            if job is not None:
                return job
        return None

    async def cancel_job(self, job_id: str) -> None:
        raise PrinterError(
            f"Job cancellation is not supported (job {sanitize_log_message(str(job_id))})",
            PrinterErrorCode.UNSUPPORTED_OPERATION,
        )

    async def discover_printers(self) -> list[PrinterDiscoveryResult]:
        self._ensure_initialized()
        return await self._registry.discover_printers()

    async def auto_configure_printer(self, result: PrinterDiscoveryResult) -> str:
        """Add a printer found by discovery with default settings."""
        self._ensure_initialized()
        config = PrinterConfig(
            id=result.id,
            name=result.name,
            type=result.type,
            connection_type=result.connection_type,
            connection_string=result.connection_string,
            paper_size=PaperSize.MM_80,
            character_set=DEFAULT_CHARACTER_SET,
            timeout=DEFAULT_TIMEOUT_MS,
            retry_attempts=DEFAULT_RETRY_ATTEMPTS,
            is_default=False,
        )
        return await self.add_printer(config)

    async def export_configurations(self) -> str:
        self._ensure_initialized()
        return await self._store.export_configs()

    async def import_configurations(self, data: str | Mapping[str, Any]) -> None:
        """Replace all printers with an exported configuration set.

        Every record must be accepted by the registry's factory; otherwise
        nothing is stored or registered.
        """
        self._ensure_initialized()
        configs, _ = parse_config_document(data)
        factory = self._registry.factory
        for config in configs:
            if not factory.validate_config(config):
                raise PrinterError(
                    f"Failed to import configurations: printer {sanitize_log_message(config.id)} "
                    "is not a valid printer configuration",
                    PrinterErrorCode.INVALID_CONFIG,
                    config.id,
                )
        await self._store.import_configs(data)
        configs = await self._store.load_all_configs()
        await self._registry.dispose()
        registered = await self._register_all(configs)
        _LOGGER.info("Imported %s of %s printers", registered, len(configs))

    def create_config_template(self, printer_type: PrinterType | str) -> PrinterConfig:
        return self._store.get_config_template(printer_type)

    def get_connection_examples(self) -> list[dict[str, Any]]:
        return self._store.get_connection_templates()

    def on(self, event_type: str, callback: EventListener) -> Callable[[], None]:
        return self._bus.on(event_type, callback)

    def off(self, event_type: str, callback: EventListener) -> None:
        self._bus.off(event_type, callback)
