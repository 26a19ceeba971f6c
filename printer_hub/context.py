"""Explicit composition of factory, registry, store and service."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
from types import TracebackType

from .config_store import ConfigStore, JsonConfigStore
from .discovery import DiscoverySettings
from .factory import PrinterFactory
from .printer.driver import Connector
from .registry import PrinterRegistry
from .service import PrinterService

_LOGGER = logging.getLogger(__name__)


def default_config_dir() -> Path:
    """Return the per-user directory holding ``printers.json``."""
    base = os.environ.get("XDG_CONFIG_HOME") or os.environ.get("APPDATA")
    return Path(base) / "printer-hub" if base else Path.home() / ".config" / "printer-hub"


@dataclass
class ServiceSettings:
    """Settings used to compose a ``PrinterContext``."""

    config_dir: str | os.PathLike[str] = field(default_factory=default_config_dir)
    discovery: DiscoverySettings = field(default_factory=DiscoverySettings)


@dataclass
class PrinterContext:
    """The objects behind one printer service.

    Usable as an async context manager that initializes the service on
    entry and shuts it down on exit.
    """

    factory: PrinterFactory
    registry: PrinterRegistry
    config_store: ConfigStore
    service: PrinterService

    async def __aenter__(self) -> PrinterContext:
        await self.service.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.service.shutdown()


def create_printer_context(
    settings: ServiceSettings | None = None,
    connector: Connector | None = None,
) -> PrinterContext:
    """Build a service with a JSON config store in ``settings.config_dir``.

    ``connector`` replaces the function that opens python-escpos printer
    objects for every driver the factory creates.
    """
    settings = settings or ServiceSettings()
    factory = PrinterFactory(connector)
    registry = PrinterRegistry(factory, settings.discovery)
    store = JsonConfigStore(settings.config_dir)
    service = PrinterService(registry, store)
    _LOGGER.debug("Created printer context with configuration directory %s", settings.config_dir)
    return PrinterContext(factory=factory, registry=registry, config_store=store, service=service)
