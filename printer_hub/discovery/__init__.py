"""Printer discovery across USB, the OS spooler and the local network."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
import logging

from ..const import (
    DEFAULT_NETWORK_PORT,
    DISCOVERY_COMMAND_TIMEOUT_S,
    DISCOVERY_NETWORK_CANDIDATES,
    DISCOVERY_PROBE_TIMEOUT_S,
)
from ..models import PrinterDiscoveryResult
from .heuristics import guess_connection_type, guess_printer_type, is_likely_thermal_printer
from .network import discover_network_printers
from .spooler import discover_spooler_printers
from .usb import discover_usb_printers

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "DiscoverySettings",
    "discover_network_printers",
    "discover_printers",
    "discover_spooler_printers",
    "discover_usb_printers",
    "guess_connection_type",
    "guess_printer_type",
    "is_likely_thermal_printer",
]


@dataclass
class DiscoverySettings:
    """Which probes run and how long they may take."""

    usb: bool = True
    spooler: bool = True
    network: bool = True
    network_candidates: tuple[str, ...] = DISCOVERY_NETWORK_CANDIDATES
    network_port: int = DEFAULT_NETWORK_PORT
    probe_timeout: float = DISCOVERY_PROBE_TIMEOUT_S
    command_timeout: float = DISCOVERY_COMMAND_TIMEOUT_S


async def discover_printers(settings: DiscoverySettings | None = None) -> list[PrinterDiscoveryResult]:
    """Run the enabled probes concurrently and merge their results.

    A failing probe contributes nothing; results are de-duplicated by id,
    first occurrence wins.
    """
    settings = settings or DiscoverySettings()
    probes: dict[str, Awaitable[list[PrinterDiscoveryResult]]] = {}
    if settings.usb:
        probes["usb"] = discover_usb_printers()
    if settings.spooler:
        probes["spooler"] = discover_spooler_printers(settings.command_timeout)
    if settings.network:
        probes["network"] = discover_network_printers(
            settings.network_candidates, settings.network_port, settings.probe_timeout
        )

    outcomes = await asyncio.gather(*probes.values(), return_exceptions=True)
    results: dict[str, PrinterDiscoveryResult] = {}
    for name, outcome in zip(probes, outcomes):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            _LOGGER.debug("%s discovery failed: %s", name, outcome)
            continue
        for result in outcome:
            results.setdefault(result.id, result)

    _LOGGER.debug("Discovered %s printers", len(results))
    return list(results.values())
