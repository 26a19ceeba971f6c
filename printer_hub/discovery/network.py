"""Probe candidate hosts for a raw ESC/POS port."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
import socket

from ..const import DEFAULT_NETWORK_PORT, DISCOVERY_PROBE_TIMEOUT_S
from ..models import PrinterConnectionType, PrinterDiscoveryResult, PrinterType


def _can_connect(host: str, port: int, timeout: float) -> bool:
    """Test TCP connectivity to a host and port.

    Args:
        host: Hostname or IP address to connect to
        port: Port number to connect to
        timeout: Connection timeout in seconds

    Returns:
        True if connection succeeds, False otherwise
    """
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


async def discover_network_printers(
    hosts: Iterable[str],
    port: int = DEFAULT_NETWORK_PORT,
    timeout: float = DISCOVERY_PROBE_TIMEOUT_S,
) -> list[PrinterDiscoveryResult]:
    """Return the hosts that accept a TCP connection on ``port``."""
    loop = asyncio.get_running_loop()
    candidates = list(hosts)
    reachable = await asyncio.gather(
        *(loop.run_in_executor(None, _can_connect, host, port, timeout) for host in candidates)
    )
    return [
        PrinterDiscoveryResult(
            id=f"network_{host.replace('.', '_')}",
            name=f"Network Printer ({host})",
            type=PrinterType.GENERIC,
            connection_type=PrinterConnectionType.NETWORK,
            connection_string=f"{host}:{port}",
            is_available=True,
        )
        for host, ok in zip(candidates, reachable)
        if ok
    ]
