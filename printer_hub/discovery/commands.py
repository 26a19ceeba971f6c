"""Run OS inventory tools without blocking the event loop."""

from __future__ import annotations

import asyncio
import logging

from ..const import DISCOVERY_COMMAND_TIMEOUT_S

_LOGGER = logging.getLogger(__name__)


async def run_command(args: list[str], timeout: float = DISCOVERY_COMMAND_TIMEOUT_S) -> str:
    """Run ``args`` and return its stdout.

    Raises ``FileNotFoundError`` when the tool is missing, ``asyncio.TimeoutError``
    when it does not finish in time and ``RuntimeError`` on a non-zero exit.
    """
    proc = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.DEVNULL,
    )
    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise
    if proc.returncode != 0:
        raise RuntimeError(f"{args[0]} exited with status {proc.returncode}")
    _LOGGER.debug("%s returned %s bytes", args[0], len(stdout))
    return stdout.decode("utf-8", errors="replace")
