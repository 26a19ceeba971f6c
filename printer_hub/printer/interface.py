"""Capability set every printer driver provides."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from ..content import PrintContent
from ..events import EventListener
from ..models import PrinterConfig, PrinterInfo, PrinterStatus, PrintJob, PrintJobConfig


@runtime_checkable
class PrinterDriver(Protocol):
    """A single physical printer.

    One driver owns one connection. Device I/O is serialised per driver, so
    at most one job runs on a printer at a time.
    """

    @property
    def id(self) -> str: ...

    @property
    def config(self) -> PrinterConfig: ...

    @property
    def status(self) -> PrinterStatus: ...

    @property
    def info(self) -> PrinterInfo: ...

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    def is_connected(self) -> bool: ...

    async def get_status(self) -> PrinterStatus: ...

    async def get_info(self) -> PrinterInfo: ...

    async def print(self, content: Sequence[PrintContent], job_config: PrintJobConfig | None = None) -> str: ...

    async def print_text(self, text: str) -> str: ...

    async def print_test_page(self) -> str: ...

    async def cut_paper(self, partial: bool = False) -> None: ...

    async def open_cash_drawer(self) -> None: ...

    async def feed_paper(self, lines: int = 1) -> None: ...

    async def self_test(self) -> bool: ...

    async def recover(self) -> PrinterStatus: ...

    def get_job(self, job_id: str) -> PrintJob | None: ...

    def on(self, event_type: str, callback: EventListener) -> Callable[[], None]: ...

    def off(self, event_type: str, callback: EventListener) -> None: ...

    async def dispose(self) -> None: ...
