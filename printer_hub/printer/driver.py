"""ESC/POS printer driver built on python-escpos."""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from collections.abc import Callable, Mapping, Sequence
import contextlib
import logging
import time
from typing import Any, NoReturn

import voluptuous as vol

from ..const import DEFAULT_TIMEOUT_MS, MAX_JOB_HISTORY
from ..content import PrintContent, PrintCut, PrintImage, PrintText, content_list_from_dicts
from ..events import EventListener
from ..exceptions import PrinterError, PrinterErrorCode
from ..models import (
    JobStatus,
    PrinterConfig,
    PrinterEventType,
    PrinterInfo,
    PrinterStatus,
    PrintJob,
    PrintJobConfig,
)
from ..security import sanitize_log_message, validate_numeric_input, validate_timeout
from .images import load_image
from .print_operations import ContentRenderer
from .state import PrinterStateTracker
from .transports import describe_connection, is_bidirectional, is_spooled, open_connection

_LOGGER = logging.getLogger(__name__)

# DLE EOT 2: offline cause status; bit 2 set means the cover is open
_RT_OFFLINE_CAUSE = b"\x10\x04\x02"
_COVER_OPEN_MASK = 0x04
_MAX_COPIES = 99

Connector = Callable[[PrinterConfig], Any]


def _is_timeout(exc: BaseException) -> bool:
    if isinstance(exc, TimeoutError):
        return True
    return "timeout" in type(exc).__name__.lower() or getattr(exc, "errno", None) == 110


class EscposPrinterDriver:
    """Drives one ESC/POS printer over USB, serial, network or Bluetooth.

    The python-escpos printer object is the connection handle. Blocking
    device calls run in the default executor and are serialised by a lock,
    so one job at a time reaches the device.
    """

    _CONNECT_RETRY_DELAY_S = 0.3
    _JOB_RETRY_DELAY_S = 0.3

    def __init__(self, config: PrinterConfig, connector: Connector | None = None) -> None:
        self._config = config
        self._connector: Connector = connector or open_connection
        self._tracker = PrinterStateTracker(config.id)
        self._renderer = ContentRenderer(config)
        self._bidirectional = is_bidirectional(config)
        self._spooled = is_spooled(config)
        self._timeout_s = validate_timeout(config.timeout, DEFAULT_TIMEOUT_MS)
        self._printer: Any = None
        self._lock = asyncio.Lock()
        self._jobs: OrderedDict[str, PrintJob] = OrderedDict()
        self._job_counter = 0

    @property
    def id(self) -> str:
        return self._config.id

    @property
    def config(self) -> PrinterConfig:
        return self._config

    @property
    def status(self) -> PrinterStatus:
        """Return the last known status without touching the device."""
        return self._tracker.status

    @property
    def info(self) -> PrinterInfo:
        return PrinterInfo(
            id=self._config.id,
            name=self._config.name,
            type=self._config.type,
            status=self._tracker.status,
            is_connected=self.is_connected(),
            connection_info=describe_connection(self._config),
            last_error=self._tracker.last_error,
        )

    def is_connected(self) -> bool:
        return self._printer is not None

    def on(self, event_type: str, callback: EventListener) -> Callable[[], None]:
        return self._tracker.on(event_type, callback)

    def off(self, event_type: str, callback: EventListener) -> None:
        self._tracker.off(event_type, callback)

    async def _run(self, func: Callable[..., Any], *args: Any, timeout: float | None = None) -> Any:
        """Run a blocking device call in the executor.

        A timed-out call cannot be interrupted: the timeout is raised only
        after the worker thread has returned, so two calls never share the
        device.
        """
        future = asyncio.get_running_loop().run_in_executor(None, func, *args)
        if timeout is None:
            return await future
        try:
            return await asyncio.wait_for(asyncio.shield(future), timeout)
        except asyncio.TimeoutError:
            try:
                await future
            except Exception as exc:
                _LOGGER.debug(
                    "Timed out call on printer %s later failed: %s", self.id, sanitize_log_message(str(exc))
                )
            raise

    @staticmethod
    def _close(printer: Any) -> None:
        with contextlib.suppress(Exception):
            printer.close()

    def _close_when_opened(self, future: asyncio.Future[Any]) -> None:
        """Close the handle of an abandoned connect attempt once it arrives."""

        def _closer(done: asyncio.Future[Any]) -> None:
            if done.cancelled() or done.exception() is not None:
                return
            _LOGGER.debug("Closing late connection handle of printer %s", self.id)
            done.get_loop().run_in_executor(None, self._close, done.result())

        future.add_done_callback(_closer)

    async def _open_with_retries(self) -> Any:
        loop = asyncio.get_running_loop()
        attempts = 1 + int(self._config.retry_attempts or 0)
        attempt = 0
        while True:
            attempt += 1
            future = loop.run_in_executor(None, self._connector, self._config)
            try:
                return await asyncio.shield(future)
            except asyncio.CancelledError:
                self._close_when_opened(future)
                raise
            except PrinterError:
                raise
            except Exception as exc:
                if attempt >= attempts:
                    raise
                _LOGGER.debug(
                    "Connect to printer %s failed (attempt %s/%s): %s",
                    self.id,
                    attempt,
                    attempts,
                    sanitize_log_message(str(exc)),
                )
                await asyncio.sleep(self._CONNECT_RETRY_DELAY_S)

    async def connect(self) -> None:
        """Open the transport; a no-op when already connected.

        All attempts together are bounded by the configured timeout. No
        status query is sent, since many receipt printers never answer one.
        """
        async with self._lock:
            if self._printer is not None:
                return
            try:
                self._printer = await asyncio.wait_for(self._open_with_retries(), self._timeout_s)
            except Exception as exc:
                self._fail_connect(exc)

            self._tracker.last_error = None
            self._tracker.set_status(PrinterStatus.IDLE)
            self._tracker.emit(PrinterEventType.CONNECTION_RESTORED, {"connection": describe_connection(self._config)})
        _LOGGER.info("Connected to printer %s (%s)", self.id, describe_connection(self._config))

    def _fail_connect(self, exc: Exception) -> NoReturn:
        if isinstance(exc, PrinterError):
            code = exc.code
        elif _is_timeout(exc):
            code = PrinterErrorCode.TIMEOUT
        else:
            code = PrinterErrorCode.CONNECTION_FAILED
        error = PrinterError(
            f"Failed to connect to printer {self._config.name}: {sanitize_log_message(str(exc)) or type(exc).__name__}",
            code,
            self.id,
            exc,
        )
        self._tracker.last_error = error.message
        self._tracker.set_status(PrinterStatus.OFFLINE)
        self._tracker.emit(PrinterEventType.ERROR, {"error": error})
        _LOGGER.warning("%s", error.message)
        raise error from exc

    async def disconnect(self) -> None:
        """Close the transport; a no-op when already disconnected."""
        async with self._lock:
            await self._drop_connection()

    async def _drop_connection(self) -> None:
        if self._printer is None:
            return
        printer, self._printer = self._printer, None
        await self._run(self._close, printer)
        self._tracker.set_status(PrinterStatus.OFFLINE)
        self._tracker.emit(PrinterEventType.CONNECTION_LOST, {})
        _LOGGER.info("Disconnected from printer %s", self.id)

    def _read_fault(self, printer: Any) -> PrinterStatus | None:
        """Query the device for paper-end and cover-open conditions."""
        try:
            if hasattr(printer, "paper_status") and printer.paper_status() == 0:
                return PrinterStatus.OUT_OF_PAPER
            if hasattr(printer, "query_status"):
                response = printer.query_status(_RT_OFFLINE_CAUSE)
                if response and response[0] & _COVER_OPEN_MASK:
                    return PrinterStatus.COVER_OPEN
        except NotImplementedError:
            return None
        except Exception as exc:
            # A printer that does not answer status queries is not a fault
            if _is_timeout(exc):
                return None
            raise
        return None

    def _apply_fault(self, fault: PrinterStatus | None) -> None:
        current = self._tracker.status
        if fault is not None:
            if current in (PrinterStatus.IDLE, PrinterStatus.OUT_OF_PAPER, PrinterStatus.COVER_OPEN):
                self._tracker.set_status(fault)
        elif current in (PrinterStatus.OUT_OF_PAPER, PrinterStatus.COVER_OPEN):
            self._tracker.set_status(PrinterStatus.IDLE)

    async def get_status(self) -> PrinterStatus:
        """Return the current status, refreshing hardware faults when possible."""
        if self._printer is None:
            return PrinterStatus.OFFLINE
        if not self._bidirectional or self._lock.locked():
            return self._tracker.status
        async with self._lock:
            if self._printer is None:
                return PrinterStatus.OFFLINE
            try:
                fault = await self._run(self._read_fault, self._printer, timeout=self._timeout_s)
            except Exception as exc:
                _LOGGER.debug("Status query for printer %s failed: %s", self.id, sanitize_log_message(str(exc)))
                self._tracker.last_error = sanitize_log_message(str(exc))
                await self._drop_connection()
                return PrinterStatus.OFFLINE
            self._apply_fault(fault)
        return self._tracker.status

    async def get_info(self) -> PrinterInfo:
        await self.get_status()
        return self.info

    def _check_ready(self) -> None:
        """Reject work the printer cannot take; never touches job state."""
        if self._printer is None:
            raise PrinterError(
                f"Printer {self._config.name} is not connected", PrinterErrorCode.PRINTER_OFFLINE, self.id
            )
        status = self._tracker.status
        if status is PrinterStatus.OUT_OF_PAPER:
            raise PrinterError(f"Printer {self._config.name} is out of paper", PrinterErrorCode.OUT_OF_PAPER, self.id)
        if status is PrinterStatus.COVER_OPEN:
            raise PrinterError(f"Printer {self._config.name} cover is open", PrinterErrorCode.COVER_OPEN, self.id)
        if status is PrinterStatus.ERROR:
            raise PrinterError(
                f"Printer {self._config.name} is in an error state; recover or reconnect first",
                PrinterErrorCode.COMMAND_ERROR,
                self.id,
            )

    def _new_job(self, content: list[PrintContent], job_config: PrintJobConfig) -> PrintJob:
        self._job_counter += 1
        job_id = f"job_{self.id}_{self._job_counter}_{time.time_ns() // 1_000_000}"
        job = PrintJob(id=job_id, printer_id=self.id, content=content, config=job_config)
        self._jobs[job_id] = job
        while len(self._jobs) > MAX_JOB_HISTORY:
            self._jobs.popitem(last=False)
        return job

    def get_job(self, job_id: str) -> PrintJob | None:
        return self._jobs.get(job_id)

    async def print(
        self,
        content: Sequence[PrintContent | Mapping[str, Any]],
        job_config: PrintJobConfig | None = None,
    ) -> str:
        """Print ``content`` as one job and return the job id."""
        job_config = job_config or PrintJobConfig()
        try:
            items = content_list_from_dicts(content)
        except (vol.Invalid, ValueError) as err:
            raise PrinterError(f"Invalid print content: {err}", PrinterErrorCode.COMMAND_ERROR, self.id, err) from err
        self._check_ready()
        async with self._lock:
            self._check_ready()
            job = self._new_job(items, job_config)
            await self._run_job(job)
        return job.id

    async def _run_job(self, job: PrintJob) -> None:
        copies = validate_numeric_input(job.config.copies, 1, _MAX_COPIES, "copies")
        max_attempts = 1 + (int(self._config.retry_attempts or 0) if job.config.retry_on_error else 0)
        timeout_s = job.config.timeout / 1000.0 if job.config.timeout else None

        job.status = JobStatus.PROCESSING
        self._tracker.set_status(PrinterStatus.PRINTING)
        self._tracker.emit(PrinterEventType.JOB_STARTED, {"job_id": job.id, "job": job})
        _LOGGER.debug("Print job %s started on %s (%s items)", job.id, self.id, len(job.content))

        while True:
            job.attempts += 1
            try:
                images = {
                    index: await load_image(item)
                    for index, item in enumerate(job.content)
                    if isinstance(item, PrintImage)
                }
                await self._run(self._execute, self._printer, job, copies, images, timeout=timeout_s)
            except Exception as exc:
                _LOGGER.warning(
                    "Print job %s attempt %s/%s failed: %s",
                    job.id,
                    job.attempts,
                    max_attempts,
                    sanitize_log_message(str(exc)),
                )
                if job.attempts >= max_attempts:
                    self._fail_job(job, exc)
                await asyncio.sleep(self._JOB_RETRY_DELAY_S)
                continue
            job.status = JobStatus.COMPLETED
            self._tracker.set_status(PrinterStatus.IDLE)
            self._tracker.emit(PrinterEventType.JOB_COMPLETED, {"job_id": job.id, "job": job})
            _LOGGER.info("Print job %s completed on %s", job.id, self.id)
            return

    def _fail_job(self, job: PrintJob, exc: Exception) -> NoReturn:
        if isinstance(exc, PrinterError):
            code = exc.code
        elif _is_timeout(exc):
            code = PrinterErrorCode.TIMEOUT
        else:
            code = PrinterErrorCode.COMMAND_ERROR
        error = PrinterError(
            f"Print job {job.id} failed: {sanitize_log_message(str(exc)) or type(exc).__name__}",
            code,
            self.id,
            exc,
        )
        job.status = JobStatus.FAILED
        job.error = error.message
        self._tracker.last_error = error.message
        self._tracker.set_status(PrinterStatus.ERROR)
        self._tracker.emit(PrinterEventType.JOB_FAILED, {"job_id": job.id, "job": job, "error": error})
        raise error from exc

    def _execute(self, printer: Any, job: PrintJob, copies: int, images: Mapping[int, Any]) -> None:
        ends_with_cut = bool(job.content) and isinstance(job.content[-1], PrintCut)
        for _ in range(copies):
            self._renderer.render(printer, job.content, images)
            if job.config.paper_cut and not ends_with_cut:
                self._renderer.cut(printer)
        if job.config.open_cash_drawer:
            self._renderer.open_cash_drawer(printer)
        self._flush(printer)

    def _flush(self, printer: Any) -> None:
        if hasattr(printer, "flush"):
            printer.flush()
        elif self._spooled:
            # Spooler printers submit the pending document on close
            printer.close()
            printer.open()

    async def print_text(self, text: str) -> str:
        return await self.print([PrintText(content=text)])

    async def print_test_page(self) -> str:
        from ..templates import create_test_page_content

        return await self.print(create_test_page_content(self._config))

    async def _device_command(self, name: str, func: Callable[..., None], *args: Any) -> None:
        async with self._lock:
            if self._printer is None:
                raise PrinterError(
                    f"Printer {self._config.name} is not connected", PrinterErrorCode.PRINTER_OFFLINE, self.id
                )
            printer = self._printer

            def _do() -> None:
                func(printer, *args)
                self._flush(printer)

            try:
                await self._run(_do, timeout=self._timeout_s)
            except PrinterError:
                raise
            except Exception as exc:
                code = PrinterErrorCode.TIMEOUT if _is_timeout(exc) else PrinterErrorCode.COMMAND_ERROR
                raise PrinterError(
                    f"{name} failed on printer {self._config.name}: {sanitize_log_message(str(exc))}",
                    code,
                    self.id,
                    exc,
                ) from exc

    async def cut_paper(self, partial: bool = False) -> None:
        await self._device_command("Cut", lambda p: self._renderer.cut(p, partial=partial))

    async def open_cash_drawer(self) -> None:
        await self._device_command("Cash drawer", self._renderer.open_cash_drawer)

    async def feed_paper(self, lines: int = 1) -> None:
        await self._device_command("Feed", self._renderer.feed, lines)

    async def self_test(self) -> bool:
        """Return True if the printer answers; never raises."""
        if self._printer is None:
            return False
        try:
            async with self._lock:
                if self._printer is None:
                    return False
                if not self._bidirectional:
                    return True
                return bool(await self._run(self._printer.is_online, timeout=self._timeout_s))
        except Exception as exc:
            _LOGGER.debug("Self-test of printer %s failed: %s", self.id, sanitize_log_message(str(exc)))
            return False

    async def recover(self) -> PrinterStatus:
        """Leave the Error state once the device reports no fault."""
        async with self._lock:
            if self._printer is None:
                raise PrinterError(
                    f"Printer {self._config.name} is not connected", PrinterErrorCode.PRINTER_OFFLINE, self.id
                )
            fault: PrinterStatus | None = None
            if self._bidirectional:
                try:
                    fault = await self._run(self._read_fault, self._printer, timeout=self._timeout_s)
                except Exception as exc:
                    await self._drop_connection()
                    raise PrinterError(
                        f"Lost connection to printer {self._config.name}",
                        PrinterErrorCode.PRINTER_OFFLINE,
                        self.id,
                        exc,
                    ) from exc
            if fault is None:
                self._tracker.last_error = None
                self._tracker.set_status(PrinterStatus.IDLE)
            else:
                self._tracker.set_status(fault)
            return self._tracker.status

    async def dispose(self) -> None:
        """Disconnect and drop all listeners."""
        await self.disconnect()
        self._tracker.clear_listeners()
