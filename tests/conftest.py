from collections.abc import Callable
from typing import Any

import pytest

from printer_hub.factory import PrinterFactory
from printer_hub.models import PaperSize, PrinterConfig, PrinterConnectionType, PrinterType
from printer_hub.printer.driver import EscposPrinterDriver
from printer_hub.registry import PrinterRegistry


class FakeEscposPrinter:
    """Fake python-escpos printer that records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self.online = True
        self.paper = 2  # 2 = paper adequate, 0 = no paper
        self.offline_cause = b"\x00"
        self.fail_on: dict[str, BaseException] = {}

    def _record(self, name: str, *args: Any, **kwargs: Any) -> None:
        self.calls.append((name, args, kwargs))
        exc = self.fail_on.get(name)
        if exc is not None:
            raise exc

    def names(self) -> list[str]:
        """Return the recorded method names in call order."""
        return [name for name, _, _ in self.calls]

    def calls_to(self, name: str) -> list[tuple[tuple[Any, ...], dict[str, Any]]]:
        return [(args, kwargs) for n, args, kwargs in self.calls if n == name]

    @property
    def output(self) -> str:
        """Return all text written through ``text()``."""
        return "".join(args[0] for args, _ in self.calls_to("text"))

    def open(self) -> None:
        self._record("open")

    def close(self) -> None:
        self._record("close")

    def set_with_default(self, **kwargs: Any) -> None:
        self._record("set_with_default", **kwargs)

    def set(self, **kwargs: Any) -> None:
        self._record("set", **kwargs)

    def text(self, txt: str) -> None:
        self._record("text", txt)

    def ln(self, count: int = 1) -> None:
        self._record("ln", count)

    def cut(self, mode: str = "FULL", feed: bool = True) -> None:
        self._record("cut", mode=mode)

    def barcode(self, code: str, bc: str, **kwargs: Any) -> None:
        self._record("barcode", code, bc, **kwargs)

    def qr(self, content: str, **kwargs: Any) -> None:
        self._record("qr", content, **kwargs)

    def image(self, img_source: Any, **kwargs: Any) -> None:
        self._record("image", img_source, **kwargs)

    def cashdraw(self, pin: int) -> None:
        self._record("cashdraw", pin)

    def charcode(self, code: str = "AUTO") -> None:
        self._record("charcode", code)

    def _raw(self, msg: bytes) -> None:
        self._record("_raw", msg)

    def is_online(self) -> bool:
        self._record("is_online")
        return self.online

    def paper_status(self) -> int:
        self._record("paper_status")
        return self.paper

    def query_status(self, mode: bytes) -> bytes:
        self._record("query_status", mode)
        return self.offline_cause


@pytest.fixture(autouse=True)
def no_retry_delays(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(EscposPrinterDriver, "_CONNECT_RETRY_DELAY_S", 0)
    monkeypatch.setattr(EscposPrinterDriver, "_JOB_RETRY_DELAY_S", 0)


@pytest.fixture
def fake_printer() -> FakeEscposPrinter:
    return FakeEscposPrinter()


@pytest.fixture
def connector(fake_printer: FakeEscposPrinter) -> Callable[[PrinterConfig], FakeEscposPrinter]:
    """Connector handing out the shared fake printer."""

    def _connect(config: PrinterConfig) -> FakeEscposPrinter:
        fake_printer.open()
        return fake_printer

    return _connect


@pytest.fixture
def make_config() -> Callable[..., PrinterConfig]:
    """Build a valid USB printer config, overriding any field."""

    def _make(**overrides: Any) -> PrinterConfig:
        values: dict[str, Any] = {
            "id": "p1",
            "name": "Front Counter",
            "type": PrinterType.CBX_POS_89E,
            "connection_type": PrinterConnectionType.USB,
            "connection_string": "0416:5011",
            "paper_size": PaperSize.MM_80,
            "character_set": "UTF-8",
            "timeout": 3000,
            "retry_attempts": 2,
        }
        values.update(overrides)
        return PrinterConfig(**values)

    return _make


@pytest.fixture
def driver(make_config: Callable[..., PrinterConfig], connector: Any) -> EscposPrinterDriver:
    return EscposPrinterDriver(make_config(), connector)


@pytest.fixture
def factory(connector: Any) -> PrinterFactory:
    return PrinterFactory(connector)


@pytest.fixture
def registry(factory: PrinterFactory) -> PrinterRegistry:
    return PrinterRegistry(factory)
