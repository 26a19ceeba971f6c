"""Tests for config templates and ready-made content."""

from datetime import datetime
from typing import Any

import pytest

from printer_hub.content import BarcodeFormat, PrintBarcode, PrintCut, PrintLine, PrintQRCode, PrintText, QRErrorLevel
from printer_hub.exceptions import PrinterError, PrinterErrorCode
from printer_hub.models import PaperSize, PrinterConnectionType, PrinterType, TextAlignment
from printer_hub.templates import (
    create_barcode_content,
    create_cbx_pos_89e_config,
    create_hello_world_content,
    create_qr_code_content,
    create_receipt_content,
    create_test_page_content,
    format_printer_error,
    get_config_template,
    get_connection_examples,
)

NOW = datetime(2024, 5, 1, 12, 30, 0)


def _texts(content: list[Any]) -> list[str]:
    return [item.content for item in content if isinstance(item, PrintText)]


class TestConfigTemplates:
    """Per-type defaults."""

    def test_cbx_defaults(self) -> None:
        config = create_cbx_pos_89e_config("Front Counter", "0416:5011")
        assert config.id.startswith("cbx_")
        assert config.type is PrinterType.CBX_POS_89E
        assert config.connection_type is PrinterConnectionType.USB
        assert config.paper_size is PaperSize.MM_80
        assert config.character_set == "UTF-8"
        assert config.timeout == 3000
        assert config.retry_attempts == 3
        assert config.is_default is False

    def test_cbx_caller_options_win(self) -> None:
        config = create_cbx_pos_89e_config(
            "Bar",
            "COM3",
            id="bar",
            connection_type=PrinterConnectionType.SERIAL,
            paper_size=PaperSize.MM_58,
            timeout=9000,
            is_default=True,
        )
        assert config.id == "bar"
        assert config.connection_type is PrinterConnectionType.SERIAL
        assert config.connection_string == "COM3"
        assert config.paper_size is PaperSize.MM_58
        assert config.timeout == 9000
        assert config.is_default is True

    @pytest.mark.parametrize(
        ("printer_type", "name", "timeout"),
        [
            (PrinterType.CBX_POS_89E, "CBX POS 89E Thermal Printer", 3000),
            ("epson", "Epson Thermal Printer", 4000),
            (PrinterType.STAR, "Star Thermal Printer", 4000),
            (PrinterType.GENERIC, "Generic ESC/POS Printer", 5000),
        ],
    )
    def test_get_config_template(self, printer_type: Any, name: str, timeout: int) -> None:
        template = get_config_template(printer_type)
        assert template["name"] == name
        assert template["timeout"] == timeout
        assert template["type"] is PrinterType(printer_type)
        assert "connection_string" not in template

    def test_unknown_type(self) -> None:
        with pytest.raises(ValueError):
            get_config_template("laser")

    def test_connection_examples(self) -> None:
        assert get_connection_examples(PrinterConnectionType.SERIAL) == ["COM1", "COM3", "/dev/ttyUSB0", "/dev/ttyACM0"]
        everything = get_connection_examples()
        assert set(everything) == {"usb", "serial", "network", "bluetooth"}
        everything["usb"].clear()
        assert get_connection_examples("usb")


class TestContentTemplates:
    """Canned print content."""

    def test_hello_world(self) -> None:
        content = create_hello_world_content("p1", NOW)
        assert "HELLO WORLD!" in _texts(content)
        assert "Printer ID: p1" in _texts(content)
        assert "Printed at: 2024-05-01 12:30:00" in _texts(content)
        assert isinstance(content[-1], PrintCut)

    def test_test_page(self, make_config: Any) -> None:
        texts = _texts(create_test_page_content(make_config()))
        assert "Printer: Front Counter" in texts
        assert "Type: cbx_pos_89e" in texts
        assert "Paper Size: 80mm" in texts
        assert "Connection: 0416:5011" in texts

    def test_receipt_pads_to_paper_width(self, make_config: Any) -> None:
        content = create_receipt_content(
            "Order #42",
            [{"name": "Coffee", "price": "3.50", "qty": 2}, {"name": "Bagel", "price": "2.25"}],
            "9.25",
            store_name="Corner Cafe",
            footer="Thank you!",
            config=make_config(paper_size=PaperSize.MM_58),
            now=NOW,
        )
        texts = _texts(content)
        assert texts[0] == "Corner Cafe"
        assert "2x Coffee" + " " * 19 + "3.50" in texts
        assert all(len(t) == 32 for t in texts if t.startswith(("2x Coffee", "Bagel", "TOTAL:")))
        assert texts[-1] == "Thank you!"
        rules = [item for item in content if isinstance(item, PrintLine)]
        assert [r.length for r in rules] == [32, 32]
        assert isinstance(content[-1], PrintCut)

    def test_receipt_defaults_to_80mm(self) -> None:
        texts = _texts(create_receipt_content("Order", [{"name": "Tea", "price": "1.00"}], "1.00", now=NOW))
        assert len(texts[1]) == 48

    def test_barcode_and_qr(self) -> None:
        [barcode] = [c for c in create_barcode_content("12345678", "EAN8") if isinstance(c, PrintBarcode)]
        assert barcode.format is BarcodeFormat.EAN8
        assert barcode.height == 60
        [qr] = [c for c in create_qr_code_content("https://example.com", size=4, error_level="H")
                if isinstance(c, PrintQRCode)]
        assert qr.error_level is QRErrorLevel.H
        assert qr.alignment is TextAlignment.CENTER


class TestFormatPrinterError:
    """Error display strings."""

    def test_printer_error(self) -> None:
        error = PrinterError("Printer is out of paper", PrinterErrorCode.OUT_OF_PAPER, "p1")
        assert format_printer_error(error) == "OUT_OF_PAPER: Printer is out of paper"

    def test_plain_exception(self) -> None:
        assert format_printer_error(RuntimeError("boom")) == "boom"

    def test_other_values(self) -> None:
        assert format_printer_error("just text") == "just text"
