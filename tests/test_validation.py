"""Tests for input validation and log sanitising."""

from pathlib import Path
from typing import Any

import pytest

from printer_hub.models import PrinterConnectionType
from printer_hub.security import (
    MAX_LOG_MESSAGE_LENGTH,
    sanitize_log_message,
    validate_barcode_data,
    validate_image_url,
    validate_local_image_path,
    validate_numeric_input,
    validate_qr_data,
    validate_text_input,
    validate_timeout,
)
from printer_hub.validation import validate_connection_string


class TestSanitizeLogMessage:
    """Log message cleaning."""

    def test_masks_secrets(self) -> None:
        assert sanitize_log_message("connect token=abc123 failed") == "connect token=*** failed"
        assert sanitize_log_message("url?api_key=xyz&x=1") == "url?api_key=***&x=1"

    def test_extra_sensitive_keys(self) -> None:
        assert sanitize_log_message("pin=1234", ["pin"]) == "pin=***"

    def test_strips_control_characters(self) -> None:
        assert sanitize_log_message("bad\x07 byte\x1b") == "bad byte"
        assert sanitize_log_message("two\nlines") == "two\nlines"

    def test_truncates(self) -> None:
        cleaned = sanitize_log_message("x" * (MAX_LOG_MESSAGE_LENGTH + 10))
        assert len(cleaned) == MAX_LOG_MESSAGE_LENGTH + 3
        assert cleaned.endswith("...")


class TestInputValidation:
    """Print input checks."""

    def test_numeric_input(self) -> None:
        assert validate_numeric_input("3", 1, 5, "copies") == 3
        with pytest.raises(ValueError, match="between 1 and 5"):
            validate_numeric_input(0, 1, 5, "copies")
        with pytest.raises(ValueError, match="must be an integer"):
            validate_numeric_input("many", 1, 5, "copies")

    def test_timeout(self) -> None:
        assert validate_timeout(2500, 5000) == 2.5
        assert validate_timeout(None, 5000) == 5.0
        assert validate_timeout(-1, 3000) == 3.0

    def test_text_input(self) -> None:
        assert validate_text_input("a\x00b") == "ab"
        with pytest.raises(ValueError):
            validate_text_input("x" * 10001)
        with pytest.raises(ValueError):
            validate_text_input(42)  # type: ignore[arg-type]

    def test_qr_data(self) -> None:
        assert validate_qr_data("https://example.com") == "https://example.com"
        with pytest.raises(ValueError):
            validate_qr_data("")
        with pytest.raises(ValueError):
            validate_qr_data("x" * 3000)

    @pytest.mark.parametrize(
        ("code", "bc", "expected"),
        [
            ("HELLO-123", "code128", ("HELLO-123", "CODE128")),
            ("400638133393", "EAN13", ("400638133393", "EAN13")),
            ("1234567", "EAN8", ("1234567", "EAN8")),
            ("012345", "UPC-E", ("012345", "UPC-E")),
        ],
    )
    def test_valid_barcodes(self, code: str, bc: str, expected: tuple[str, str]) -> None:
        assert validate_barcode_data(code, bc) == expected

    @pytest.mark.parametrize(
        ("code", "bc"),
        [("12345", "EAN13"), ("ABCDEFG", "EAN8"), ("123", "PDF417"), ("", "CODE128"), ("x" * 256, "CODE39")],
    )
    def test_invalid_barcodes(self, code: str, bc: str) -> None:
        with pytest.raises(ValueError):
            validate_barcode_data(code, bc)

    def test_image_url(self) -> None:
        assert validate_image_url("https://example.com/logo.png") == "https://example.com/logo.png"
        for url in ("ftp://example.com/logo.png", "logo.png", "http://"):
            with pytest.raises(ValueError):
                validate_image_url(url)

    def test_local_image_path(self, tmp_path: Path) -> None:
        logo = tmp_path / "logo.PNG"
        logo.write_bytes(b"\x89PNG")
        assert validate_local_image_path(str(logo)) == str(logo)
        with pytest.raises(ValueError, match="Unsupported image file type"):
            validate_local_image_path(str(tmp_path / "notes.txt"))
        with pytest.raises(ValueError, match="not found"):
            validate_local_image_path(str(tmp_path / "missing.png"))


class TestConnectionStrings:
    """Per-transport connection string shapes."""

    @pytest.mark.parametrize(
        ("connection_string", "connection_type", "expected"),
        [
            ("0416:5011", PrinterConnectionType.USB, True),
            ("CBX_POS_89E", "usb", True),
            ("COM3", PrinterConnectionType.SERIAL, True),
            ("/dev/ttyACM0", PrinterConnectionType.SERIAL, True),
            ("/dev/cu.usbserial-1410", PrinterConnectionType.SERIAL, True),
            ("/dev/lp0", PrinterConnectionType.SERIAL, False),
            ("printer.local:9100", PrinterConnectionType.NETWORK, True),
            ("printer.local", PrinterConnectionType.NETWORK, False),
            ("printer.local:abc", PrinterConnectionType.NETWORK, False),
            ("00:11:22:33:44:55", PrinterConnectionType.BLUETOOTH, True),
            ("/dev/rfcomm0", PrinterConnectionType.BLUETOOTH, True),
            ("printer", PrinterConnectionType.BLUETOOTH, False),
            ("COM3", "infrared", False),
        ],
    )
    def test_shapes(self, connection_string: str, connection_type: Any, expected: bool) -> None:
        assert validate_connection_string(connection_string, connection_type) is expected

    def test_non_string(self) -> None:
        assert validate_connection_string(None, PrinterConnectionType.USB) is False  # type: ignore[arg-type]
