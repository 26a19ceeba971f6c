"""Input validation and log sanitising helpers."""

from __future__ import annotations

import os
import re
from urllib.parse import urlparse

MAX_TEXT_LENGTH = 10000
MAX_QR_DATA_LENGTH = 2953
MAX_BARCODE_LENGTH = 255
MAX_FEED_LINES = 50
MAX_LOG_MESSAGE_LENGTH = 500
ALLOWED_IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".bmp")

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_SECRET_PATTERN = re.compile(r"(?i)(password|passwd|token|secret|api[_-]?key)=([^\s&]+)")

# Digits-only symbologies and their accepted data lengths
_NUMERIC_BARCODES: dict[str, tuple[int, ...]] = {
    "EAN13": (12, 13),
    "EAN8": (7, 8),
    "UPC-A": (11, 12),
    "UPC-E": (6, 7, 8, 11, 12),
}
SUPPORTED_BARCODES = ("CODE128", "CODE39", "EAN13", "EAN8", "UPC-A", "UPC-E")


def sanitize_log_message(message: str, sensitive_keys: list[str] | None = None) -> str:
    """Strip control characters and obvious secrets from a log message."""
    cleaned = _CONTROL_CHARS.sub("", str(message))
    cleaned = _SECRET_PATTERN.sub(r"\1=***", cleaned)
    for key in sensitive_keys or []:
        cleaned = re.sub(rf"(?i)({re.escape(key)})=([^\s&]+)", r"\1=***", cleaned)
    if len(cleaned) > MAX_LOG_MESSAGE_LENGTH:
        cleaned = cleaned[:MAX_LOG_MESSAGE_LENGTH] + "..."
    return cleaned


def validate_numeric_input(value: object, min_value: int, max_value: int, name: str) -> int:
    """Return ``value`` as an int within ``[min_value, max_value]`` or raise ValueError."""
    try:
        number = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as err:
        raise ValueError(f"{name} must be an integer") from err
    if number < min_value or number > max_value:
        raise ValueError(f"{name} must be between {min_value} and {max_value}")
    return number


def validate_timeout(timeout_ms: float | None, default_ms: int) -> float:
    """Return a usable timeout in seconds; zero or missing means the default."""
    if not timeout_ms or timeout_ms <= 0:
        return default_ms / 1000.0
    return float(timeout_ms) / 1000.0


def validate_text_input(text: str) -> str:
    if not isinstance(text, str):
        raise ValueError("text must be a string")
    if len(text) > MAX_TEXT_LENGTH:
        raise ValueError(f"text exceeds {MAX_TEXT_LENGTH} characters")
    return text.replace("\x00", "")


def validate_qr_data(data: str) -> str:
    if not data:
        raise ValueError("QR data must not be empty")
    if len(data.encode("utf-8")) > MAX_QR_DATA_LENGTH:
        raise ValueError(f"QR data exceeds {MAX_QR_DATA_LENGTH} bytes")
    return data


def validate_barcode_data(code: str, bc: str) -> tuple[str, str]:
    """Check barcode data against its symbology; return ``(code, bc)``."""
    symbology = (bc or "").upper()
    if symbology not in SUPPORTED_BARCODES:
        raise ValueError(f"Unsupported barcode type: {bc}")
    if not code:
        raise ValueError("Barcode data must not be empty")
    if len(code) > MAX_BARCODE_LENGTH:
        raise ValueError(f"Barcode data exceeds {MAX_BARCODE_LENGTH} characters")
    lengths = _NUMERIC_BARCODES.get(symbology)
    if lengths is not None:
        if not code.isdigit():
            raise ValueError(f"{symbology} barcodes accept digits only")
        if len(code) not in lengths:
            raise ValueError(f"{symbology} barcodes need {' or '.join(map(str, lengths))} digits")
    return code, symbology


def validate_image_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Image URL must be an absolute http(s) URL")
    return url


def validate_local_image_path(path: str) -> str:
    """Return the absolute path of a readable image file or raise ValueError."""
    full_path = os.path.abspath(os.path.expanduser(path))
    if not full_path.lower().endswith(ALLOWED_IMAGE_EXTENSIONS):
        raise ValueError(f"Unsupported image file type: {os.path.basename(full_path)}")
    if not os.path.isfile(full_path):
        raise ValueError(f"Image file not found: {full_path}")
    return full_path
