"""Utility functions for value mapping in printer operations."""

from __future__ import annotations

from typing import Any

from ..const import DEFAULT_ALIGN
from ..content import BarcodeFormat
from ..models import FontSize

_BARCODE_NAMES: dict[str, str] = {
    BarcodeFormat.CODE128.value: "CODE128",
    BarcodeFormat.CODE39.value: "CODE39",
    BarcodeFormat.EAN13.value: "EAN13",
    BarcodeFormat.EAN8.value: "EAN8",
    BarcodeFormat.UPC_A.value: "UPC-A",
    BarcodeFormat.UPC_E.value: "UPC-E",
}


def map_align(align: str | None) -> str:
    """Map alignment string to escpos alignment value."""
    if not align:
        return DEFAULT_ALIGN
    align = str(align.value if hasattr(align, "value") else align).lower()
    return align if align in ("left", "center", "right") else DEFAULT_ALIGN


def map_underline(underline: bool | str | None) -> int:
    """Map an underline toggle or name to escpos underline value."""
    if isinstance(underline, bool):
        return 1 if underline else 0
    mapping = {"none": 0, "single": 1, "double": 2}
    if not underline:
        return 0
    return mapping.get(underline.lower(), 0)


def map_multiplier(val: str | int | None) -> int:
    """Map multiplier string or int to escpos multiplier value (1-8).

    Accepts named sizes ("normal", "double", "triple") or numeric values
    (int or numeric string). Values are clamped to the 1-8 range supported
    by python-escpos custom_size.
    """
    if val is None:
        return 1
    if isinstance(val, int):
        return max(1, min(8, val))
    mapping = {"normal": 1, "double": 2, "triple": 3}
    named = mapping.get(str(val).lower())
    if named is not None:
        return named
    try:
        return max(1, min(8, int(val)))
    except (ValueError, TypeError):
        return 1


def map_cut(partial: bool | str | None) -> str:
    """Map a cut request to the escpos cut mode."""
    if isinstance(partial, str):
        return "PART" if partial.lower() in ("partial", "part") else "FULL"
    return "PART" if partial else "FULL"


def map_font_size(size: FontSize | str | None) -> dict[str, Any]:
    """Map a font size class to escpos ``set`` arguments."""
    size_v = FontSize(size) if size else FontSize.NORMAL
    if size_v is FontSize.SMALL:
        return {"font": "b", "double_height": False, "double_width": False}
    if size_v is FontSize.LARGE:
        return {"font": "a", "double_height": True, "double_width": False}
    if size_v is FontSize.EXTRA_LARGE:
        return {"font": "a", "double_height": True, "double_width": True}
    return {"font": "a", "double_height": False, "double_width": False}


def map_barcode_format(fmt: BarcodeFormat | str) -> str:
    """Map a barcode format to the python-escpos symbology name."""
    key = str(fmt.value if hasattr(fmt, "value") else fmt).upper()
    return _BARCODE_NAMES.get(key, key.replace("_", "-"))
