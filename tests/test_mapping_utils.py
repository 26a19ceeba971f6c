"""Tests for printer mapping_utils functions."""

import pytest

from printer_hub.content import BarcodeFormat
from printer_hub.models import FontSize, TextAlignment
from printer_hub.printer.mapping_utils import (
    map_align,
    map_barcode_format,
    map_cut,
    map_font_size,
    map_multiplier,
    map_underline,
)


class TestMapMultiplier:
    """Tests for map_multiplier."""

    def test_named(self) -> None:
        assert map_multiplier("normal") == 1
        assert map_multiplier("DOUBLE") == 2
        assert map_multiplier("Triple") == 3

    def test_none_returns_1(self) -> None:
        assert map_multiplier(None) == 1

    @pytest.mark.parametrize(("value", "expected"), [(1, 1), (4, 4), (0, 1), (-1, 1), (9, 8), ("2", 2), ("10", 8)])
    def test_numeric_clamped(self, value: int | str, expected: int) -> None:
        assert map_multiplier(value) == expected

    def test_unrecognized_string_returns_1(self) -> None:
        assert map_multiplier("big") == 1
        assert map_multiplier("") == 1


class TestMapAlign:
    """Tests for map_align."""

    def test_enum_and_strings(self) -> None:
        assert map_align(TextAlignment.CENTER) == "center"
        assert map_align("RIGHT") == "right"

    def test_fallback_to_left(self) -> None:
        assert map_align(None) == "left"
        assert map_align("justify") == "left"


class TestMapUnderline:
    """Tests for map_underline."""

    def test_bool_and_names(self) -> None:
        assert map_underline(True) == 1
        assert map_underline(False) == 0
        assert map_underline("double") == 2
        assert map_underline("wavy") == 0
        assert map_underline(None) == 0


class TestMapCut:
    """Tests for map_cut."""

    def test_modes(self) -> None:
        assert map_cut(True) == "PART"
        assert map_cut(False) == "FULL"
        assert map_cut("partial") == "PART"
        assert map_cut("full") == "FULL"


class TestMapFontSize:
    """Tests for map_font_size."""

    def test_sizes(self) -> None:
        assert map_font_size(FontSize.SMALL)["font"] == "b"
        assert map_font_size("large") == {"font": "a", "double_height": True, "double_width": False}
        assert map_font_size(FontSize.EXTRA_LARGE)["double_width"] is True
        assert map_font_size(None) == {"font": "a", "double_height": False, "double_width": False}


class TestMapBarcodeFormat:
    """Tests for map_barcode_format."""

    def test_python_escpos_names(self) -> None:
        assert map_barcode_format(BarcodeFormat.UPC_A) == "UPC-A"
        assert map_barcode_format("ean13") == "EAN13"
        assert map_barcode_format("upc_e") == "UPC-E"
