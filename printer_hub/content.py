"""Structured print content.

A print request is an ordered list of content items. Drivers translate each
item into device commands; nothing here talks to hardware.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .const import (
    DEFAULT_BARCODE_HEIGHT,
    DEFAULT_BARCODE_WIDTH,
    DEFAULT_LINE_CHARACTER,
    DEFAULT_QR_ERROR_LEVEL,
    DEFAULT_QR_SIZE,
)
from .models import FontSize, FontStyle, TextAlignment


class BarcodeFormat(str, Enum):
    CODE128 = "CODE128"
    CODE39 = "CODE39"
    EAN13 = "EAN13"
    EAN8 = "EAN8"
    UPC_A = "UPC_A"
    UPC_E = "UPC_E"


class QRErrorLevel(str, Enum):
    L = "L"
    M = "M"
    Q = "Q"
    H = "H"


@dataclass(frozen=True)
class TextFormat:
    """Formatting for a text item.

    Bold, underline and italic are independent toggles. ``width`` and
    ``height`` are optional character multipliers (1-8) that take precedence
    over ``size`` when given.
    """

    alignment: TextAlignment = TextAlignment.LEFT
    bold: bool = False
    underline: bool = False
    italic: bool = False
    size: FontSize = FontSize.NORMAL
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True)
class PrintText:
    content: str
    format: TextFormat = field(default_factory=TextFormat)


@dataclass(frozen=True)
class PrintLine:
    """A horizontal rule; ``length`` defaults to the paper's line width."""

    character: str = DEFAULT_LINE_CHARACTER
    length: int | None = None


@dataclass(frozen=True)
class PrintFeed:
    lines: int = 1


@dataclass(frozen=True)
class PrintCut:
    partial: bool = False


@dataclass(frozen=True)
class PrintBarcode:
    data: str
    format: BarcodeFormat = BarcodeFormat.CODE128
    width: int = DEFAULT_BARCODE_WIDTH
    height: int = DEFAULT_BARCODE_HEIGHT
    include_text: bool = True
    alignment: TextAlignment = TextAlignment.CENTER


@dataclass(frozen=True)
class PrintQRCode:
    data: str
    size: int = DEFAULT_QR_SIZE
    error_level: QRErrorLevel = QRErrorLevel(DEFAULT_QR_ERROR_LEVEL)
    alignment: TextAlignment = TextAlignment.CENTER


@dataclass(frozen=True)
class PrintImage:
    """A bitmap loaded from a local path or an http(s) URL."""

    path: str
    width: int | None = None
    height: int | None = None
    alignment: TextAlignment = TextAlignment.CENTER


PrintContent = PrintText | PrintLine | PrintFeed | PrintCut | PrintBarcode | PrintQRCode | PrintImage


def _format_from_dict(data: Mapping[str, Any] | None) -> TextFormat:
    if not data:
        return TextFormat()
    styles = data.get("style") or []
    if isinstance(styles, str):
        styles = [styles]
    styles = {FontStyle(s) for s in styles}
    return TextFormat(
        alignment=TextAlignment(data.get("alignment", TextAlignment.LEFT)),
        bold=bool(data.get("bold", FontStyle.BOLD in styles)),
        underline=bool(data.get("underline", FontStyle.UNDERLINE in styles)),
        italic=bool(data.get("italic", FontStyle.ITALIC in styles)),
        size=FontSize(data.get("size", FontSize.NORMAL)),
        width=data.get("width"),
        height=data.get("height"),
    )


def content_from_dict(data: Mapping[str, Any]) -> PrintContent:
    """Build a content item from its plain dict shape.

    The dict is validated against ``CONTENT_ITEM_SCHEMA`` first;
    ``voluptuous.Invalid`` propagates on malformed input.
    """
    from .schemas import CONTENT_ITEM_SCHEMA

    item = CONTENT_ITEM_SCHEMA(dict(data))
    kind = item["type"]
    if kind == "text":
        return PrintText(content=item["content"], format=_format_from_dict(item.get("format")))
    if kind == "line":
        return PrintLine(character=item.get("character", DEFAULT_LINE_CHARACTER), length=item.get("length"))
    if kind == "feed":
        return PrintFeed(lines=item.get("lines", 1))
    if kind == "cut":
        return PrintCut(partial=item.get("partial", False))
    if kind == "barcode":
        return PrintBarcode(
            data=item["data"],
            format=BarcodeFormat(item.get("format", BarcodeFormat.CODE128)),
            width=item.get("width", DEFAULT_BARCODE_WIDTH),
            height=item.get("height", DEFAULT_BARCODE_HEIGHT),
            include_text=item.get("includeText", True),
            alignment=TextAlignment(item.get("alignment", TextAlignment.CENTER)),
        )
    if kind == "qrcode":
        return PrintQRCode(
            data=item["data"],
            size=item.get("size", DEFAULT_QR_SIZE),
            error_level=QRErrorLevel(item.get("errorLevel", DEFAULT_QR_ERROR_LEVEL)),
            alignment=TextAlignment(item.get("alignment", TextAlignment.CENTER)),
        )
    return PrintImage(
        path=item["path"],
        width=item.get("width"),
        height=item.get("height"),
        alignment=TextAlignment(item.get("alignment", TextAlignment.CENTER)),
    )


def content_list_from_dicts(items: Iterable[Mapping[str, Any] | PrintContent]) -> list[PrintContent]:
    """Convert a mixed list of dicts and content items into content items."""
    return [content_from_dict(i) if isinstance(i, Mapping) else i for i in items]
