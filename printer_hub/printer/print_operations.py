"""Translate content items into python-escpos calls."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging
import textwrap
from typing import Any

from ..capabilities import profile_supports_feature
from ..const import CASH_DRAWER_PIN
from ..content import (
    PrintBarcode,
    PrintContent,
    PrintCut,
    PrintFeed,
    PrintImage,
    PrintLine,
    PrintQRCode,
    PrintText,
)
from ..exceptions import PrinterError, PrinterErrorCode
from ..models import PaperSize, PrinterConfig, TextAlignment
from ..security import (
    MAX_FEED_LINES,
    sanitize_log_message,
    validate_barcode_data,
    validate_numeric_input,
    validate_qr_data,
    validate_text_input,
)
from .encoding import get_codec_name, is_utf8
from .mapping_utils import (
    map_align,
    map_barcode_format,
    map_cut,
    map_font_size,
    map_multiplier,
    map_underline,
)

_LOGGER = logging.getLogger(__name__)


def _map_qr_ec(level: str) -> Any:
    from escpos import constants as escpos_constants

    return getattr(escpos_constants, f"QR_ECLEVEL_{level}")


class ContentRenderer:
    """Writes content items to an open python-escpos printer.

    All methods block on device I/O and are meant to run in an executor.
    """

    def __init__(self, config: PrinterConfig) -> None:
        self._config = config
        try:
            self._columns = PaperSize(config.paper_size).chars_per_line
        except ValueError:
            self._columns = PaperSize.MM_80.chars_per_line

    @property
    def columns(self) -> int:
        return self._columns

    def render(self, printer: Any, content: Sequence[PrintContent], images: Mapping[int, Any]) -> None:
        """Render every item in order; ``images`` holds preloaded bitmaps by item index."""
        self.reset_style(printer)
        for index, item in enumerate(content):
            self.render_item(printer, item, images.get(index))

    def render_item(self, printer: Any, item: PrintContent, image: Any = None) -> None:
        if isinstance(item, PrintText):
            self.print_text(printer, item)
        elif isinstance(item, PrintLine):
            self.print_line(printer, item)
        elif isinstance(item, PrintFeed):
            self.feed(printer, item.lines)
        elif isinstance(item, PrintCut):
            self.cut(printer, partial=item.partial)
        elif isinstance(item, PrintBarcode):
            self.print_barcode(printer, item)
        elif isinstance(item, PrintQRCode):
            self.print_qr(printer, item)
        elif isinstance(item, PrintImage):
            self.print_image(printer, item, image)
        else:
            raise PrinterError(
                f"Unsupported content item: {type(item).__name__}",
                PrinterErrorCode.UNSUPPORTED_OPERATION,
                self._config.id,
            )

    @staticmethod
    def _apply_style(printer: Any, **style: Any) -> None:
        # python-escpos 3 keeps unspecified attributes on set(); set_with_default resets them
        setter = getattr(printer, "set_with_default", None) or printer.set
        setter(**style)

    def reset_style(self, printer: Any) -> None:
        self._apply_style(
            printer,
            align="left",
            font="a",
            bold=False,
            underline=0,
            double_height=False,
            double_width=False,
        )

    def _wrap_text(self, text: str, width_mult: int = 1) -> str:
        """Wrap text to the paper width, accounting for wide characters."""
        cols = max(1, self._columns // max(1, width_mult))
        wrapped_lines: list[str] = []
        for line in text.split("\n"):
            if not line:
                wrapped_lines.append("")
                continue
            wrapped_lines.extend(
                textwrap.wrap(line, width=cols, replace_whitespace=False, drop_whitespace=False)
            )
        return "\n".join(wrapped_lines)

    def _write(self, printer: Any, text: str) -> None:
        character_set = self._config.character_set
        if is_utf8(character_set):
            printer.text(text)
            return
        try:
            printer.charcode(str(character_set).upper())
        except Exception as e:
            _LOGGER.debug("Codepage %s not selectable, sending encoded bytes: %s", character_set, sanitize_log_message(str(e)))
            printer._raw(text.encode(get_codec_name(str(character_set)), errors="replace"))
        else:
            printer.text(text)

    def print_text(self, printer: Any, item: PrintText) -> None:
        fmt = item.format
        text = validate_text_input(item.content)
        style: dict[str, Any] = {
            "align": map_align(fmt.alignment),
            "bold": bool(fmt.bold),
            "underline": map_underline(fmt.underline),
            **map_font_size(fmt.size),
        }
        width_mult = 2 if style["double_width"] else 1
        if fmt.width or fmt.height:
            width_mult = map_multiplier(fmt.width)
            style.update(
                custom_size=True,
                width=width_mult,
                height=map_multiplier(fmt.height),
                double_width=False,
                double_height=False,
            )
        if fmt.italic:
            _LOGGER.debug("Italic has no ESC/POS command; printing upright")

        self._apply_style(printer, **style)
        self._write(printer, self._wrap_text(text, width_mult) + "\n")
        self.reset_style(printer)

    def print_line(self, printer: Any, item: PrintLine) -> None:
        length = item.length if item.length else self._columns
        self._write(printer, (item.character or "-")[:1] * length + "\n")

    def feed(self, printer: Any, lines: int) -> None:
        lines_v = validate_numeric_input(lines, 0, MAX_FEED_LINES, "lines")
        if lines_v <= 0:
            return
        if hasattr(printer, "ln"):
            printer.ln(lines_v)
        else:
            printer.text("\n" * lines_v)

    def cut(self, printer: Any, *, partial: bool = False) -> None:
        printer.cut(mode=map_cut(partial))

    def open_cash_drawer(self, printer: Any) -> None:
        printer.cashdraw(CASH_DRAWER_PIN)

    def print_barcode(self, printer: Any, item: PrintBarcode) -> None:
        code, bc = validate_barcode_data(item.data, map_barcode_format(item.format))
        height_v = validate_numeric_input(item.height, 1, 255, "height")
        width_v = validate_numeric_input(item.width, 2, 6, "width")
        centered = item.alignment == TextAlignment.CENTER
        native = profile_supports_feature(self._config.profile, "barcodeB")

        self._apply_style(printer, align=map_align(item.alignment))
        kwargs: dict[str, Any] = {
            "height": height_v,
            "width": width_v,
            "pos": "BELOW" if item.include_text else "OFF",
            "font": "A",
            "align_ct": centered,
            "check": True,
        }
        if native:
            # Native CODE128 needs an explicit code set
            if bc == "CODE128" and not code.startswith("{"):
                code = "{B" + code
        else:
            kwargs["force_software"] = True

        try:
            printer.barcode(code, bc, **kwargs)
        except TypeError as e:
            # Older python-escpos may not accept force_software; retry without it
            if "force_software" not in kwargs:
                raise
            _LOGGER.debug("force_software unsupported; retrying without it: %s", sanitize_log_message(str(e)))
            kwargs.pop("force_software")
            printer.barcode(code, bc, **kwargs)
        self.reset_style(printer)

    def print_qr(self, printer: Any, item: PrintQRCode) -> None:
        data = validate_qr_data(item.data)
        size = validate_numeric_input(item.size, 1, 16, "size")
        level = str(getattr(item.error_level, "value", item.error_level)).upper()
        if level not in ("L", "M", "Q", "H"):
            level = "M"
        native = profile_supports_feature(self._config.profile, "qrCode")

        self._apply_style(printer, align=map_align(item.alignment))
        kwargs: dict[str, Any] = {"size": size, "ec": _map_qr_ec(level), "native": native}
        if not native:
            kwargs["center"] = item.alignment == TextAlignment.CENTER
        printer.qr(data, **kwargs)
        self.reset_style(printer)

    def print_image(self, printer: Any, item: PrintImage, image: Any) -> None:
        if image is None:
            raise PrinterError(
                f"Image {item.path} was not loaded",
                PrinterErrorCode.COMMAND_ERROR,
                self._config.id,
            )
        self._apply_style(printer, align=map_align(item.alignment))
        printer.image(image)
        self.reset_style(printer)
