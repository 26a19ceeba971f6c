"""Validation schemas for configuration records, content items and documents."""

from __future__ import annotations

from typing import Any

import voluptuous as vol

from .const import MAX_RETRY_ATTEMPTS, MAX_TIMEOUT_MS
from .models import PaperSize, PrinterConnectionType, TextAlignment


def _non_blank(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise vol.Invalid("must be a non-empty string")
    return value


_NUMBER = vol.Any(int, float)
_ALIGNMENTS = [a.value for a in TextAlignment]

# Generic checks every printer configuration must pass (snake_case keys)
PRINTER_CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required("id"): _non_blank,
        vol.Required("name"): _non_blank,
        # Any non-blank tag; the factory checks it against its registered types
        vol.Required("type"): _non_blank,
        vol.Required("connection_type"): vol.In([c.value for c in PrinterConnectionType]),
        vol.Required("connection_string"): _non_blank,
        vol.Required("paper_size"): vol.In([p.value for p in PaperSize]),
        vol.Optional("character_set"): vol.Any(None, str),
        vol.Optional("timeout"): vol.Any(None, vol.All(_NUMBER, vol.Range(min=0, max=MAX_TIMEOUT_MS))),
        vol.Optional("retry_attempts"): vol.Any(
            None, vol.All(int, vol.Range(min=0, max=MAX_RETRY_ATTEMPTS))
        ),
        vol.Optional("is_default"): bool,
        vol.Optional("profile"): vol.Any(None, str),
    }
)

# Persisted / exported configuration document (camelCase keys)
CONFIG_DOCUMENT_SCHEMA = vol.Schema(
    {
        vol.Required("configurations"): [dict],
        vol.Optional("version"): str,
        vol.Optional("lastUpdated"): str,
        vol.Optional("exportDate"): str,
        vol.Optional("defaultConfigId"): vol.Any(None, str),
    },
    extra=vol.ALLOW_EXTRA,
)

_TEXT_FORMAT_SCHEMA = vol.Schema(
    {
        vol.Optional("alignment"): vol.In(_ALIGNMENTS),
        vol.Optional("style"): vol.Any(
            vol.In(["normal", "bold", "italic", "underline"]),
            [vol.In(["normal", "bold", "italic", "underline"])],
        ),
        vol.Optional("bold"): bool,
        vol.Optional("underline"): bool,
        vol.Optional("italic"): bool,
        vol.Optional("size"): vol.In(["small", "normal", "large", "extra_large"]),
        vol.Optional("width"): vol.All(int, vol.Range(min=1, max=8)),
        vol.Optional("height"): vol.All(int, vol.Range(min=1, max=8)),
    }
)

_BASE_ITEM_SCHEMA: dict[vol.Marker | str, Any] = {
    vol.Required("type"): str,
}

_CONTENT_SCHEMAS: dict[str, vol.Schema] = {
    "text": vol.Schema(
        {
            **_BASE_ITEM_SCHEMA,
            vol.Required("content"): str,
            vol.Optional("format"): vol.Any(None, _TEXT_FORMAT_SCHEMA),
        }
    ),
    "line": vol.Schema(
        {
            **_BASE_ITEM_SCHEMA,
            vol.Optional("character"): vol.All(str, vol.Length(min=1, max=1)),
            vol.Optional("length"): vol.Any(None, vol.All(int, vol.Range(min=1))),
        }
    ),
    "feed": vol.Schema({**_BASE_ITEM_SCHEMA, vol.Optional("lines"): vol.All(int, vol.Range(min=0))}),
    "cut": vol.Schema({**_BASE_ITEM_SCHEMA, vol.Optional("partial"): bool}),
    "barcode": vol.Schema(
        {
            **_BASE_ITEM_SCHEMA,
            vol.Required("data"): _non_blank,
            vol.Optional("format"): vol.In(["CODE128", "CODE39", "EAN13", "EAN8", "UPC_A", "UPC_E"]),
            vol.Optional("width"): vol.All(int, vol.Range(min=2, max=6)),
            vol.Optional("height"): vol.All(int, vol.Range(min=1, max=255)),
            vol.Optional("includeText"): bool,
            vol.Optional("alignment"): vol.In(_ALIGNMENTS),
        }
    ),
    "qrcode": vol.Schema(
        {
            **_BASE_ITEM_SCHEMA,
            vol.Required("data"): _non_blank,
            vol.Optional("size"): vol.All(int, vol.Range(min=1, max=16)),
            vol.Optional("errorLevel"): vol.In(["L", "M", "Q", "H"]),
            vol.Optional("alignment"): vol.In(_ALIGNMENTS),
        }
    ),
    "image": vol.Schema(
        {
            **_BASE_ITEM_SCHEMA,
            vol.Required("path"): _non_blank,
            vol.Optional("width"): vol.Any(None, vol.All(int, vol.Range(min=1))),
            vol.Optional("height"): vol.Any(None, vol.All(int, vol.Range(min=1))),
            vol.Optional("alignment"): vol.In(_ALIGNMENTS),
        }
    ),
}


def _validate_content_item(value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise vol.Invalid("content item must be a mapping")
    schema = _CONTENT_SCHEMAS.get(value.get("type"))
    if schema is None:
        raise vol.Invalid(f"unknown content type: {value.get('type')!r}")
    return schema(value)  # type: ignore[no-any-return]


CONTENT_ITEM_SCHEMA = vol.Schema(_validate_content_item)
