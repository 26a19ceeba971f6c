"""Access to the escpos-printer-db capability data bundled with python-escpos."""

from __future__ import annotations

from functools import lru_cache
import logging
from typing import Any

_LOGGER = logging.getLogger(__name__)

# Used when python-escpos cannot read its bundled database. Describes a
# generic 80mm receipt printer so rendering still picks native commands.
_GENERIC_PROFILE: dict[str, Any] = {
    "name": "Generic receipt printer",
    "vendor": "Generic",
    "codePages": {"0": "CP437"},
    "fonts": {"0": {"name": "Font A", "columns": 48}},
    "features": {
        "barcodeB": True,
        "qrCode": True,
        "paperFullCut": True,
        "paperPartCut": True,
        "pulseStandard": True,
    },
}


@lru_cache(maxsize=1)
def _get_capabilities() -> dict[str, Any]:
    try:
        from escpos.capabilities import CAPABILITIES
    except Exception as err:  # noqa: BLE001
        _LOGGER.warning("Printer capability database unavailable, using generic profile: %s", err)
        return {"profiles": {"default": dict(_GENERIC_PROFILE)}, "encodings": {}}
    return CAPABILITIES  # type: ignore[no-any-return]


def get_profile_names() -> list[str]:
    """Return the known profile names, sorted."""
    return sorted(_get_capabilities().get("profiles", {}))


def clear_capabilities_cache() -> None:
    _get_capabilities.cache_clear()
