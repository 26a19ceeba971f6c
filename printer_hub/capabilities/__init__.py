"""Lookups into the python-escpos capability database (escpos-printer-db).

Used to decide whether a printer profile renders QR codes and barcodes
natively or needs the software fallback, and to describe profiles.
"""

from __future__ import annotations

from .features import (
    get_profile_cut_modes,
    get_profile_features,
    get_profile_info,
    profile_supports_feature,
)
from .loader import clear_capabilities_cache, get_profile_names

__all__ = [
    "clear_capabilities_cache",
    "get_profile_cut_modes",
    "get_profile_features",
    "get_profile_info",
    "get_profile_names",
    "profile_supports_feature",
]
