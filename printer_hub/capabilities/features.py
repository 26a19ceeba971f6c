"""Feature and cut mode capability functions."""

from __future__ import annotations

from typing import Any

from .loader import _get_capabilities

DEFAULT_CUT_MODES = ["none", "partial", "full"]


def _get_profile(profile_key: str | None) -> dict[str, Any] | None:
    if not profile_key:
        return None
    profiles = _get_capabilities().get("profiles", {})
    return profiles.get(profile_key)  # type: ignore[no-any-return]


def get_profile_cut_modes(profile_key: str | None) -> list[str]:
    """Get available cut modes for a profile based on its features.

    Args:
        profile_key: Profile key, or None for default cut modes.

    Returns:
        List of available cut modes (always includes "none").
    """
    profile = _get_profile(profile_key)
    if profile is None:
        return DEFAULT_CUT_MODES.copy()

    features = profile.get("features", {})
    modes = ["none"]
    if features.get("paperPartCut"):
        modes.append("partial")
    if features.get("paperFullCut"):
        modes.append("full")
    return modes


def profile_supports_feature(profile_key: str | None, feature: str) -> bool:
    """Check if a profile supports a specific feature.

    Args:
        profile_key: Profile key to check.
        feature: Feature name (e.g., 'qrCode', 'barcodeB', 'graphics').

    Returns:
        True if the profile supports the feature. Missing and unknown
        profiles are assumed to support everything.
    """
    profile = _get_profile(profile_key)
    if profile is None:
        return True
    return bool(profile.get("features", {}).get(feature, False))


def get_profile_features(profile_key: str | None) -> dict[str, bool]:
    profile = _get_profile(profile_key)
    if profile is None:
        return {}
    features = profile.get("features", {})
    return {k: bool(v) for k, v in features.items() if isinstance(v, bool)}


def get_profile_info(profile_key: str | None) -> dict[str, Any]:
    """Return the vendor, name and feature flags of a profile, or an empty dict."""
    profile = _get_profile(profile_key)
    if profile is None:
        return {}
    return {
        "name": profile.get("name", profile_key),
        "vendor": profile.get("vendor", ""),
        "features": get_profile_features(profile_key),
        "cut_modes": get_profile_cut_modes(profile_key),
    }
