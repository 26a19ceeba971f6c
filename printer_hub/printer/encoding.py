"""Character set to Python codec mapping."""

from __future__ import annotations

# Mapping from common codepage names to Python codec names
CODEPAGE_TO_CODEC: dict[str, str] = {
    "CP437": "cp437",
    "CP850": "cp850",
    "CP852": "cp852",
    "CP858": "cp858",
    "CP860": "cp860",
    "CP863": "cp863",
    "CP865": "cp865",
    "CP866": "cp866",
    "CP932": "cp932",
    "CP1250": "cp1250",
    "CP1251": "cp1251",
    "CP1252": "cp1252",
    "CP1253": "cp1253",
    "CP1257": "cp1257",
    "ISO_8859-1": "iso-8859-1",
    "ISO_8859-2": "iso-8859-2",
    "ISO_8859-7": "iso-8859-7",
    "ISO_8859-15": "iso-8859-15",
    "LATIN1": "latin-1",
    "UTF-8": "utf-8",
    "UTF8": "utf-8",
}


def get_codec_name(character_set: str) -> str:
    """Get the Python codec name for a printer character set.

    Args:
        character_set: Character set name (e.g., "CP437", "ISO_8859-1").

    Returns:
        Python codec name.
    """
    upper = character_set.upper()
    if upper in CODEPAGE_TO_CODEC:
        return CODEPAGE_TO_CODEC[upper]

    normalized = upper.replace("-", "_").replace(" ", "")
    if normalized.startswith("CP") and normalized[2:].isdigit():
        return f"cp{normalized[2:]}"
    if normalized.startswith(("ISO_8859_", "ISO8859_")):
        num = normalized.split("_")[-1]
        return f"iso-8859-{num}"
    return character_set.lower()


def is_utf8(character_set: str | None) -> bool:
    """Return True when text can go through python-escpos' own encoder."""
    return not character_set or get_codec_name(character_set) == "utf-8"
