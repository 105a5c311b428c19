"""
Text utilities for key values, spreadsheet identifiers and CSV headers.
"""

import re
import unicodedata
from typing import Optional


_INTEGER_WITH_ZERO_FRACTION = re.compile(r"^(\d+)\.0+$")
_GID_NUMERIC_TAIL = re.compile(r"/(\d+)(?:\?.*)?$")


def normalize_key(value: Optional[str]) -> Optional[str]:
    """
    Normalize a key value (SKU, barcode) for grouping.

    Only leading/trailing whitespace is removed. Internal whitespace
    and case are significant:
    - "  ABC-1 " -> "ABC-1"
    - "AB C"     -> "AB C"
    - "   "      -> None

    Args:
        value: Raw key value from the API or a file

    Returns:
        Trimmed key, or None if nothing is left
    """
    if value is None:
        return None

    trimmed = str(value).strip()
    return trimmed or None


def normalize_secondary_key(value: Optional[str]) -> Optional[str]:
    """
    Normalize a secondary identifier (GTIN) read from a spreadsheet.

    Spreadsheet tools often turn integer-like identifiers into floats, so
    "0123456789012.0" is rewritten to "0123456789012". Nothing else is
    touched: "1.5", "1e12" and "12.30" pass through trimmed.

    Args:
        value: Raw identifier

    Returns:
        Normalized identifier, or None if empty
    """
    trimmed = normalize_key(value)
    if trimmed is None:
        return None

    match = _INTEGER_WITH_ZERO_FRACTION.match(trimmed)
    if match:
        return match.group(1)
    return trimmed


def gid_numeric_id(gid: str) -> str:
    """
    Extract the numeric tail of a Shopify global id.

    - "gid://shopify/ProductVariant/44012345678" -> "44012345678"

    Raises:
        ValueError: If the id has no numeric tail
    """
    match = _GID_NUMERIC_TAIL.search(gid.strip())
    if not match:
        raise ValueError(f"Not a numeric global id: {gid}")
    return match.group(1)


def normalize_header(name: Optional[str]) -> str:
    """
    Normalize a CSV column header for alias matching.

    - "  Real Qty. " -> "real qty."
    - "Código"       -> "codigo"
    """
    if not name:
        return ""

    normalized = unicodedata.normalize('NFD', str(name).strip())
    ascii_name = ''.join(
        c for c in normalized
        if unicodedata.category(c) != 'Mn'
    )
    return " ".join(ascii_name.lower().split())


def matches_search(search: Optional[str], *values: Optional[str]) -> bool:
    """Case-insensitive substring match over any of the values."""
    if not search or not search.strip():
        return True

    needle = search.strip().lower()
    return any(needle in v.lower() for v in values if v)
