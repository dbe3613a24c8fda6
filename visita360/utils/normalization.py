"""Deterministic normalization — pure Python.

  - Addresses: "  Rua Pedrália, 417 -  São Paulo. " → "rua pedrália 417 - são paulo"
  - Coordinates: "-23.59" / -23.59 / "abc" → range-checked floats

Both are pure: same input, same output, no I/O.
"""

import re
from typing import Any

from . import safe_float

_PUNCT_RE = re.compile(r"[,.]")
_WS_RE = re.compile(r"\s+")

LAT_RANGE = (-90.0, 90.0)
LNG_RANGE = (-180.0, 180.0)


def normalize_address(address: str) -> str:
    """Cache key for a free-text address.

    Lowercases, turns commas/periods into spaces, collapses whitespace and
    trims. Idempotent: normalize_address(normalize_address(a)) == normalize_address(a).
    """
    if not address:
        return ""
    key = _PUNCT_RE.sub(" ", address.lower())
    return _WS_RE.sub(" ", key).strip()


def validate_coordinates(lat: Any, lng: Any) -> bool:
    """True when both values parse as finite numbers inside lat/lng ranges."""
    latitude = safe_float(lat)
    longitude = safe_float(lng)
    if latitude is None or longitude is None:
        return False
    return (
        LAT_RANGE[0] <= latitude <= LAT_RANGE[1]
        and LNG_RANGE[0] <= longitude <= LNG_RANGE[1]
    )
