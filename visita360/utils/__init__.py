"""Shared utility helpers used across services and routers."""

import math


def safe_float(v):
    """Safely convert a value to a finite float, returning None on failure."""
    if v is None or isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (ValueError, TypeError):
        return None
    return f if math.isfinite(f) else None


def epoch_millis(dt) -> int:
    """Datetime → integer milliseconds since the Unix epoch."""
    return int(dt.timestamp() * 1000)
