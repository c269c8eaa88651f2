"""Permissive numeric parsing for raw form and document values."""

import math
import re
from typing import Any

_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"^\s*[+-]?\d+")


def parse_number(raw: Any) -> float | None:
    """
    Parse the leading number of a raw value, like ``parseFloat`` in a browser.

    Returns None for booleans, empty or non-numeric text and non-finite values.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int | float):
        value = float(raw)
    else:
        match = _FLOAT_PREFIX.match(str(raw))
        if not match:
            return None
        value = float(match.group(0))
    return value if math.isfinite(value) else None


def coerce_float(raw: Any, default: float = 0.0) -> float:
    """Parse a float or fall back to the default."""
    value = parse_number(raw)
    return default if value is None else value


def coerce_int(raw: Any, default: int = 0) -> int:
    """Parse the leading integer of a raw value, truncating any fraction."""
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, int | float):
        return int(raw) if math.isfinite(raw) else default
    match = _INT_PREFIX.match(str(raw))
    return int(match.group(0)) if match else default


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)
