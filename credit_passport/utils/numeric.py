"""Numeric helpers shared by the scoring engine"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Bound value to [low, high]"""
    return max(low, min(high, value))


def is_finite_number(value: Any) -> bool:
    """True for real numbers that are not NaN/inf (booleans excluded)"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int beyond float range
        return False


def to_finite_float(value: Any) -> Optional[float]:
    """
    Coerce a loosely-typed value to a finite float.

    Accepts ints, floats and numeric strings. Returns None for anything else,
    including booleans, NaN and infinities.
    """
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not is_finite_number(value):
        return None
    return float(value)


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves away from zero for positives (2.5 -> 3)"""
    return int(math.floor(value + 0.5))


def round_to_tenth(value: float) -> float:
    """Round to 1 decimal place with half-up rounding on the exact binary value"""
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
