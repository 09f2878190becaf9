"""
Decimal Utilities
speechcoach/scoring/utils.py

Precision-safe decimal math for skill scoring calculations.
"""

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

TWO_PLACES = Decimal("0.01")


def as_finite_decimal(value: Any) -> Optional[Decimal]:
    """
    Coerce a stored or incoming numeric value to Decimal.

    Returns None for None, booleans, non-numeric values, NaN and infinities.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    return None


def round2(value: Decimal) -> Decimal:
    """Quantize to two decimal places (ROUND_HALF_UP)."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """
    part / whole x 100, rounded to 2 places.

    Returns Decimal("0") when whole is zero. Not clamped: negative points
    from bad skills can push the result below 0.
    """
    if whole == 0:
        return Decimal("0")
    return round2(part / whole * Decimal("100"))
