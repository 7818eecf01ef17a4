"""
Numeric helpers shared by the distance and labor calculations.

Rounding is half-away-from-zero so that results match the figures
users see in spreadsheets (Python's round() is banker's rounding).
"""
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional


def to_float(value: Any) -> Optional[float]:
    """Convert a DB/JSON value to float; None for missing or non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def round_to(value: float, places: int = 2) -> float:
    """Round half away from zero to the given number of decimal places."""
    if value is None:
        return None
    if not math.isfinite(value):
        return 0.0
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, returning 0 instead of NaN/Infinity for a zero or bad denominator."""
    if not denominator or not math.isfinite(denominator):
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def percent(part: float, whole: float) -> float:
    """part as a percentage of whole, 0 when whole is 0."""
    return safe_divide(part, whole) * 100
