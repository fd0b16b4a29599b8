# performance_scorecards/scorecards/services/scoring/utils.py

from __future__ import annotations

import math
from typing import Optional


def safe_div(numerator: Optional[float], denominator: Optional[float]) -> float:
    """Safely divide two optional numbers. Non-positive or missing denominator -> 0.0."""
    if denominator is None or denominator <= 0:
        return 0.0
    if numerator is None:
        return 0.0
    return numerator / denominator


def clamp(value: Optional[float], min_value: float, max_value: float) -> float:
    """Clamp a possibly None float into [min_value, max_value]. None -> min_value."""
    if value is None:
        return min_value
    return max(min_value, min(max_value, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (towards +inf).

    Python's round() uses banker's rounding; scores are rounded the same way
    the dashboards always displayed them (2.5 -> 3, -2.5 -> -2).
    """
    return int(math.floor(value + 0.5))


def parse_number(raw: Optional[str]) -> Optional[float]:
    """Lenient numeric parsing for query parameters. Blank, garbage or NaN -> None.

    Infinite values are returned as-is; callers clamp them into range.
    """
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if math.isnan(value):
        return None
    return value


__all__ = ["safe_div", "clamp", "round_half_up", "parse_number"]
