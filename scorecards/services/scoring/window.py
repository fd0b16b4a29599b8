# performance_scorecards/scorecards/services/scoring/window.py
"""
Time window resolution for scorecards.

Turns optional ``from``/``to`` request values into a WindowSpec with a whole
number of days and weeks. Never raises: anything unparseable falls back to the
default trailing window.
"""
from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from scorecards.services.scoring.interfaces import WindowSpec
from scorecards.services.scoring.utils import round_half_up

DEFAULT_WINDOW_DAYS = 90
SECONDS_PER_DAY = 24 * 60 * 60

DateInput = Union[str, date, datetime, None]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_instant(value: DateInput) -> Optional[datetime]:
    """
    Parse an ISO date/datetime (or date/datetime object) into an aware UTC datetime.

    Plain dates mean midnight UTC. Naive datetimes are treated as UTC.
    Returns None for missing or malformed values.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def resolve_window(
    from_value: DateInput = None,
    to_value: DateInput = None,
    *,
    now: Optional[datetime] = None,
    default_days: int = DEFAULT_WINDOW_DAYS,
) -> WindowSpec:
    """
    Resolve a request window.

    - ``to`` missing/malformed -> now
    - ``from`` missing/malformed -> ``to`` minus ``default_days``
    - ``from`` not before ``to`` -> default trailing window ending at ``to``
    - days = max(1, round(span in days)), weeks = max(1, ceil(days / 7))
    """
    end = parse_instant(to_value) or parse_instant(now) or utcnow()
    start = parse_instant(from_value)
    if start is None or start >= end:
        start = end - timedelta(days=default_days)

    span_days = (end - start).total_seconds() / SECONDS_PER_DAY
    days = max(1, round_half_up(span_days))
    weeks = max(1, math.ceil(days / 7))

    return WindowSpec(from_=start, to=end, days=days, weeks=weeks)


__all__ = ["DEFAULT_WINDOW_DAYS", "parse_instant", "resolve_window", "utcnow"]
