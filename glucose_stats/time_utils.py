from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple


def today_utc() -> date:
    """Current UTC date; window dates are UTC calendar dates."""
    return datetime.now(timezone.utc).date()


def date_offset(days: int, today: Optional[date] = None) -> str:
    """ISO date `days` before `today`."""
    if today is None:
        today = today_utc()
    return (today - timedelta(days=days)).isoformat()


def window_bounds(days: int, today: Optional[date] = None) -> Tuple[str, str]:
    """(start_date, end_date) for a window ending today."""
    if today is None:
        today = today_utc()
    return date_offset(days, today), date_offset(0, today)
