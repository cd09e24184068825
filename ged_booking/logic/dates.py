from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Optional


def parse_iso_date(x: Any) -> Optional[date]:
    """
    date | datetime | "YYYY-MM-DD" | ISO datetime string -> date.
    Anything else (or garbage) -> None.
    """
    if x is None:
        return None
    if isinstance(x, datetime):
        return x.date()
    if isinstance(x, date):
        return x
    if isinstance(x, str):
        s = x.strip()
        if not s:
            return None
        try:
            return date.fromisoformat(s)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def _parse_datetime(x: Any) -> Optional[datetime]:
    # only values carrying a time part; plain dates go through parse_iso_date
    if isinstance(x, datetime):
        return x
    if isinstance(x, str) and "T" in x:
        try:
            return datetime.fromisoformat(x.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def days_between(start: Any, end: Any) -> Optional[int]:
    """
    Whole days from start to end, rounded up (08/07 -> 21/07 = 13).
    A part-day counts as a full day when both ends carry a time.
    """
    dt_start = _parse_datetime(start)
    dt_end = _parse_datetime(end)
    # naive and aware datetimes cannot be subtracted: compare dates instead
    if dt_start is not None and dt_end is not None and (dt_start.tzinfo is None) == (dt_end.tzinfo is None):
        return math.ceil((dt_end - dt_start).total_seconds() / 86400)

    d_start = parse_iso_date(start)
    d_end = parse_iso_date(end)
    if d_start is None or d_end is None:
        return None
    return (d_end - d_start).days
