from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ged_booking.logic.dates import parse_iso_date
from ged_booking.schemas.enrichment import RawSessionPrice
from ged_booking.schemas.stay import StaySession


def dedupe_sessions(sessions: Iterable[StaySession]) -> List[StaySession]:
    """
    Drop strict duplicates (same start AND end date) left by imports.
    First occurrence wins, order preserved.
    """
    seen: set[Tuple[Any, Any]] = set()
    out: List[StaySession] = []
    for s in sessions or []:
        key = (s.start_date, s.end_date)
        if key in seen:
            continue
        seen.add(key)
        out.append(s)
    return out


def selectable_sessions(sessions: Iterable[StaySession]) -> List[StaySession]:
    return [s for s in sessions or [] if not s.is_full]


def _as_finite(x: Any) -> Optional[float]:
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, str):
        x = x.replace("€", "").replace("\u202f", "").replace("\xa0", "").replace(" ", "")
        x = x.replace(",", ".")
        if not x:
            return None
    try:
        v = float(x)
    except (TypeError, ValueError):
        return None
    return v if math.isfinite(v) else None


def effective_price(raw: RawSessionPrice) -> Optional[float]:
    """promo ?? base: promo only replaces base when it is present (0 is a valid promo)."""
    if raw.promo_price_eur is not None:
        return _as_finite(raw.promo_price_eur)
    return _as_finite(raw.base_price_eur)


def min_session_price(raw_prices: Iterable[RawSessionPrice]) -> Optional[float]:
    values = [p for p in (effective_price(r) for r in raw_prices or []) if p is not None]
    return min(values) if values else None


def session_prices(
    sessions: Iterable[StaySession],
    raw_prices: Iterable[RawSessionPrice],
    fallback: Optional[float] = None,
) -> Dict[str, float]:
    """
    session id -> live price, matched on (start, end) dates.
    Sessions without a scraped price fall back to the stay's price_from (if any).
    """
    by_dates: Dict[Tuple[Any, Any], float] = {}
    for r in raw_prices or []:
        start = parse_iso_date(r.start_date)
        end = parse_iso_date(r.end_date)
        price = effective_price(r)
        if start is None or end is None or price is None:
            continue
        by_dates.setdefault((start, end), price)

    out: Dict[str, float] = {}
    for s in sessions or []:
        price = by_dates.get((s.start_date, s.end_date), fallback)
        if price is not None:
            out[s.id] = price
    return out
