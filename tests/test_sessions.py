from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from ged_booking.logic.sessions import (
    dedupe_sessions,
    effective_price,
    min_session_price,
    selectable_sessions,
    session_prices,
)
from ged_booking.schemas.enrichment import RawSessionPrice
from ged_booking.schemas.stay import StaySession


def _session(id, start, end, seats=5):
    return StaySession(id=id, stay_id="stay", start_date=start, end_date=end, seats_left=seats)


def test_dedupe_keeps_first_occurrence():
    a = _session("a", "2027-07-08", "2027-07-15")
    b = _session("b", "2027-07-08", "2027-07-15")
    c = _session("c", "2027-07-08", "2027-07-22")
    assert [s.id for s in dedupe_sessions([a, b, c])] == ["a", "c"]
    assert [s.id for s in dedupe_sessions([b, a, c])] == ["b", "c"]


def test_dedupe_empty():
    assert dedupe_sessions([]) == []


def test_full_sessions_not_selectable():
    sessions = [_session("a", "2027-07-08", "2027-07-15", 0), _session("b", "2027-07-15", "2027-07-22", 1)]
    assert sessions[0].is_full
    assert [s.id for s in selectable_sessions(sessions)] == ["b"]


def test_session_dates_accept_iso_datetimes():
    s = StaySession.model_validate(
        {"id": "x", "stayId": "stay", "startDate": "2027-07-08T00:00:00.000Z", "endDate": "2027-07-15T00:00:00.000Z"}
    )
    assert s.start_date == date(2027, 7, 8)
    assert s.end_date == date(2027, 7, 15)


def test_session_end_before_start_rejected():
    with pytest.raises(ValidationError):
        _session("x", "2027-07-15", "2027-07-08")


def test_effective_price_is_promo_or_base():
    assert effective_price(RawSessionPrice(base_price_eur=1200, promo_price_eur=1095)) == 1095
    assert effective_price(RawSessionPrice(base_price_eur=718)) == 718
    assert effective_price(RawSessionPrice(base_price_eur=718, promo_price_eur=0)) == 0
    assert effective_price(RawSessionPrice(base_price_eur="1 155 €")) == 1155
    assert effective_price(RawSessionPrice(base_price_eur="N/A")) is None
    assert effective_price(RawSessionPrice(base_price_eur=float("nan"))) is None


def test_min_session_price():
    raws = [
        RawSessionPrice(base_price_eur=1200, promo_price_eur=1095),
        RawSessionPrice(base_price_eur=718),
        RawSessionPrice(base_price_eur=None),
    ]
    assert min_session_price(raws) == 718
    assert min_session_price([]) is None
    assert min_session_price([RawSessionPrice(base_price_eur="N/A")]) is None


def test_session_prices_match_on_dates_with_fallback():
    sessions = [
        _session("s1", "2027-07-08", "2027-07-15"),
        _session("s2", "2027-07-15", "2027-07-22"),
    ]
    raws = [RawSessionPrice(start_date="2027-07-08", end_date="2027-07-15", base_price_eur=718)]

    assert session_prices(sessions, raws, fallback=615) == {"s1": 718, "s2": 615}
    assert session_prices(sessions, raws) == {"s1": 718}
