from __future__ import annotations

import pytest

from ged_booking.orchestrator.booking_flow import (
    StayNotFoundError,
    build_booking_context,
    quote_sessions,
    start_booking,
)
from ged_booking.schemas.stay import NO_TRANSPORT
from ged_booking.schemas.workflow import WorkflowStep


class BrokenEnrichment:
    def get_enrichment(self, source_url):
        raise ConnectionError("dataset unavailable")


def test_context_from_fixtures(catalog, enrichment):
    ctx = build_booking_context("stay-alpes", catalog, enrichment)

    assert [s.id for s in ctx.sessions] == ["sess-1", "sess-2", "sess-3"]
    assert [(d.city, d.extra_eur) for d in ctx.departures] == [
        (NO_TRANSPORT, 0),
        ("Paris", 220),
        ("Lyon", 170),
    ]
    assert ctx.session_prices == {"sess-1": 718, "sess-2": 615, "sess-3": 1095}
    assert ctx.min_session_price == 718


def test_context_without_enrichment(catalog):
    ctx = build_booking_context("stay-alpes", catalog)
    assert [d.city for d in ctx.departures] == [NO_TRANSPORT]
    assert ctx.session_prices == {"sess-1": 615, "sess-2": 615, "sess-3": 615}
    assert ctx.min_session_price is None


def test_enrichment_failure_is_not_fatal(catalog):
    ctx = build_booking_context("stay-alpes", catalog, BrokenEnrichment())
    assert [d.city for d in ctx.departures] == [NO_TRANSPORT]


def test_price_on_request_stay_has_no_session_prices(catalog, enrichment):
    ctx = build_booking_context("stay-mer", catalog, enrichment)
    assert ctx.session_prices == {}
    assert quote_sessions(ctx, "paris") == []


@pytest.mark.parametrize("stay_id", ["stay-draft", "nope"])
def test_unknown_or_unpublished_stay(catalog, stay_id):
    with pytest.raises(StayNotFoundError):
        build_booking_context(stay_id, catalog)


def test_quote_sessions(catalog, enrichment):
    ctx = build_booking_context("stay-alpes", catalog, enrichment)
    quotes = {q.session_id: q for q in quote_sessions(ctx, "paris")}

    # (718 + 180 + 12) * 0.95 = 864.5
    assert quotes["sess-1"].duration_days == 7
    assert quotes["sess-1"].price == 865
    assert quotes["sess-2"].price == 767
    # 13 days: 310 * 13 / 14 = 287.86 -> 288; (1095 + 288 + 12) * 0.95 = 1325.25
    assert quotes["sess-3"].duration_days == 13
    assert quotes["sess-3"].price == 1325

    no_promo = {q.session_id: q.price for q in quote_sessions(ctx, "", apply_promo=False)}
    assert no_promo["sess-1"] == 898


def test_start_booking_with_preselection(catalog, enrichment):
    wf = start_booking("stay-alpes", catalog, enrichment, session_id="sess-3", city="Lyon")
    assert wf.step == WorkflowStep.REQUESTER_INFO
    assert wf.state.breakdown.total == 1095 + 170


def test_start_booking_full_session_is_ignored(catalog, enrichment):
    wf = start_booking("stay-alpes", catalog, enrichment, session_id="sess-2")
    assert wf.step == WorkflowStep.SELECT_SESSION
    assert wf.state.session_id is None
