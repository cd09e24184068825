from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ged_booking.logic.dates import days_between
from ged_booking.logic.departures import DEFAULT_STANDARD_CITIES, departure_options
from ged_booking.logic.pricing import GedPricing
from ged_booking.logic.sessions import dedupe_sessions, min_session_price, session_prices
from ged_booking.logic.workflow import BookingWorkflow
from ged_booking.schemas.enrichment import EnrichmentItem
from ged_booking.schemas.pricing import GedPricingConfig, SessionQuote
from ged_booking.schemas.workflow import BookingContext
from ged_booking.services.catalog import CatalogSource
from ged_booking.services.enrichment import EnrichmentSource

logger = logging.getLogger(__name__)


class StayNotFoundError(LookupError):
    pass


def _fetch_enrichment(enrichment: Optional[EnrichmentSource], source_url: Optional[str]) -> Optional[EnrichmentItem]:
    if enrichment is None or not source_url:
        return None
    try:
        return enrichment.get_enrichment(source_url)
    except Exception as e:
        # enrichment is best effort: the flow still works with "Sans transport" only
        logger.warning("enrichment lookup failed for %s: %s", source_url, e)
        return None


def build_booking_context(
    stay_id: str,
    catalog: CatalogSource,
    enrichment: Optional[EnrichmentSource] = None,
    *,
    pricing: Optional[GedPricingConfig] = None,
    standard_cities: Sequence[str] = DEFAULT_STANDARD_CITIES,
) -> BookingContext:
    """
    1) stay + future sessions from the catalog (unknown / unpublished -> StayNotFoundError)
    2) de-duplicate sessions on (start, end)
    3) departures + per-session prices from the enrichment, when there is one
    """
    found = catalog.get_stay(stay_id)
    if found is None:
        raise StayNotFoundError(f"stay not found: {stay_id}")
    stay, sessions = found
    if not stay.published:
        raise StayNotFoundError(f"stay not published: {stay_id}")

    unique = dedupe_sessions(sessions)
    if len(unique) != len(sessions):
        logger.debug("stay %s: %s duplicate sessions dropped", stay.id, len(sessions) - len(unique))

    item = _fetch_enrichment(enrichment, stay.source_url)
    raw_prices = item.sessions if item else []
    departures = item.departures if item else []

    return BookingContext(
        stay=stay,
        sessions=unique,
        departures=departure_options(departures, standard_cities),
        session_prices=session_prices(unique, raw_prices, fallback=stay.price_from),
        min_session_price=min_session_price(raw_prices),
        pricing=pricing or GedPricingConfig(),
    )


def start_booking(
    stay_id: str,
    catalog: CatalogSource,
    enrichment: Optional[EnrichmentSource] = None,
    *,
    session_id: Optional[str] = None,
    city: Optional[str] = None,
    pricing: Optional[GedPricingConfig] = None,
) -> BookingWorkflow:
    context = build_booking_context(stay_id, catalog, enrichment, pricing=pricing)
    return BookingWorkflow.start(context, session_id=session_id, city=city)


def quote_sessions(
    context: BookingContext,
    departure_city: Optional[str] = "",
    apply_promo: bool = True,
) -> List[SessionQuote]:
    """Final GED price per priced session; duration is taken from the session dates."""
    pricing = GedPricing(context.pricing)
    quotes: List[SessionQuote] = []
    for s in context.sessions:
        base = context.session_prices.get(s.id)
        if base is None:
            continue
        duration = days_between(s.start_date, s.end_date)
        quotes.append(
            SessionQuote(
                session_id=s.id,
                start_date=s.start_date,
                end_date=s.end_date,
                duration_days=duration,
                base_price=base,
                departure_city=departure_city or None,
                price=pricing.compute_price(base, duration, departure_city, apply_promo),
            )
        )
    return quotes
