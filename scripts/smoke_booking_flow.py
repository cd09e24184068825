# scripts/smoke_booking_flow.py
"""
OFFLINE: runs the whole booking flow on the fixtures.
Submits to GED_BOOKING_API_URL if set, otherwise to an in-memory stub.
"""
from __future__ import annotations

import asyncio
import logging
import os
import uuid

from dotenv import load_dotenv

load_dotenv()

from ged_booking.logic.pricing import format_breakdown
from ged_booking.orchestrator.booking_flow import quote_sessions, start_booking
from ged_booking.schemas.booking import BookingRequest
from ged_booking.schemas.pricing import EducationalOption
from ged_booking.schemas.workflow import ChooseOption, Next, SelectCity, SelectSession, UpdateMinor, UpdateRequester
from ged_booking.services.booking_submission import HttpBookingSubmitter
from ged_booking.services.catalog import FixtureCatalog
from ged_booking.services.enrichment import FixtureEnrichment


class PrintSubmitter:
    def submit(self, request: BookingRequest) -> str:
        print("   payload:", request.to_payload())
        return f"BK-{uuid.uuid4().hex[:8].upper()}"


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    wf = start_booking("stay-alpes", FixtureCatalog(), FixtureEnrichment())
    ctx = wf.context

    print(f"Stay: {ctx.stay.title} ({ctx.stay.age_min}-{ctx.stay.age_max} ans)")
    print("Sessions:")
    for s in ctx.sessions:
        print(f"  - {s.id}: {s.start_date} -> {s.end_date} | {'complet' if s.is_full else f'{s.seats_left} places'}")
    print("Departures:", [f"{d.city} (+{d.extra_eur})" for d in ctx.departures])

    print("\nQuotes (Paris):")
    for q in quote_sessions(ctx, "paris"):
        print(f"  - {q.session_id}: {q.duration_days}d base={q.base_price} -> {q.price} €")

    steps = [
        SelectSession(session_id=ctx.sessions[0].id),
        Next(),
        SelectCity(city="Paris"),
        Next(),
        UpdateRequester(organisation="ASE 69", social_worker_name="Camille Martin", email="c.martin@example.org", phone="0600000000"),
        Next(),
        UpdateMinor(first_name="Sam", birth_date="2014-03-10", consent=True),
        Next(),
        ChooseOption(option=EducationalOption.ZEN),
    ]
    for ev in steps:
        st = wf.dispatch(ev)
        print(f"\n{type(ev).__name__} -> step={st.step.value} error={st.error}")
        text = format_breakdown(st.breakdown)
        print(f"   {text.min_price_text} | estimation={text.estimation_text} | {text.detail_lines}")

    submitter = HttpBookingSubmitter() if os.getenv("GED_BOOKING_API_URL") else PrintSubmitter()
    st = asyncio.run(wf.confirm(submitter))
    print(f"\nCONFIRM -> step={st.step.value} booking_id={st.booking_id} error={st.error}")


if __name__ == "__main__":
    main()
