# scripts/smoke_apify_enrichment.py
from __future__ import annotations

import sys

from dotenv import load_dotenv

load_dotenv()

from ged_booking.logic.departures import departure_options
from ged_booking.logic.sessions import min_session_price
from ged_booking.services.enrichment import ApifyEnrichmentService


def main() -> None:
    source_url = sys.argv[1] if len(sys.argv) > 1 else "https://www.ufoval.fr/sejours/alpes-aventure"

    svc = ApifyEnrichmentService()
    item = svc.get_enrichment(source_url)
    if item is None:
        print(f"No enrichment for {source_url}")
        return

    print(f"Enrichment for {item.source_url}")
    print(f"  raw departures: {len(item.departures)} | raw sessions: {len(item.sessions)}")
    for d in departure_options(item.departures):
        print(f"  - {d.city}: +{d.extra_eur} €")
    print(f"  min session price: {min_session_price(item.sessions)}")


if __name__ == "__main__":
    main()
