from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from ged_booking.services.catalog import FixtureCatalog
from ged_booking.services.enrichment import FixtureEnrichment

FIXTURES = Path(__file__).resolve().parent.parent / "fixtures"

# every fixture session starts in 2027; "sess-past" starts before this date
TODAY = date(2026, 1, 1)


@pytest.fixture
def catalog() -> FixtureCatalog:
    return FixtureCatalog(FIXTURES / "stays_sample.json", today=TODAY)


@pytest.fixture
def enrichment() -> FixtureEnrichment:
    return FixtureEnrichment(FIXTURES / "enrichment_sample.json")
