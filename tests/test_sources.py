from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from ged_booking.services.catalog import FixtureCatalog
from ged_booking.services.enrichment import ApifyEnrichmentService, FixtureEnrichment

ALPES_URL = "https://www.ufoval.fr/sejours/alpes-aventure"


def test_catalog_drops_past_sessions_and_sorts(catalog):
    stay, sessions = catalog.get_stay("stay-alpes")
    assert stay.title == "Alpes Aventure"
    assert stay.age_min == 10 and stay.age_max == 17
    assert stay.price_from == 615
    assert stay.source_url == ALPES_URL
    assert [s.id for s in sessions] == ["sess-1", "sess-1-dup", "sess-2", "sess-3"]
    assert all(s.stay_id == "stay-alpes" for s in sessions)
    assert sessions[0].start_date == date(2027, 7, 8)


def test_catalog_today_controls_future_filter():
    cat = FixtureCatalog(Path(__file__).resolve().parent.parent / "fixtures" / "stays_sample.json", today=date(2027, 7, 15))
    _, sessions = cat.get_stay("stay-alpes")
    assert [s.id for s in sessions] == ["sess-2", "sess-3"]


def test_catalog_unknown_stay(catalog):
    assert catalog.get_stay("nope") is None


def test_catalog_price_on_request(catalog):
    stay, _ = catalog.get_stay("stay-mer")
    assert stay.price_from is None
    assert stay.source_url is None


def test_catalog_lists_published_only(catalog):
    assert {s.id for s in catalog.list_stays()} == {"stay-alpes", "stay-mer"}
    assert len(catalog.list_stays(published_only=False)) == 3


def test_catalog_missing_file(tmp_path):
    with pytest.raises(RuntimeError):
        FixtureCatalog(tmp_path / "none.json").get_stay("x")


def test_enrichment_lookup_normalizes_url(enrichment):
    item = enrichment.get_enrichment(ALPES_URL.upper() + "/")
    assert item is not None
    assert len(item.departures) == 6
    assert len(item.sessions) == 3
    assert enrichment.get_enrichment("https://example.org/other") is None
    assert enrichment.get_enrichment("") is None


def test_enrichment_missing_file(tmp_path):
    with pytest.raises(RuntimeError):
        FixtureEnrichment(tmp_path / "none.json").get_enrichment(ALPES_URL)


class FakeDataset:
    def __init__(self, items):
        self.items = items
        self.reads = 0

    def iterate_items(self):
        self.reads += 1
        yield from self.items


class FakeApifyClient:
    def __init__(self, items):
        self.ds = FakeDataset(items)
        self.dataset_ids = []

    def dataset(self, dataset_id):
        self.dataset_ids.append(dataset_id)
        return self.ds


def test_apify_enrichment_reads_dataset_once():
    client = FakeApifyClient(
        [
            {"sourceUrl": ALPES_URL, "departures": [{"city": "Paris", "extra_eur": 220}], "sessions": []},
            {"url": "https://example.org/b", "departures": [], "sessions": []},
            "not an item",
        ]
    )
    svc = ApifyEnrichmentService(dataset_id="ds-1", client=client)

    item = svc.get_enrichment(ALPES_URL)
    assert item.departures[0].extra_eur == 220
    assert svc.get_enrichment("https://example.org/b/") is not None
    assert client.ds.reads == 1
    assert client.dataset_ids == ["ds-1"]


def test_apify_enrichment_requires_env(monkeypatch):
    monkeypatch.delenv("APIFY_TOKEN", raising=False)
    monkeypatch.delenv("APIFY_ENRICHMENT_DATASET_ID", raising=False)
    with pytest.raises(ValueError):
        ApifyEnrichmentService()
    with pytest.raises(ValueError):
        ApifyEnrichmentService(client=FakeApifyClient([]))


def test_invalid_enrichment_item_is_skipped(caplog):
    client = FakeApifyClient(
        [
            {"departures": [], "sessions": []},
            {"sourceUrl": "https://example.org/bad", "departures": [{"city": "Paris", "extra_eur": -5}]},
            {"sourceUrl": ALPES_URL, "departures": [{"city": "Lyon", "extra_eur": 170}], "sessions": []},
        ]
    )
    svc = ApifyEnrichmentService(dataset_id="ds-1", client=client)

    with caplog.at_level("WARNING", logger="ged_booking.services.enrichment"):
        item = svc.get_enrichment(ALPES_URL)

    assert item.departures[0].city == "Lyon"
    assert svc.get_enrichment("https://example.org/bad") is None
    assert client.ds.reads == 1
    assert "skipping invalid enrichment item" in caplog.text
