from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Protocol

from apify_client import ApifyClient
from pydantic import ValidationError

from ged_booking.schemas.enrichment import EnrichmentItem

logger = logging.getLogger(__name__)

DEFAULT_ENRICHMENT_PATH = Path("fixtures/enrichment_sample.json")


class EnrichmentSource(Protocol):
    def get_enrichment(self, source_url: str) -> Optional[EnrichmentItem]:
        """Departures + raw session prices for one stay, or None if not scraped."""
        ...


def _norm_url(u: str) -> str:
    return u.strip().rstrip("/").lower()


def _index_items(items: Iterable[Any]) -> Dict[str, EnrichmentItem]:
    out: Dict[str, EnrichmentItem] = {}
    for it in items:
        if not isinstance(it, dict):
            continue
        try:
            item = EnrichmentItem.model_validate(it)
        except ValidationError as e:
            logger.warning("skipping invalid enrichment item %s: %s", it.get("source_url") or it.get("sourceUrl") or it.get("url"), e)
            continue
        if item.source_url:
            out.setdefault(_norm_url(item.source_url), item)
    return out


class FixtureEnrichment:
    """
    Reads the merged enrichment export:

        {"ok": true, "items": [{"source_url": ..., "departures": [...], "sessions": [...]}]}
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path or os.getenv("GED_ENRICHMENT_PATH") or DEFAULT_ENRICHMENT_PATH)
        self._items: Optional[Dict[str, EnrichmentItem]] = None

    def _load(self) -> Dict[str, EnrichmentItem]:
        if self._items is None:
            if not self.path.exists():
                raise RuntimeError(f"enrichment file not found: {self.path}. Run the merge step first.")
            data = json.loads(self.path.read_text(encoding="utf-8"))
            items = data.get("items", []) if isinstance(data, dict) else data
            self._items = _index_items(items)
        return self._items

    def get_enrichment(self, source_url: str) -> Optional[EnrichmentItem]:
        if not source_url:
            return None
        return self._load().get(_norm_url(source_url))


class ApifyEnrichmentService:
    """
    Enrichment read from the Apify dataset the upstream scraper writes to.

    The whole dataset is small (one item per stay), so it is read once and
    indexed by source_url.
    """

    def __init__(
        self,
        *,
        token: Optional[str] = None,
        dataset_id: Optional[str] = None,
        client: Optional[ApifyClient] = None,
    ) -> None:
        self.token = token or os.getenv("APIFY_TOKEN")
        self.dataset_id = dataset_id or os.getenv("APIFY_ENRICHMENT_DATASET_ID")

        if client is None and not self.token:
            raise ValueError("APIFY_TOKEN is missing (env var).")
        if not self.dataset_id:
            raise ValueError("APIFY_ENRICHMENT_DATASET_ID is missing (env var).")

        self.client = client or ApifyClient(self.token)
        self._items: Optional[Dict[str, EnrichmentItem]] = None

    def _load(self) -> Dict[str, EnrichmentItem]:
        if self._items is None:
            items = self.client.dataset(self.dataset_id).iterate_items()
            self._items = _index_items(items)
            logger.info("apify enrichment loaded: %s items from dataset %s", len(self._items), self.dataset_id)
        return self._items

    def get_enrichment(self, source_url: str) -> Optional[EnrichmentItem]:
        if not source_url:
            return None
        return self._load().get(_norm_url(source_url))
