# ged_booking/schemas/enrichment.py
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ged_booking.schemas.stay import DepartureCity


class RawSessionPrice(BaseModel):
    """
    One scraped session line from the upstream provider.
    Prices are kept loose (Any): the scraper sometimes emits strings or null,
    and only finite numbers are used downstream.
    """
    model_config = ConfigDict(extra="allow")

    date_text: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    duration_days: Optional[int] = None
    base_price_eur: Any = None
    promo_price_eur: Any = None


class EnrichmentItem(BaseModel):
    """
    Departures + raw session prices for one stay, keyed by the stay's source_url.
    extra="allow" so new scraper fields do not break loading.
    """
    model_config = ConfigDict(extra="allow")

    source_url: str
    departures: List[DepartureCity] = Field(default_factory=list)
    sessions: List[RawSessionPrice] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def accept_url_aliases(cls, data: Any) -> Any:
        # session exports use sourceUrl / url instead of source_url
        if isinstance(data, dict) and not data.get("source_url"):
            url = data.get("sourceUrl") or data.get("url")
            if url:
                data = {**data, "source_url": url}
        return data
