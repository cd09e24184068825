# ged_booking/schemas/pricing.py
from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ged_booking.schemas.stay import NO_TRANSPORT


class EducationalOption(str, Enum):
    """Optional educational follow-up add-on. "No option" is None, not a member."""

    ZEN = "ZEN"
    ULTIME = "ULTIME"


class EducationalOptionInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    price: int
    description: str


EDUCATIONAL_OPTIONS: Dict[EducationalOption, EducationalOptionInfo] = {
    EducationalOption.ZEN: EducationalOptionInfo(
        label="Option ZEN", price=49, description="Suivi personnalisé"
    ),
    EducationalOption.ULTIME: EducationalOptionInfo(
        label="Option ULTIME", price=79, description="Accompagnement renforcé 1+1"
    ),
}


class GedPricingConfig(BaseModel):
    """
    GED tariff rules.

    - duration surcharges: +180 (7d), +310 (14d), +450 (21d)
    - prorated durations: 6, 8, 12, 13 days (scaled from the 14d tier)
    - departure city: flat +12 for the 10 GED cities
    - promo: 5% off the final price

    Immutable: build a new instance for another tariff, never patch this one.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    duration_surcharge: Mapping[int, int] = Field(
        default_factory=lambda: {7: 180, 14: 310, 21: 450},
        validate_default=True,
    )
    prorata_durations: FrozenSet[int] = frozenset({6, 8, 12, 13})
    prorata_reference_duration: int = 14

    surcharge_cities: FrozenSet[str] = frozenset(
        {
            "paris", "lyon", "rennes", "toulouse", "valence",
            "grenoble", "marseille", "strasbourg", "lille", "bordeaux",
        }
    )
    departure_supplement: int = Field(default=12, ge=0)

    promo_rate: Decimal = Decimal("0.05")

    option_prices: Mapping[EducationalOption, int] = Field(
        default_factory=lambda: {opt: info.price for opt, info in EDUCATIONAL_OPTIONS.items()},
        validate_default=True,
    )

    @field_validator("surcharge_cities", mode="after")
    @classmethod
    def normalize_cities(cls, v: FrozenSet[str]) -> FrozenSet[str]:
        cities = frozenset(c.strip().lower() for c in v if c and c.strip())
        if NO_TRANSPORT.lower() in cities:
            raise ValueError(f"'{NO_TRANSPORT}' can never carry a city supplement")
        return cities

    @field_validator("duration_surcharge", "option_prices", mode="after")
    @classmethod
    def read_only_tables(cls, v: Mapping) -> Mapping:
        # frozen=True does not reach inside dicts
        return MappingProxyType(dict(v))

    @field_validator("promo_rate")
    @classmethod
    def promo_rate_in_range(cls, v: Decimal) -> Decimal:
        if not (Decimal(0) <= v < Decimal(1)):
            raise ValueError("promo_rate must be in [0, 1)")
        return v

    @model_validator(mode="after")
    def validate_tables(self):
        if any(s < 0 for s in self.duration_surcharge.values()):
            raise ValueError("duration surcharges must be >= 0")
        if any(p < 0 for p in self.option_prices.values()):
            raise ValueError("option prices must be >= 0")
        if self.prorata_reference_duration not in self.duration_surcharge:
            raise ValueError("prorata_reference_duration must be a tabulated duration")
        if self.prorata_reference_duration <= 0:
            raise ValueError("prorata_reference_duration must be > 0")
        return self


class PriceBreakdown(BaseModel):
    """
    Live (promo-free) running total shown while the user is still choosing.
    Amounts are Decimal quantized to the cent; total is None iff base_session is None.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    base_session: Optional[Decimal] = None  # price of the selected session
    extra_transport: int = 0               # departure city extra
    extra_option: int = 0                  # educational option
    total: Optional[Decimal] = None
    min_price: Optional[Decimal] = None     # "À partir de" (cheapest session, no transport)
    has_selection: bool = False


class PriceBreakdownText(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_price_text: str
    estimation_text: Optional[str] = None
    detail_lines: List[str] = Field(default_factory=list)


class SessionQuote(BaseModel):
    """Final (promo applied) GED price of one session for a given departure city."""
    model_config = ConfigDict(frozen=True)

    session_id: str
    start_date: date
    end_date: date
    duration_days: int
    base_price: float
    departure_city: Optional[str] = None
    price: int
