# ged_booking/schemas/stay.py
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


NO_TRANSPORT = "Sans transport"


class AudienceMode(str, Enum):
    """Who is browsing the catalog. Kids never see prices."""

    PRO = "pro"
    KIDS = "kids"


def _date_part(v: Any) -> Any:
    # catalog exports full ISO datetimes ("2026-07-08T00:00:00.000Z")
    if isinstance(v, str) and "T" in v:
        return v.strip()[:10]
    return v


class Stay(BaseModel):
    """
    Stay = a bookable offering (undated template).
    Read-only for the engine: owned by the catalog.
    """
    model_config = ConfigDict(extra="ignore", frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    slug: Optional[str] = None

    age_min: int = Field(ge=0)
    age_max: int = Field(ge=0)
    duration_days: int = Field(ge=0)

    # None = "price on request"
    price_from: Optional[float] = None
    published: bool = True

    # external source reference (key of the enrichment lookup)
    source_url: Optional[str] = None
    period: Optional[str] = None

    @model_validator(mode="after")
    def validate_age_range(self):
        if self.age_min > self.age_max:
            raise ValueError("age_min must be <= age_max")
        return self


class StaySession(BaseModel):
    """A dated occurrence of a Stay with finite seats."""
    model_config = ConfigDict(extra="ignore", frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    stay_id: str
    start_date: date
    end_date: date
    seats_left: int = Field(default=0, ge=0)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def coerce_dates(cls, v: Any) -> Any:
        return _date_part(v)

    @model_validator(mode="after")
    def validate_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self

    @property
    def is_full(self) -> bool:
        return self.seats_left == 0


class DepartureCity(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, alias_generator=to_camel, populate_by_name=True)

    city: str
    extra_eur: int = Field(default=0, ge=0)

    @field_validator("extra_eur", mode="before")
    @classmethod
    def none_is_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @property
    def is_no_transport(self) -> bool:
        return self.city.strip().lower() == NO_TRANSPORT.lower()
