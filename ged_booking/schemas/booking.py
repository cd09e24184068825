# ged_booking/schemas/booking.py
from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ged_booking.schemas.pricing import EducationalOption


class RequesterInfo(BaseModel):
    """Contact of the social worker placing the booking. All four are required."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    organisation: str = ""
    social_worker_name: str = ""
    email: str = ""
    phone: str = ""

    def is_complete(self) -> bool:
        return all(
            v.strip() for v in (self.organisation, self.social_worker_name, self.email, self.phone)
        )


class MinorInfo(BaseModel):
    """
    Minimal data about the child.
    birth_date stays the raw user input until it parses, so an invalid value
    can be reported instead of rejected at assignment.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    first_name: str = ""
    birth_date: Optional[str] = None
    consent: bool = False


class AgeValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool
    age: Optional[int] = None
    message: Optional[str] = None


class BookingRequest(BaseModel):
    """
    Finalized request handed to the submission collaborator.
    Serialized with camelCase aliases (stayId, childBirthDate, ...).
    """
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    stay_id: str
    session_id: str
    departure_city: str
    educational_option: Optional[EducationalOption] = None

    organisation: str
    social_worker_name: str
    email: str
    phone: str

    child_first_name: str
    child_last_name: str = ""  # never collected
    child_birth_date: date
    consent: bool

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
