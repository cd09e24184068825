# ged_booking/schemas/workflow.py
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ged_booking.schemas.booking import AgeValidationResult, MinorInfo, RequesterInfo
from ged_booking.schemas.pricing import EducationalOption, GedPricingConfig, PriceBreakdown
from ged_booking.schemas.stay import DepartureCity, Stay, StaySession


class WorkflowStep(str, Enum):
    SELECT_SESSION = "select_session"
    SELECT_CITY = "select_city"
    REQUESTER_INFO = "requester_info"
    MINOR_INFO = "minor_info"
    REVIEW_AND_OPTIONS = "review_and_options"
    SUCCESS = "success"


class BookingContext(BaseModel):
    """
    Everything the workflow reads but never changes:
    the stay, its de-duplicated sessions, the displayable departures and prices.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    stay: Stay
    sessions: List[StaySession] = Field(default_factory=list)
    departures: List[DepartureCity] = Field(default_factory=list)

    # session id -> live session price (no promo)
    session_prices: Dict[str, float] = Field(default_factory=dict)
    min_session_price: Optional[float] = None

    pricing: GedPricingConfig = Field(default_factory=GedPricingConfig)

    def find_session(self, session_id: Optional[str]) -> Optional[StaySession]:
        if not session_id:
            return None
        return next((s for s in self.sessions if s.id == session_id), None)


class BookingState(BaseModel):
    """
    Current step + everything entered so far.
    Immutable: transitions return a new state.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    step: WorkflowStep = WorkflowStep.SELECT_SESSION

    session_id: Optional[str] = None
    city: Optional[str] = None
    requester: RequesterInfo = Field(default_factory=RequesterInfo)
    minor: MinorInfo = Field(default_factory=MinorInfo)
    option: Optional[EducationalOption] = None

    age_check: Optional[AgeValidationResult] = None
    breakdown: PriceBreakdown = Field(default_factory=PriceBreakdown)

    # in-place message (validation or submission); the step does not change
    error: Optional[str] = None
    booking_id: Optional[str] = None


class StepValidationError(BaseModel):
    model_config = ConfigDict(frozen=True)

    step: WorkflowStep
    message: str
    field: Optional[str] = None


# --- Events ---

class _Event(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class SelectSession(_Event):
    session_id: str


class SelectCity(_Event):
    city: str


class UpdateRequester(_Event):
    organisation: Optional[str] = None
    social_worker_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class UpdateMinor(_Event):
    first_name: Optional[str] = None
    birth_date: Optional[str] = None
    consent: Optional[bool] = None


class ChooseOption(_Event):
    option: Optional[EducationalOption] = None


class Next(_Event):
    pass


class Back(_Event):
    pass


BookingEvent = Union[
    SelectSession, SelectCity, UpdateRequester, UpdateMinor, ChooseOption, Next, Back
]
