"""
Booking workflow as an explicit state machine.

    select_session -> select_city -> requester_info -> minor_info
        -> review_and_options -> success

apply_event() is pure: (context, state, event) -> new state | StepValidationError.
Only confirm() talks to the outside world (one awaited submission, never retried).
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from typing import List, Optional, Union

from ged_booking.logic.age import INVALID_DATE_MESSAGE, validate_age
from ged_booking.logic.dates import parse_iso_date
from ged_booking.logic.departures import city_extra
from ged_booking.logic.pricing import GedPricing
from ged_booking.schemas.booking import BookingRequest
from ged_booking.schemas.workflow import (
    Back,
    BookingContext,
    BookingEvent,
    BookingState,
    ChooseOption,
    Next,
    SelectCity,
    SelectSession,
    StepValidationError,
    UpdateMinor,
    UpdateRequester,
    WorkflowStep,
)
from ged_booking.services.booking_submission import BookingSubmissionError, BookingSubmitter

logger = logging.getLogger(__name__)

STEP_ORDER: List[WorkflowStep] = [
    WorkflowStep.SELECT_SESSION,
    WorkflowStep.SELECT_CITY,
    WorkflowStep.REQUESTER_INFO,
    WorkflowStep.MINOR_INFO,
    WorkflowStep.REVIEW_AND_OPTIONS,
    WorkflowStep.SUCCESS,
]

TransitionResult = Union[BookingState, StepValidationError]


def _error(state: BookingState, message: str, field: Optional[str] = None) -> StepValidationError:
    return StepValidationError(step=state.step, message=message, field=field)


def refresh(context: BookingContext, state: BookingState, **update) -> BookingState:
    """
    Apply `update`, then recompute what derives from the selections:
    the live price breakdown and the age check (age depends on the session start).
    """
    s = state.model_copy(update=update)

    session = context.find_session(s.session_id)
    pricing = GedPricing(context.pricing)
    breakdown = pricing.compose_breakdown(
        session_price=context.session_prices.get(s.session_id) if session else None,
        city_extra=city_extra(context.departures, s.city),
        option=s.option,
        min_session_price=context.min_session_price,
    )

    age_check = None
    if session is not None and s.minor.birth_date:
        age_check = validate_age(
            s.minor.birth_date,
            session.start_date,
            context.stay.age_min,
            context.stay.age_max,
        )

    return s.model_copy(update={"breakdown": breakdown, "age_check": age_check})


def initial_state(
    context: BookingContext,
    session_id: Optional[str] = None,
    city: Optional[str] = None,
) -> BookingState:
    """
    Entry point depends on what the caller pre-selected:
    session + city -> requester_info, session only -> select_city, else select_session.
    A pre-selected session that is unknown or full is dropped.
    """
    session = context.find_session(session_id)
    if session is None or session.is_full:
        session_id = None

    city = city.strip() if city and city.strip() else None

    if session_id and city:
        step = WorkflowStep.REQUESTER_INFO
    elif session_id:
        step = WorkflowStep.SELECT_CITY
    else:
        step = WorkflowStep.SELECT_SESSION

    return refresh(context, BookingState(), step=step, session_id=session_id, city=city)


# --- gates ---

def _check_session(context: BookingContext, state: BookingState) -> Optional[StepValidationError]:
    if not state.session_id:
        return _error(state, "Veuillez choisir une session.", "session_id")
    session = context.find_session(state.session_id)
    if session is None:
        return _error(state, "Session inconnue.", "session_id")
    if session.is_full:
        return _error(state, "Cette session est complète.", "session_id")
    return None


def _check_city(state: BookingState) -> Optional[StepValidationError]:
    if not state.city or not state.city.strip():
        return _error(state, "Veuillez choisir une ville de départ.", "city")
    return None


def _check_requester(state: BookingState) -> Optional[StepValidationError]:
    r = state.requester
    for name in ("organisation", "social_worker_name", "email", "phone"):
        if not getattr(r, name).strip():
            return _error(state, "Tous les champs du référent sont obligatoires.", name)
    return None


def _check_minor(context: BookingContext, state: BookingState) -> Optional[StepValidationError]:
    m = state.minor
    if not m.first_name.strip():
        return _error(state, "Le prénom de l'enfant est obligatoire.", "first_name")

    if not m.birth_date or not m.birth_date.strip():
        return _error(state, "La date de naissance est obligatoire.", "birth_date")
    if parse_iso_date(m.birth_date) is None:
        return _error(state, INVALID_DATE_MESSAGE, "birth_date")

    session = context.find_session(state.session_id)
    if session is None:
        return _check_session(context, state)

    check = validate_age(m.birth_date, session.start_date, context.stay.age_min, context.stay.age_max)
    if not check.valid:
        return _error(state, check.message or INVALID_DATE_MESSAGE, "birth_date")

    if not m.consent:
        return _error(state, "Le consentement est obligatoire.", "consent")
    return None


def check_step(context: BookingContext, state: BookingState) -> Optional[StepValidationError]:
    """Gate for leaving the current step forward; None means OK."""
    step = state.step
    if step == WorkflowStep.SELECT_SESSION:
        return _check_session(context, state)
    if step == WorkflowStep.SELECT_CITY:
        return _check_city(state)
    if step == WorkflowStep.REQUESTER_INFO:
        return _check_requester(state)
    if step == WorkflowStep.MINOR_INFO:
        return _check_minor(context, state)
    return None


# --- transitions ---

def _require_step(state: BookingState, step: WorkflowStep) -> Optional[StepValidationError]:
    if state.step != step:
        return _error(state, f"Action non disponible à l'étape {state.step.value}.")
    return None


def apply_event(context: BookingContext, state: BookingState, event: BookingEvent) -> TransitionResult:
    if state.step == WorkflowStep.SUCCESS:
        return _error(state, "La réservation est déjà confirmée.")

    if isinstance(event, SelectSession):
        err = _require_step(state, WorkflowStep.SELECT_SESSION)
        if err:
            return err
        session = context.find_session(event.session_id)
        if session is None:
            return _error(state, "Session inconnue.", "session_id")
        if session.is_full:
            return _error(state, "Cette session est complète.", "session_id")
        return refresh(context, state, session_id=session.id, error=None)

    if isinstance(event, SelectCity):
        err = _require_step(state, WorkflowStep.SELECT_CITY)
        if err:
            return err
        city = event.city.strip()
        if not city:
            return _error(state, "Veuillez choisir une ville de départ.", "city")
        return refresh(context, state, city=city, error=None)

    if isinstance(event, UpdateRequester):
        err = _require_step(state, WorkflowStep.REQUESTER_INFO)
        if err:
            return err
        changes = event.model_dump(exclude_none=True)
        requester = state.requester.model_copy(update=changes)
        return refresh(context, state, requester=requester, error=None)

    if isinstance(event, UpdateMinor):
        err = _require_step(state, WorkflowStep.MINOR_INFO)
        if err:
            return err
        changes = event.model_dump(exclude_none=True)
        minor = state.minor.model_copy(update=changes)
        return refresh(context, state, minor=minor, error=None)

    if isinstance(event, ChooseOption):
        err = _require_step(state, WorkflowStep.REVIEW_AND_OPTIONS)
        if err:
            return err
        return refresh(context, state, option=event.option, error=None)

    if isinstance(event, Next):
        if state.step == WorkflowStep.REVIEW_AND_OPTIONS:
            return _error(state, "Confirmez la réservation pour continuer.")
        err = check_step(context, state)
        if err:
            return err
        nxt = STEP_ORDER[STEP_ORDER.index(state.step) + 1]
        return refresh(context, state, step=nxt, error=None)

    if isinstance(event, Back):
        idx = STEP_ORDER.index(state.step)
        if idx == 0:
            return _error(state, "Pas d'étape précédente.")
        return refresh(context, state, step=STEP_ORDER[idx - 1], error=None)

    raise TypeError(f"unknown booking event: {type(event).__name__}")


# --- confirmation ---

def build_request(context: BookingContext, state: BookingState) -> BookingRequest:
    birth = parse_iso_date(state.minor.birth_date)
    if birth is None or not state.session_id or not state.city:
        raise ValueError("booking state is not complete")

    r = state.requester
    return BookingRequest(
        stay_id=context.stay.id,
        session_id=state.session_id,
        departure_city=state.city,
        educational_option=state.option,
        organisation=r.organisation.strip(),
        social_worker_name=r.social_worker_name.strip(),
        email=r.email.strip(),
        phone=r.phone.strip(),
        child_first_name=state.minor.first_name.strip(),
        child_birth_date=birth,
        consent=state.minor.consent,
    )


async def _submit(submitter: BookingSubmitter, request: BookingRequest) -> str:
    if inspect.iscoroutinefunction(submitter.submit):
        return await submitter.submit(request)
    # sync HTTP client: keep the event loop free
    return await asyncio.to_thread(submitter.submit, request)


async def confirm(
    context: BookingContext,
    state: BookingState,
    submitter: BookingSubmitter,
) -> TransitionResult:
    """
    review_and_options -> success.
    Every earlier gate is re-checked (age against the CURRENT session).
    A submission failure keeps the step, keeps all data and carries the
    collaborator's message verbatim in state.error. No automatic retry.
    """
    err = _require_step(state, WorkflowStep.REVIEW_AND_OPTIONS)
    if err:
        return err

    for step in STEP_ORDER[: STEP_ORDER.index(WorkflowStep.REVIEW_AND_OPTIONS)]:
        gate = check_step(context, state.model_copy(update={"step": step}))
        if gate is not None:
            return refresh(context, state, error=gate.message)

    request = build_request(context, state)

    try:
        booking_id = await _submit(submitter, request)
    except BookingSubmissionError as e:
        logger.warning(
            "booking submission failed: stay=%s session=%s error=%s",
            request.stay_id, request.session_id, e.message,
        )
        return refresh(context, state, error=e.message)

    logger.info("booking submitted: id=%s stay=%s session=%s", booking_id, request.stay_id, request.session_id)
    return refresh(context, state, step=WorkflowStep.SUCCESS, booking_id=booking_id, error=None)


class BookingWorkflow:
    """
    Holder for one user's booking: context + current state.
    Validation errors are stored in place (state.error), the step never moves on error.
    """

    def __init__(self, context: BookingContext, state: Optional[BookingState] = None) -> None:
        self.context = context
        self.state = state or initial_state(context)

    @classmethod
    def start(
        cls,
        context: BookingContext,
        session_id: Optional[str] = None,
        city: Optional[str] = None,
    ) -> "BookingWorkflow":
        return cls(context, initial_state(context, session_id=session_id, city=city))

    @property
    def step(self) -> WorkflowStep:
        return self.state.step

    def dispatch(self, event: BookingEvent) -> BookingState:
        result = apply_event(self.context, self.state, event)
        if isinstance(result, StepValidationError):
            self.state = self.state.model_copy(update={"error": result.message})
        else:
            self.state = result
        return self.state

    async def confirm(self, submitter: BookingSubmitter) -> BookingState:
        result = await confirm(self.context, self.state, submitter)
        if isinstance(result, StepValidationError):
            self.state = self.state.model_copy(update={"error": result.message})
        else:
            self.state = result
        return self.state
