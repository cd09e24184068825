"""
Exact age of a minor at a session's start date, and the eligibility gate
built on it. Must be re-run whenever the birth date OR the session changes.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Optional

from ged_booking.logic.dates import parse_iso_date
from ged_booking.schemas.booking import AgeValidationResult

INVALID_DATE_MESSAGE = "Date de naissance invalide"


def _birthday_in_year(birth: date, year: int) -> date:
    try:
        return birth.replace(year=year)
    except ValueError:
        # 29 Feb in a non-leap year -> 1 Mar
        return date(year, 3, 1)


def age_at_date(birth_date: Any, target_date: Any) -> Optional[int]:
    """Calendar age in whole years at target_date; None if either date is invalid."""
    birth = parse_iso_date(birth_date)
    target = parse_iso_date(target_date)
    if birth is None or target is None:
        return None

    age = target.year - birth.year
    if target < _birthday_in_year(birth, target.year):
        age -= 1
    return age


def _is_missing(x: Any) -> bool:
    return x is None or (isinstance(x, str) and not x.strip())


def age_out_of_range_message(age: int, age_min: int, age_max: int) -> str:
    return (
        f"À la date du départ, l'enfant aura {age} ans. "
        f"Ce séjour est prévu pour les {age_min}–{age_max} ans."
    )


def validate_age(
    birth_date: Any,
    session_start_date: Any,
    age_min: int,
    age_max: int,
) -> AgeValidationResult:
    """
    - missing input      -> valid=False, no message (not answerable yet)
    - unparseable input  -> valid=False, "Date de naissance invalide"
    - out of [min, max]  -> valid=False, message with age and range
    """
    if _is_missing(birth_date) or _is_missing(session_start_date):
        return AgeValidationResult(valid=False, age=None, message=None)

    age = age_at_date(birth_date, session_start_date)
    if age is None:
        return AgeValidationResult(valid=False, age=None, message=INVALID_DATE_MESSAGE)

    if age < age_min or age > age_max:
        return AgeValidationResult(
            valid=False,
            age=age,
            message=age_out_of_range_message(age, age_min, age_max),
        )

    return AgeValidationResult(valid=True, age=age, message=None)
