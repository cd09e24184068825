from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from ged_booking.schemas.stay import NO_TRANSPORT, DepartureCity


# Display allow-list: which scraped departure cities are ever shown.
# NOT the pricing rule set (GedPricingConfig.surcharge_cities); the two differ on purpose.
DEFAULT_STANDARD_CITIES: tuple[str, ...] = (
    "paris",
    "lyon",
    "marseille",
    "lille",
    "bordeaux",
    "rennes",
    "nantes",
    "toulouse",
    "grenoble",
    "strasbourg",
)


def _norm(s: str) -> str:
    return " ".join(s.lower().strip().split())


def is_standard_city(name: str, allow_list: Sequence[str] = DEFAULT_STANDARD_CITIES) -> bool:
    """Case-insensitive substring match: "Paris Gare de Lyon" matches "paris"."""
    n = _norm(name)
    return any(_norm(std) in n for std in allow_list if std and std.strip())


def departure_options(
    cities: Iterable[DepartureCity],
    allow_list: Sequence[str] = DEFAULT_STANDARD_CITIES,
) -> List[DepartureCity]:
    """
    Cities the user can pick from:
    - "Sans transport" is always present (0 €) and always first
    - other cities only if they match the allow-list, in input order
    - duplicates (case-insensitive) dropped, first one wins
    """
    no_transport = DepartureCity(city=NO_TRANSPORT, extra_eur=0)
    out: List[DepartureCity] = []
    seen: set[str] = set()

    for c in cities or []:
        if not c.city or not c.city.strip():
            continue
        if c.is_no_transport:
            continue
        key = _norm(c.city)
        if key in seen or not is_standard_city(c.city, allow_list):
            continue
        seen.add(key)
        out.append(c)

    return [no_transport] + out


def city_extra(cities: Iterable[DepartureCity], name: Optional[str]) -> int:
    """Transport extra for a selected city; unknown / empty / "Sans transport" -> 0."""
    if not name or not name.strip():
        return 0
    key = _norm(name)
    for c in cities or []:
        if _norm(c.city) == key:
            return 0 if c.is_no_transport else c.extra_eur
    return 0
