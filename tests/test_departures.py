from __future__ import annotations

from ged_booking.logic.departures import city_extra, departure_options, is_standard_city
from ged_booking.schemas.stay import NO_TRANSPORT, DepartureCity


def _cities(*pairs):
    return [DepartureCity(city=c, extra_eur=e) for c, e in pairs]


def test_no_transport_always_first_even_without_input():
    opts = departure_options([])
    assert [o.city for o in opts] == [NO_TRANSPORT]
    assert opts[0].extra_eur == 0


def test_filters_to_allow_list_and_keeps_order():
    opts = departure_options(
        _cities(("Lyon", 170), ("Annecy", 170), ("Sans transport", 0), ("Paris", 220))
    )
    assert [(o.city, o.extra_eur) for o in opts] == [
        (NO_TRANSPORT, 0),
        ("Lyon", 170),
        ("Paris", 220),
    ]


def test_duplicates_first_one_wins():
    opts = departure_options(_cities(("Paris", 220), ("PARIS", 230), (" paris ", 240)))
    assert [(o.city, o.extra_eur) for o in opts] == [(NO_TRANSPORT, 0), ("Paris", 220)]


def test_scraped_no_transport_extra_is_ignored():
    opts = departure_options(_cities(("sans transport", 99)))
    assert opts == [DepartureCity(city=NO_TRANSPORT, extra_eur=0)]


def test_custom_allow_list():
    opts = departure_options(_cities(("Annecy", 170), ("Paris", 220)), allow_list=["annecy"])
    assert [o.city for o in opts] == [NO_TRANSPORT, "Annecy"]


def test_standard_city_substring_match():
    assert is_standard_city("Paris Gare de Lyon")
    assert is_standard_city("NANTES")
    assert not is_standard_city("Valence")
    assert not is_standard_city("")


def test_city_extra():
    cities = departure_options(_cities(("Paris", 220), ("Lyon", 170)))
    assert city_extra(cities, "paris") == 220
    assert city_extra(cities, " Lyon ") == 170
    assert city_extra(cities, NO_TRANSPORT) == 0
    assert city_extra(cities, "Annecy") == 0
    assert city_extra(cities, "") == 0
    assert city_extra(cities, None) == 0


def test_none_extra_reads_as_zero():
    assert DepartureCity(city="Lille", extra_eur=None).extra_eur == 0
    assert DepartureCity.model_validate({"city": "Lille", "extraEur": 80}).extra_eur == 80
