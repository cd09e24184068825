# scripts/smoke_pricing.py
from __future__ import annotations

from ged_booking.logic.pricing import GedPricing, calculate_duration, format_price


CASES = [
    # (base, duration, city, promo, expected)
    (615, 7, "paris", True, 767),
    (1095, 14, "lyon", True, 1346),
    (900, 12, "rennes", True, 1119),
    (615, 7, "paris", False, 807),
    (615, 7, "marseille", True, 767),
    (1200, 21, "grenoble", True, 1579),
    (1000, 13, "bordeaux", True, 1235),
    (615, 7, "", True, 755),
]


def main() -> None:
    pricing = GedPricing()

    print("GED tariff checks\n" + "=" * 60)
    ok = 0
    for base, duration, city, promo, expected in CASES:
        price = pricing.compute_price(base, duration, city, promo)
        status = "OK " if price == expected else "ERR"
        ok += price == expected
        print(
            f"{status} base={base} {duration}d city={city or '-'} promo={promo} "
            f"-> {format_price(price)} (expected {format_price(expected)})"
        )

    print(f"\nsurcharge cities ({len(pricing.departure_cities())}): {', '.join(pricing.departure_cities())}")
    print(f"duration 2026-07-08 -> 2026-07-21: {calculate_duration('2026-07-08', '2026-07-21')} days")
    print(f"\n{ok}/{len(CASES)} cases OK")


if __name__ == "__main__":
    main()
