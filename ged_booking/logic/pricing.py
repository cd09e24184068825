"""
GED pricing rules.

Final price (finalization, promo applied):
    base + duration surcharge (tabulated or prorated) + city supplement, then -promo

Live breakdown (while the user is still choosing, NO promo):
    session price + transport extra + option extra

Both fail open: an unknown duration or city contributes 0, never an error.
All rounding is ROUND_HALF_UP on Decimal, so 755.25 -> 755 and 766.65 -> 767.
"""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Union

from ged_booking.logic.dates import days_between
from ged_booking.schemas.pricing import (
    EducationalOption,
    GedPricingConfig,
    PriceBreakdown,
    PriceBreakdownText,
)
from ged_booking.schemas.stay import AudienceMode, Stay

logger = logging.getLogger(__name__)

Number = Union[int, float, Decimal]

PRICE_ON_REQUEST_PRO = "Tarif communiqué aux professionnels"
CENT = Decimal("0.01")


def _to_decimal(x: Number) -> Decimal:
    if isinstance(x, Decimal):
        return x
    # str() keeps 615.1 as 615.1 instead of its binary expansion
    return Decimal(str(x))


def round_half_up(x: Number) -> int:
    return int(_to_decimal(x).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_cents(x: Optional[Number]) -> Optional[Decimal]:
    if x is None:
        return None
    return _to_decimal(x).quantize(CENT, rounding=ROUND_HALF_UP)


class GedPricing:
    """GED price calculator bound to one (immutable) tariff."""

    def __init__(self, config: Optional[GedPricingConfig] = None) -> None:
        self.config = config or GedPricingConfig()

    # --- duration ---

    def surcharge_for_duration(self, days: int) -> int:
        cfg = self.config
        if days in cfg.duration_surcharge:
            return cfg.duration_surcharge[days]

        if days in cfg.prorata_durations:
            ref_days = cfg.prorata_reference_duration
            ref_surcharge = cfg.duration_surcharge[ref_days]
            return round_half_up(Decimal(ref_surcharge) * days / Decimal(ref_days))

        logger.debug("no duration surcharge rule for %s days", days)
        return 0

    # --- departure city ---

    def is_surcharge_city(self, city: Optional[str]) -> bool:
        if not city:
            return False
        return city.strip().lower() in self.config.surcharge_cities

    def surcharge_amount(self) -> int:
        return self.config.departure_supplement

    def departure_cities(self) -> list[str]:
        return sorted(self.config.surcharge_cities)

    # --- options ---

    def option_price(self, option: Optional[EducationalOption]) -> int:
        if option is None:
            return 0
        return self.config.option_prices.get(option, 0)

    # --- full calculation ---

    def compute_price(
        self,
        base_price: Number,
        duration_days: int,
        departure_city: Optional[str] = "",
        apply_promo: bool = True,
    ) -> int:
        """
        Final GED price for one session.

        >>> GedPricing().compute_price(615, 7, "paris")
        767
        """
        price = _to_decimal(base_price)

        # 1. duration
        price += self.surcharge_for_duration(duration_days)

        # 2. city supplement
        if self.is_surcharge_city(departure_city):
            price += self.surcharge_amount()

        # 3. promo
        if apply_promo:
            return round_half_up(price * (Decimal(1) - self.config.promo_rate))

        return round_half_up(price)

    # --- live breakdown ---

    def compose_breakdown(
        self,
        session_price: Optional[Number],
        city_extra: Optional[int] = 0,
        option: Optional[EducationalOption] = None,
        min_session_price: Optional[Number] = None,
    ) -> PriceBreakdown:
        """Running total for the UI. Promo is a finalization step and is NOT applied here."""
        extra_transport = city_extra or 0
        extra_option = self.option_price(option)

        has_selection = session_price is not None or extra_transport > 0 or option is not None

        base = to_cents(session_price)
        total = None
        if base is not None:
            total = base + extra_transport + extra_option

        return PriceBreakdown(
            base_session=base,
            extra_transport=extra_transport,
            extra_option=extra_option,
            total=total,
            min_price=to_cents(min_session_price),
            has_selection=has_selection,
        )


DEFAULT_PRICING = GedPricing()


def calculate_ged_price(
    base_price: Number,
    duration_days: int,
    departure_city: Optional[str] = "",
    apply_promo: bool = True,
) -> int:
    """
    Shortcut on the default tariff.

    >>> calculate_ged_price(615, 7, "paris")  # 615 + 180 + 12, then -5%
    767
    """
    return DEFAULT_PRICING.compute_price(base_price, duration_days, departure_city, apply_promo)


def is_ged_city(city: Optional[str]) -> bool:
    return DEFAULT_PRICING.is_surcharge_city(city)


def calculate_duration(start: Any, end: Any) -> int:
    days = days_between(start, end)
    if days is None:
        raise ValueError(f"cannot compute duration between {start!r} and {end!r}")
    return days


# --- formatting ---

def format_price(amount: Number) -> str:
    """fr-FR style: 1 095 € (narrow no-break space as thousands separator)."""
    n = round_half_up(amount)
    return f"{n:,}".replace(",", "\u202f") + " €"


def _fmt_amount(x: Number) -> str:
    # 718 -> "718", 718.5 -> "718.50"
    d = _to_decimal(x)
    if d == d.to_integral_value():
        return str(int(d))
    return str(d.quantize(CENT, rounding=ROUND_HALF_UP))


def format_breakdown(breakdown: PriceBreakdown) -> PriceBreakdownText:
    min_price_text = (
        f"À partir de {_fmt_amount(breakdown.min_price)} €"
        if breakdown.min_price is not None
        else "Tarif sur demande"
    )

    estimation_text = None
    if breakdown.total is not None and breakdown.has_selection:
        estimation_text = f"{_fmt_amount(breakdown.total)} €"

    lines: list[str] = []
    if breakdown.base_session is not None:
        lines.append(f"Session : {_fmt_amount(breakdown.base_session)} €")
    if breakdown.extra_transport > 0:
        lines.append(f"Transport : +{breakdown.extra_transport} €")
    if breakdown.extra_option > 0:
        lines.append(f"Option : +{breakdown.extra_option} €")

    return PriceBreakdownText(
        min_price_text=min_price_text,
        estimation_text=estimation_text,
        detail_lines=lines,
    )


def price_label(stay: Stay, mode: AudienceMode) -> Optional[str]:
    """What the stay header shows as price. Kids never see one."""
    if mode == AudienceMode.KIDS:
        return None
    if stay.price_from is None:
        return PRICE_ON_REQUEST_PRO
    return f"{_fmt_amount(stay.price_from)} €"
