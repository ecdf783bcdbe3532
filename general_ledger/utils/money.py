"""
Money helpers.

Amounts are carried as Decimal and rounded half-up to the
functional currency's minor unit. Balance checks compare
integer minor units so no floating-point drift can sneak in.
"""

from decimal import Decimal, ROUND_HALF_UP

from general_ledger.config import get_settings

ZERO = Decimal("0")


def _exponent() -> Decimal:
    places = get_settings().MONEY_DECIMAL_PLACES
    return Decimal(1).scaleb(-places)


def quantize_money(value: Decimal | float | int | str | None) -> Decimal:
    if value is None:
        return ZERO.quantize(_exponent())
    return Decimal(str(value)).quantize(_exponent(), rounding=ROUND_HALF_UP)


def to_minor_units(value: Decimal | float | int | str) -> int:
    """Convert an amount to an integer count of minor units."""
    places = get_settings().MONEY_DECIMAL_PLACES
    return int(quantize_money(value).scaleb(places))


def percent_of(amount: Decimal, rate: Decimal | float | int | str) -> Decimal:
    """Return ``rate`` percent of ``amount``, rounded to the minor unit."""
    return quantize_money(Decimal(str(amount)) * Decimal(str(rate)) / Decimal(100))
