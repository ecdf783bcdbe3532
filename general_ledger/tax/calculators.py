"""
Tax calculators.

Pure functions of an amount and a table. Nothing here reads
the database or mutates state; the payroll workflow and the
/tax endpoints call them with the configured jurisdiction.
All results are rounded half-up to the currency's minor unit.
"""

from decimal import Decimal

from general_ledger.tax.jurisdictions import (
    ContributionBand,
    JurisdictionTaxConfig,
    TaxBracket,
)
from general_ledger.utils.money import ZERO, quantize_money

HUNDRED = Decimal(100)


def _dec(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def calculate_progressive_tax(
    gross_amount,
    brackets: list[TaxBracket],
    relief=ZERO,
) -> Decimal:
    """
    Progressive tax over ordered brackets, less relief.

    Each bracket whose lower bound the income exceeds taxes the
    slice ``min(gross, max + 1) - min`` at its rate. An open-ended
    bracket (max_amount=None) taxes everything above its floor.
    The result never goes below zero.
    """
    gross = _dec(gross_amount)
    tax = ZERO

    for bracket in brackets:
        if gross <= bracket.min_amount:
            continue
        if bracket.max_amount is None:
            upper = gross
        else:
            upper = min(gross, bracket.max_amount + 1)
        taxable = max(ZERO, upper - bracket.min_amount)
        tax += taxable * bracket.rate / HUNDRED

    return quantize_money(max(ZERO, tax - _dec(relief)))


def calculate_bracketed_flat_contribution(
    gross_amount,
    table: list[ContributionBand],
) -> Decimal:
    """
    Flat contribution for the band containing the amount.

    The last band whose floor the amount reaches wins, so amounts
    above every band pay the top contribution and amounts falling
    in a gap between bands pay the lower band's. Below the first
    band nothing is due.
    """
    gross = _dec(gross_amount)
    contribution = ZERO

    for band in table:
        if gross < band.min_salary:
            break
        contribution = band.contribution

    return quantize_money(contribution)


def calculate_capped_percentage(gross_amount, rate, cap=None) -> Decimal:
    """``rate`` percent of the amount, limited to ``cap`` when one is set."""
    amount = _dec(gross_amount) * _dec(rate) / HUNDRED
    if cap is not None:
        amount = min(amount, _dec(cap))
    return quantize_money(max(ZERO, amount))


def calculate_withholding(amount, category: str, rate_table: dict) -> Decimal:
    """
    Withholding tax for a payment category.

    Unknown categories withhold nothing; that is the documented
    fallback, not an error.
    """
    rate = rate_table.get(category)
    if rate is None:
        return quantize_money(ZERO)
    return quantize_money(_dec(amount) * _dec(rate) / HUNDRED)


# --- Jurisdiction-bound helpers ---

def calculate_paye(gross_amount, config: JurisdictionTaxConfig) -> Decimal:
    return calculate_progressive_tax(
        gross_amount, config.paye_brackets, config.personal_relief
    )


def calculate_social_security(gross_amount, config: JurisdictionTaxConfig) -> Decimal:
    rule = config.social_security
    if rule is None:
        return quantize_money(ZERO)
    return calculate_capped_percentage(gross_amount, rule.rate, rule.cap)


def calculate_health_contribution(gross_amount, config: JurisdictionTaxConfig) -> Decimal:
    rule = config.health_insurance
    if rule is None:
        return quantize_money(ZERO)
    return calculate_bracketed_flat_contribution(gross_amount, rule.bands)


def calculate_withholding_tax(amount, category: str, config: JurisdictionTaxConfig) -> Decimal:
    return calculate_withholding(amount, category, config.withholding_rates)
