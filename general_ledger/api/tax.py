"""
Standalone tax calculation endpoints.

Pure calculations against the jurisdiction tables; nothing
is posted to the ledger.
"""

from decimal import Decimal

from fastapi import APIRouter

from general_ledger.api.errors import http_error
from general_ledger.exceptions import LedgerError
from general_ledger.schemas.tax import (
    PayeCalculationRequest,
    PayeCalculationResponse,
    WithholdingCalculationRequest,
    WithholdingCalculationResponse,
)
from general_ledger.tax.calculators import (
    calculate_health_contribution,
    calculate_paye,
    calculate_social_security,
    calculate_withholding_tax,
)
from general_ledger.tax.jurisdictions import JurisdictionTaxConfig, get_jurisdiction
from general_ledger.utils.money import quantize_money

router = APIRouter(prefix="/tax", tags=["Tax"])


@router.get("/jurisdictions/{code}", response_model=JurisdictionTaxConfig)
def get_jurisdiction_table(code: str):
    try:
        return get_jurisdiction(code)
    except LedgerError as e:
        raise http_error(e)


@router.post("/paye", response_model=PayeCalculationResponse)
def calculate_payroll_deductions(request: PayeCalculationRequest):
    """PAYE, social security and health contribution for one gross salary."""
    try:
        config = get_jurisdiction(request.jurisdiction)
    except LedgerError as e:
        raise http_error(e)

    gross = quantize_money(request.gross_amount)
    paye = calculate_paye(gross, config)
    social = calculate_social_security(gross, config)
    health = calculate_health_contribution(gross, config)
    deductions = paye + social + health

    return PayeCalculationResponse(
        jurisdiction=config.country_code,
        gross_amount=gross,
        paye=paye,
        social_security=social,
        health=health,
        total_deductions=deductions,
        net_pay=gross - deductions,
    )


@router.post("/withholding", response_model=WithholdingCalculationResponse)
def calculate_withholding(request: WithholdingCalculationRequest):
    try:
        config = get_jurisdiction(request.jurisdiction)
    except LedgerError as e:
        raise http_error(e)

    amount = quantize_money(request.amount)
    tax = calculate_withholding_tax(amount, request.category, config)

    return WithholdingCalculationResponse(
        jurisdiction=config.country_code,
        category=request.category,
        amount=amount,
        rate=config.withholding_rates.get(request.category, Decimal("0")),
        withholding_tax=tax,
        net_amount=amount - tax,
    )
