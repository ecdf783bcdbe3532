"""
Pydantic schemas for the standalone tax calculations.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


class PayeCalculationRequest(BaseModel):
    gross_amount: Decimal = Field(ge=0)
    jurisdiction: str | None = Field(default=None, min_length=2, max_length=3)


class PayeCalculationResponse(BaseModel):
    jurisdiction: str
    gross_amount: Decimal
    paye: Decimal
    social_security: Decimal
    health: Decimal
    total_deductions: Decimal
    net_pay: Decimal


class WithholdingCalculationRequest(BaseModel):
    amount: Decimal = Field(ge=0)
    category: str = Field(min_length=1, max_length=50)
    jurisdiction: str | None = Field(default=None, min_length=2, max_length=3)


class WithholdingCalculationResponse(BaseModel):
    jurisdiction: str
    category: str
    amount: Decimal
    rate: Decimal
    withholding_tax: Decimal
    net_amount: Decimal
