"""
Pydantic schemas for payroll runs.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from general_ledger.models.enums import PayrollStatus
from general_ledger.schemas.ledger import JournalEntryResponse


class PayrollRunCreate(BaseModel):
    """
    Request to pay a set of employees for a period.

    With no employee_ids every active employee is paid.
    """
    pay_period_start: date
    pay_period_end: date
    pay_date: date
    employee_ids: list[int] | None = None
    jurisdiction: str | None = Field(default=None, min_length=2, max_length=3)

    @model_validator(mode="after")
    def period_must_be_ordered(self):
        if self.pay_period_start > self.pay_period_end:
            raise ValueError("pay_period_start must not be after pay_period_end")
        return self


class PayslipResponse(BaseModel):
    employee_id: int
    gross_pay: Decimal
    paye: Decimal
    social_security: Decimal
    health: Decimal
    net_pay: Decimal

    model_config = {"from_attributes": True}


class PayrollRunResponse(BaseModel):
    id: int
    run_number: str
    pay_period_start: date
    pay_period_end: date
    pay_date: date
    jurisdiction: str
    status: PayrollStatus
    employee_count: int
    total_gross: Decimal
    total_paye: Decimal
    total_social_security: Decimal
    total_health: Decimal
    total_deductions: Decimal
    total_net: Decimal
    journal_entry_id: int | None
    processed_at: datetime | None
    payslips: list[PayslipResponse]

    model_config = {"from_attributes": True}


class PayrollWorkflowResponse(BaseModel):
    payroll_run: PayrollRunResponse
    journal_entry: JournalEntryResponse
    account_balances: dict[str, Decimal]
