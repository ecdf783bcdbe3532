"""
Pydantic schemas for invoices, payments and estimates.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from general_ledger.models.enums import (
    InvoiceStatus,
    EstimateStatus,
    PaymentMethod,
)
from general_ledger.schemas.ledger import JournalEntryResponse


# --- Request Schemas ---

class InvoiceLineCreate(BaseModel):
    description: str = Field(min_length=1, max_length=255)
    quantity: Decimal = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100)


class InvoiceCreate(BaseModel):
    """
    Request to raise an invoice.

    due_date defaults to issue_date plus the configured
    payment terms.
    """
    customer_id: int
    issue_date: date
    due_date: date | None = None
    lines: list[InvoiceLineCreate] = Field(min_length=1)
    notes: str | None = None
    estimate_id: int | None = None

    @model_validator(mode="after")
    def due_date_not_before_issue(self):
        if self.due_date and self.due_date < self.issue_date:
            raise ValueError("due_date cannot be before issue_date")
        return self


class PaymentAllocationCreate(BaseModel):
    invoice_id: int
    allocated_amount: Decimal = Field(gt=0)


class PaymentCreate(BaseModel):
    """A customer receipt split across one or more invoices."""
    customer_id: int
    payment_date: date
    amount: Decimal = Field(gt=0)
    method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    reference_number: str | None = Field(default=None, max_length=100)
    allocations: list[PaymentAllocationCreate] = Field(min_length=1)


class EstimateCreate(BaseModel):
    customer_id: int
    issue_date: date
    valid_until: date | None = None
    lines: list[InvoiceLineCreate] = Field(min_length=1)


class ConvertEstimateRequest(BaseModel):
    issue_date: date | None = None
    due_date: date | None = None


# --- Response Schemas ---

class InvoiceLineResponse(BaseModel):
    line_number: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal
    line_total: Decimal
    tax_amount: Decimal

    model_config = {"from_attributes": True}


class InvoiceResponse(BaseModel):
    id: int
    invoice_number: str
    customer_id: int
    issue_date: date
    due_date: date
    status: InvoiceStatus
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal
    paid_amount: Decimal
    balance: Decimal
    notes: str | None
    journal_entry_id: int | None
    estimate_id: int | None
    sent_at: datetime | None
    paid_at: date | None
    lines: list[InvoiceLineResponse]

    model_config = {"from_attributes": True}


class InvoiceWorkflowResponse(BaseModel):
    """Everything an invoice workflow call produced."""
    invoice: InvoiceResponse
    journal_entry: JournalEntryResponse
    customer_balance: Decimal
    account_balances: dict[str, Decimal]


class PaymentAllocationResponse(BaseModel):
    invoice_id: int
    allocated_amount: Decimal

    model_config = {"from_attributes": True}


class PaymentResponse(BaseModel):
    id: int
    payment_number: str
    customer_id: int
    payment_date: date
    amount: Decimal
    method: PaymentMethod
    reference_number: str | None
    journal_entry_id: int | None
    allocations: list[PaymentAllocationResponse]

    model_config = {"from_attributes": True}


class PaymentWorkflowResponse(BaseModel):
    payment: PaymentResponse
    invoices: list[InvoiceResponse]
    journal_entry: JournalEntryResponse
    customer_balance: Decimal
    account_balances: dict[str, Decimal]


class EstimateLineResponse(BaseModel):
    line_number: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal

    model_config = {"from_attributes": True}


class EstimateResponse(BaseModel):
    id: int
    estimate_number: str
    customer_id: int
    issue_date: date
    valid_until: date
    status: EstimateStatus
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal
    converted_to_invoice: bool
    invoice_id: int | None
    lines: list[EstimateLineResponse]

    model_config = {"from_attributes": True}


class EstimateConversionResponse(BaseModel):
    estimate: EstimateResponse
    invoice: InvoiceWorkflowResponse
