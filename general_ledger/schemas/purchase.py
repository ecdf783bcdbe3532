"""
Pydantic schemas for vendor purchases.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from general_ledger.schemas.ledger import JournalEntryResponse


class PurchaseLineCreate(BaseModel):
    """A purchased item, charged to an expense or asset account."""
    description: str = Field(min_length=1, max_length=255)
    account_code: str = Field(min_length=1, max_length=20)
    quantity: Decimal = Field(default=Decimal("1"), gt=0)
    unit_price: Decimal = Field(ge=0)


class PurchaseCreate(BaseModel):
    vendor_id: int
    purchase_date: date
    reference: str | None = Field(default=None, max_length=100)
    lines: list[PurchaseLineCreate] = Field(min_length=1)
    # Percent; the jurisdiction's standard rate when omitted
    vat_rate: Decimal | None = Field(default=None, ge=0, le=100)


class PurchaseLineResponse(BaseModel):
    line_number: int
    description: str
    account_id: int
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal

    model_config = {"from_attributes": True}


class PurchaseResponse(BaseModel):
    id: int
    purchase_number: str
    vendor_id: int
    purchase_date: date
    reference: str | None
    subtotal: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    total: Decimal
    journal_entry_id: int | None
    lines: list[PurchaseLineResponse]

    model_config = {"from_attributes": True}


class PurchaseWorkflowResponse(BaseModel):
    purchase: PurchaseResponse
    journal_entry: JournalEntryResponse
    vendor_balance: Decimal
    account_balances: dict[str, Decimal]
