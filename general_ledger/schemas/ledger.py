"""
Pydantic schemas for chart-of-accounts and journal operations.

These define the API contract: what data comes in,
what data goes out. They are separate from the database
models because the API shape and the storage shape
are often different.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from general_ledger.models.enums import AccountType, EntryStatus, SourceModule


# --- Chart of Accounts ---

class LedgerAccountCreate(BaseModel):
    """Request to create a chart-of-accounts entry."""
    code: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=100)
    account_type: AccountType
    subtype: str = Field(min_length=1, max_length=50)


class LedgerAccountResponse(BaseModel):
    id: int
    code: str
    name: str
    account_type: AccountType
    subtype: str
    balance: Decimal
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class AccountBalanceResponse(BaseModel):
    account_id: int
    account_code: str
    account_type: AccountType
    balance: Decimal
    currency: str


class AccountActivityResponse(BaseModel):
    """One posted line against an account, with the running balance."""
    entry_id: int
    entry_number: str
    entry_date: date
    reference: str
    description: str
    debit: Decimal
    credit: Decimal
    running_balance: Decimal

    model_config = {"from_attributes": True}


class RecomputeResponse(BaseModel):
    account_id: int
    account_code: str
    previous_balance: Decimal
    balance: Decimal


class SeedChartResponse(BaseModel):
    created: list[str]
    skipped: list[str]


# --- Journal Entries ---

class JournalLineCreate(BaseModel):
    """
    One debit or credit in a journal entry.

    The account can be named by id or by code. Amounts are
    non-negative; a line must carry a debit or a credit.
    """
    account_id: int | None = None
    account_code: str | None = None
    debit: Decimal = Field(default=Decimal("0"), ge=0)
    credit: Decimal = Field(default=Decimal("0"), ge=0)
    description: str = Field(default="", max_length=255)

    @model_validator(mode="after")
    def check_account_and_amount(self):
        if self.account_id is None and not self.account_code:
            raise ValueError("either account_id or account_code is required")
        if self.debit == 0 and self.credit == 0:
            raise ValueError("line must have a debit or a credit amount")
        return self


class JournalEntryCreate(BaseModel):
    """
    A journal entry whose lines must balance before posting.

    Drafts may be saved unbalanced; the posting engine is
    what refuses them.
    """
    entry_date: date = Field(default_factory=date.today)
    reference: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=255)
    lines: list[JournalLineCreate] = Field(default_factory=list)
    created_by: str = Field(default="system", max_length=100)
    source_module: SourceModule = SourceModule.MANUAL
    source_id: int | None = None


class ReverseEntryRequest(BaseModel):
    reversal_date: date | None = None
    created_by: str = Field(default="system", max_length=100)


class OpeningBalancesRequest(BaseModel):
    """
    Opening balances keyed by account code.

    Amounts are in each account's normal direction; a negative
    amount means a contra balance.
    """
    entry_date: date
    balances: dict[str, Decimal] = Field(min_length=1)
    created_by: str = Field(default="system", max_length=100)

    @field_validator("balances")
    @classmethod
    def must_not_be_all_zero(cls, v: dict) -> dict:
        if all(amount == 0 for amount in v.values()):
            raise ValueError("at least one opening balance must be non-zero")
        return v


class JournalLineResponse(BaseModel):
    id: int
    line_number: int
    account_id: int
    account_code: str
    account_name: str
    debit: Decimal
    credit: Decimal
    description: str

    model_config = {"from_attributes": True}


class JournalEntryResponse(BaseModel):
    id: int
    entry_number: str
    entry_date: date
    reference: str
    description: str
    status: EntryStatus
    created_by: str
    source_module: SourceModule
    source_id: int | None
    reversal_of_id: int | None
    created_at: datetime
    posted_at: datetime | None
    total_debit: Decimal
    total_credit: Decimal
    lines: list[JournalLineResponse]

    model_config = {"from_attributes": True}
