"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored.
"""

import enum


class AccountType(str, enum.Enum):
    """The five fundamental accounting categories."""
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"


class AccountSubtype(str, enum.Enum):
    """Reporting categories used by the financial statements."""
    CASH = "Cash and Bank"
    CURRENT_ASSET = "Current Asset"
    FIXED_ASSET = "Fixed Asset"
    CURRENT_LIABILITY = "Current Liability"
    LONG_TERM_LIABILITY = "Long-term Liability"
    CAPITAL = "Capital"
    RETAINED_EARNINGS = "Retained Earnings"
    OPERATING_REVENUE = "Operating Revenue"
    OTHER_REVENUE = "Other Revenue"
    COST_OF_SALES = "Cost of Sales"
    OPERATING_EXPENSE = "Operating Expense"
    FINANCIAL_EXPENSE = "Financial Expense"


class EntryStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    POSTED = "POSTED"
    REVERSED = "REVERSED"


# Statuses of entries whose lines count toward balances.
# A reversed entry stays in the ledger; its reversal cancels it.
POSTED_STATUSES = (EntryStatus.POSTED, EntryStatus.REVERSED)


class SourceModule(str, enum.Enum):
    """Which part of the system produced a journal entry."""
    MANUAL = "MANUAL"
    OPENING_BALANCE = "OPENING_BALANCE"
    REVERSAL = "REVERSAL"
    INVOICES = "INVOICES"
    PAYMENTS = "PAYMENTS"
    PAYROLL = "PAYROLL"
    PURCHASES = "PURCHASES"


class InvoiceStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"


class EstimateStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"


class PaymentMethod(str, enum.Enum):
    CASH = "CASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    MOBILE_MONEY = "MOBILE_MONEY"
    CHEQUE = "CHEQUE"
    CARD = "CARD"


class PayrollStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PROCESSING = "PROCESSING"
    PROCESSED = "PROCESSED"
