"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from general_ledger.models.base import Base
from general_ledger.models.enums import (
    AccountType,
    AccountSubtype,
    EntryStatus,
    SourceModule,
    InvoiceStatus,
    EstimateStatus,
    PaymentMethod,
    PayrollStatus,
)
from general_ledger.models.audit_log import AuditLog
from general_ledger.models.sequence import SequenceCounter
from general_ledger.models.ledger_account import LedgerAccount
from general_ledger.models.journal_entry import JournalEntry, JournalLine
from general_ledger.models.party import Customer, Vendor, Employee
from general_ledger.models.invoice import (
    Invoice,
    InvoiceLine,
    Payment,
    PaymentAllocation,
    Estimate,
    EstimateLine,
)
from general_ledger.models.payroll import PayrollRun, Payslip
from general_ledger.models.purchase import Purchase, PurchaseLine

__all__ = [
    "Base",
    "AccountType",
    "AccountSubtype",
    "EntryStatus",
    "SourceModule",
    "InvoiceStatus",
    "EstimateStatus",
    "PaymentMethod",
    "PayrollStatus",
    "AuditLog",
    "SequenceCounter",
    "LedgerAccount",
    "JournalEntry",
    "JournalLine",
    "Customer",
    "Vendor",
    "Employee",
    "Invoice",
    "InvoiceLine",
    "Payment",
    "PaymentAllocation",
    "Estimate",
    "EstimateLine",
    "PayrollRun",
    "Payslip",
    "Purchase",
    "PurchaseLine",
]
