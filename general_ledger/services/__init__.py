"""Business logic services."""

from general_ledger.services.chart_service import ChartOfAccountsService
from general_ledger.services.balance_service import BalanceAccumulator
from general_ledger.services.sequence_service import SequenceService
from general_ledger.services.ledger_service import LedgerService
from general_ledger.services.party_service import PartyService
from general_ledger.services.invoice_service import InvoiceService
from general_ledger.services.payment_service import PaymentService
from general_ledger.services.estimate_service import EstimateService
from general_ledger.services.payroll_service import PayrollService
from general_ledger.services.purchase_service import PurchaseService
from general_ledger.services.report_service import ReportService

__all__ = [
    "ChartOfAccountsService",
    "BalanceAccumulator",
    "SequenceService",
    "LedgerService",
    "PartyService",
    "InvoiceService",
    "PaymentService",
    "EstimateService",
    "PayrollService",
    "PurchaseService",
    "ReportService",
]
