"""
Invoice workflow.

Raising an invoice is one unit of work:
1. Price the lines (subtotal, VAT, total)
2. Check the journal entry would post
3. Create the invoice record
4. Post Dr Accounts Receivable / Cr Sales Revenue / Cr VAT Output
5. Add the total to the customer's running balance

Nothing is committed here; the caller commits or rolls back
the whole call.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from general_ledger.config import get_settings
from general_ledger.exceptions import (
    EmptyEntryError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from general_ledger.models.enums import InvoiceStatus, SourceModule
from general_ledger.models.invoice import Invoice, InvoiceLine
from general_ledger.models.journal_entry import JournalEntry
from general_ledger.schemas.invoice import InvoiceCreate, InvoiceLineCreate
from general_ledger.schemas.ledger import JournalEntryCreate, JournalLineCreate
from general_ledger.services.ledger_service import LedgerService
from general_ledger.services.party_service import PartyService
from general_ledger.services.sequence_service import INVOICE
from general_ledger.utils.money import ZERO, percent_of, quantize_money

logger = logging.getLogger(__name__)


@dataclass
class PricedLine:
    description: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal
    line_total: Decimal
    tax_amount: Decimal


def price_lines(lines: list[InvoiceLineCreate]) -> tuple[list[PricedLine], Decimal, Decimal]:
    """
    Price invoice or estimate lines.

    Each line's amount and tax are rounded to the minor unit
    before summing, so the totals match what is printed per line.
    Returns (lines, subtotal, tax_amount).
    """
    priced = []
    for line in lines:
        line_total = quantize_money(line.quantity * line.unit_price)
        priced.append(PricedLine(
            description=line.description,
            quantity=line.quantity,
            unit_price=line.unit_price,
            tax_rate=line.tax_rate,
            line_total=line_total,
            tax_amount=percent_of(line_total, line.tax_rate),
        ))
    subtotal = quantize_money(sum((p.line_total for p in priced), ZERO))
    tax_amount = quantize_money(sum((p.tax_amount for p in priced), ZERO))
    return priced, subtotal, tax_amount


@dataclass
class InvoiceResult:
    invoice: Invoice
    journal_entry: JournalEntry
    customer_balance: Decimal
    account_balances: dict[str, Decimal]


class InvoiceService:

    def __init__(self, db: Session):
        self.db = db
        self.ledger = LedgerService(db)
        self.parties = PartyService(db)

    def create_invoice(self, request: InvoiceCreate) -> InvoiceResult:
        """
        Raise an invoice and recognise it in the ledger.

        Accounting:
            DEBIT  Accounts Receivable  (total)
            CREDIT Sales Revenue        (subtotal)
            CREDIT VAT Output           (tax)
        """
        customer = self.parties.get_customer(request.customer_id)
        if not customer.is_active:
            raise ValidationError(f"Customer {customer.id} is not active")

        priced, subtotal, tax_amount = price_lines(request.lines)
        total = subtotal + tax_amount
        if total <= 0:
            raise EmptyEntryError("Invoice total must be greater than zero")

        receivable = self.ledger.chart.get_by_role("ACCOUNTS_RECEIVABLE")
        revenue = self.ledger.chart.get_by_role("SALES_REVENUE")

        lines = [
            JournalLineCreate(
                account_id=receivable.id,
                debit=total,
                description="Accounts receivable",
            ),
        ]
        if subtotal > 0:
            lines.append(JournalLineCreate(
                account_id=revenue.id,
                credit=subtotal,
                description="Sales revenue",
            ))
        if tax_amount > 0:
            vat_output = self.ledger.chart.get_by_role("VAT_OUTPUT")
            lines.append(JournalLineCreate(
                account_id=vat_output.id,
                credit=tax_amount,
                description="VAT output",
            ))

        entry_request = JournalEntryCreate(
            entry_date=request.issue_date,
            reference="pending",
            description=f"Invoice to {customer.name}"[:255],
            lines=lines,
            source_module=SourceModule.INVOICES,
        )
        self.ledger.validate_entry(entry_request)

        # --- Create the invoice record ---
        due_date = request.due_date or (
            request.issue_date
            + timedelta(days=get_settings().DEFAULT_PAYMENT_TERMS_DAYS)
        )
        invoice = Invoice(
            invoice_number=self.ledger.sequences.next_number(INVOICE),
            customer_id=customer.id,
            issue_date=request.issue_date,
            due_date=due_date,
            status=InvoiceStatus.DRAFT,
            subtotal=subtotal,
            tax_amount=tax_amount,
            total=total,
            paid_amount=ZERO,
            balance=total,
            notes=request.notes,
            estimate_id=request.estimate_id,
        )
        for number, line in enumerate(priced, start=1):
            invoice.lines.append(InvoiceLine(
                line_number=number,
                description=line.description,
                quantity=line.quantity,
                unit_price=line.unit_price,
                tax_rate=line.tax_rate,
                line_total=line.line_total,
                tax_amount=line.tax_amount,
            ))
        self.db.add(invoice)
        self.db.flush()

        # --- Post the journal entry ---
        entry = self.ledger.post_direct(entry_request.model_copy(update={
            "reference": invoice.invoice_number,
            "description": f"Invoice {invoice.invoice_number} - {customer.name}"[:255],
            "source_id": invoice.id,
        }))
        invoice.journal_entry_id = entry.id

        # --- Update the customer's running balance ---
        customer = self.parties.lock_customer(customer.id)
        customer.balance = quantize_money(customer.balance + total)
        customer.last_transaction_date = datetime.utcnow()
        self.db.flush()

        logger.info(
            "invoice_created number=%s customer_id=%s total=%s entry_id=%s",
            invoice.invoice_number, customer.id, total, entry.id,
        )
        return InvoiceResult(
            invoice=invoice,
            journal_entry=entry,
            customer_balance=quantize_money(customer.balance),
            account_balances=self.ledger.account_balances(entry),
        )

    def send_invoice(self, invoice_id: int) -> Invoice:
        """Move a draft invoice to SENT. Any other status is rejected."""
        invoice = self.lock_invoice(invoice_id)
        if invoice.status != InvoiceStatus.DRAFT:
            raise InvalidStateError(
                f"Invoice {invoice.invoice_number} cannot be sent "
                f"(status: {invoice.status.value})"
            )
        invoice.status = InvoiceStatus.SENT
        invoice.sent_at = datetime.utcnow()
        self.db.flush()
        logger.info("invoice_sent number=%s", invoice.invoice_number)
        return invoice

    def get_invoice(self, invoice_id: int) -> Invoice:
        invoice = self.db.get(Invoice, invoice_id)
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    def lock_invoice(self, invoice_id: int) -> Invoice:
        self.db.flush()
        invoice = self.db.execute(
            select(Invoice)
            .where(Invoice.id == invoice_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    def list_invoices(
        self,
        customer_id: int | None = None,
        status: InvoiceStatus | None = None,
    ) -> list[Invoice]:
        query = select(Invoice).order_by(Invoice.issue_date, Invoice.id)
        if customer_id is not None:
            query = query.where(Invoice.customer_id == customer_id)
        if status is not None:
            query = query.where(Invoice.status == status)
        return list(self.db.execute(query).scalars().all())
