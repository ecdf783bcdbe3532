"""
Payment workflow.

A customer receipt is allocated across that customer's open
invoices. Allocations must add up to the amount received and
may not exceed what each invoice still owes, which keeps the
customer's running balance equal to the sum of their open
invoice balances.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from general_ledger.exceptions import (
    AllocationMismatchError,
    NotFoundError,
    ValidationError,
)
from general_ledger.models.enums import InvoiceStatus, PaymentMethod, SourceModule
from general_ledger.models.invoice import Invoice, Payment, PaymentAllocation
from general_ledger.models.journal_entry import JournalEntry
from general_ledger.schemas.invoice import PaymentCreate
from general_ledger.schemas.ledger import JournalEntryCreate, JournalLineCreate
from general_ledger.services.ledger_service import LedgerService
from general_ledger.services.party_service import PartyService
from general_ledger.services.sequence_service import PAYMENT
from general_ledger.utils.money import quantize_money, to_minor_units

logger = logging.getLogger(__name__)


@dataclass
class PaymentResult:
    payment: Payment
    invoices: list[Invoice]
    journal_entry: JournalEntry
    customer_balance: Decimal
    account_balances: dict[str, Decimal]


class PaymentService:

    def __init__(self, db: Session):
        self.db = db
        self.ledger = LedgerService(db)
        self.parties = PartyService(db)

    def _lock_invoices(self, invoice_ids: list[int]) -> dict[int, Invoice]:
        self.db.flush()
        invoices = self.db.execute(
            select(Invoice)
            .where(Invoice.id.in_(sorted(invoice_ids)))
            .order_by(Invoice.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars().all()
        found = {invoice.id: invoice for invoice in invoices}
        for invoice_id in invoice_ids:
            if invoice_id not in found:
                raise NotFoundError("Invoice", invoice_id)
        return found

    def record_payment(self, request: PaymentCreate) -> PaymentResult:
        """
        Record a customer payment and settle the allocated invoices.

        Accounting:
            DEBIT  Cash (method CASH) or Bank (other methods)
            CREDIT Accounts Receivable
        """
        customer = self.parties.get_customer(request.customer_id)
        amount = quantize_money(request.amount)

        # --- Validate allocations ---
        if to_minor_units(amount) <= 0:
            raise ValidationError(
                f"Payment amount {request.amount} rounds to zero"
            )
        for allocation in request.allocations:
            if to_minor_units(allocation.allocated_amount) <= 0:
                raise ValidationError(
                    f"Allocation {allocation.allocated_amount} to invoice "
                    f"{allocation.invoice_id} rounds to zero"
                )

        allocated = sum(
            to_minor_units(a.allocated_amount) for a in request.allocations
        )
        if allocated != to_minor_units(amount):
            logger.warning(
                "payment_rejected reason=allocation_mismatch amount=%s",
                amount,
            )
            raise AllocationMismatchError(
                f"Allocations total {quantize_money(sum(a.allocated_amount for a in request.allocations))} "
                f"does not match payment amount {amount}"
            )

        invoice_ids = [a.invoice_id for a in request.allocations]
        if len(set(invoice_ids)) != len(invoice_ids):
            raise ValidationError("An invoice may only be allocated once per payment")

        invoices = self._lock_invoices(invoice_ids)
        for allocation in request.allocations:
            invoice = invoices[allocation.invoice_id]
            if invoice.customer_id != customer.id:
                raise ValidationError(
                    f"Invoice {invoice.invoice_number} does not belong "
                    f"to customer {customer.id}"
                )
            if to_minor_units(allocation.allocated_amount) > to_minor_units(invoice.balance):
                raise ValidationError(
                    f"Allocation {quantize_money(allocation.allocated_amount)} exceeds "
                    f"outstanding balance {quantize_money(invoice.balance)} "
                    f"of invoice {invoice.invoice_number}"
                )

        role = "CASH" if request.method == PaymentMethod.CASH else "BANK"
        cash = self.ledger.chart.get_by_role(role)
        receivable = self.ledger.chart.get_by_role("ACCOUNTS_RECEIVABLE")

        entry_request = JournalEntryCreate(
            entry_date=request.payment_date,
            reference="pending",
            description=f"Payment from {customer.name}"[:255],
            lines=[
                JournalLineCreate(
                    account_id=cash.id,
                    debit=amount,
                    description=f"Receipt ({request.method.value})",
                ),
                JournalLineCreate(
                    account_id=receivable.id,
                    credit=amount,
                    description="Accounts receivable",
                ),
            ],
            source_module=SourceModule.PAYMENTS,
        )
        self.ledger.validate_entry(entry_request)

        # --- Create the payment record ---
        payment = Payment(
            payment_number=self.ledger.sequences.next_number(PAYMENT),
            customer_id=customer.id,
            payment_date=request.payment_date,
            amount=amount,
            method=request.method,
            reference_number=request.reference_number,
        )
        for allocation in request.allocations:
            payment.allocations.append(PaymentAllocation(
                invoice_id=allocation.invoice_id,
                allocated_amount=quantize_money(allocation.allocated_amount),
            ))
        self.db.add(payment)
        self.db.flush()

        entry = self.ledger.post_direct(entry_request.model_copy(update={
            "reference": payment.payment_number,
            "description": f"Payment {payment.payment_number} - {customer.name}"[:255],
            "source_id": payment.id,
        }))
        payment.journal_entry_id = entry.id

        # --- Settle invoices ---
        settled = []
        for allocation in request.allocations:
            invoice = invoices[allocation.invoice_id]
            invoice.paid_amount = quantize_money(
                invoice.paid_amount + allocation.allocated_amount
            )
            invoice.balance = quantize_money(invoice.total - invoice.paid_amount)
            if invoice.balance <= 0:
                invoice.status = InvoiceStatus.PAID
                invoice.paid_at = request.payment_date
            else:
                invoice.status = InvoiceStatus.PARTIALLY_PAID
            settled.append(invoice)

        customer = self.parties.lock_customer(customer.id)
        customer.balance = quantize_money(customer.balance - amount)
        customer.last_transaction_date = datetime.utcnow()
        self.db.flush()

        logger.info(
            "payment_recorded number=%s customer_id=%s amount=%s entry_id=%s",
            payment.payment_number, customer.id, amount, entry.id,
        )
        return PaymentResult(
            payment=payment,
            invoices=settled,
            journal_entry=entry,
            customer_balance=quantize_money(customer.balance),
            account_balances=self.ledger.account_balances(entry),
        )

    def get_payment(self, payment_id: int) -> Payment:
        payment = self.db.get(Payment, payment_id)
        if not payment:
            raise NotFoundError("Payment", payment_id)
        return payment

    def list_payments(self, customer_id: int | None = None) -> list[Payment]:
        query = select(Payment).order_by(Payment.payment_date, Payment.id)
        if customer_id is not None:
            query = query.where(Payment.customer_id == customer_id)
        return list(self.db.execute(query).scalars().all())
