"""
Estimate (quotation) lifecycle and conversion to invoices.

    DRAFT -> SENT -> ACCEPTED -> (converted to an invoice)
                  -> DECLINED

Estimates never touch the ledger themselves; an accepted one
becomes an invoice through the invoice workflow.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from general_ledger.config import get_settings
from general_ledger.exceptions import InvalidStateError, NotFoundError
from general_ledger.models.enums import EstimateStatus
from general_ledger.models.invoice import Estimate, EstimateLine
from general_ledger.schemas.invoice import EstimateCreate, InvoiceCreate, InvoiceLineCreate
from general_ledger.services.invoice_service import InvoiceResult, InvoiceService, price_lines
from general_ledger.services.party_service import PartyService
from general_ledger.services.sequence_service import ESTIMATE, SequenceService

logger = logging.getLogger(__name__)


# Allowed transitions: current status -> statuses it can move to
VALID_TRANSITIONS = {
    EstimateStatus.DRAFT: {EstimateStatus.SENT},
    EstimateStatus.SENT: {EstimateStatus.ACCEPTED, EstimateStatus.DECLINED},
    EstimateStatus.ACCEPTED: set(),
    EstimateStatus.DECLINED: set(),
}


@dataclass
class EstimateConversion:
    estimate: Estimate
    invoice: InvoiceResult


class EstimateService:

    def __init__(self, db: Session):
        self.db = db
        self.parties = PartyService(db)
        self.sequences = SequenceService(db)

    def create_estimate(self, request: EstimateCreate) -> Estimate:
        customer = self.parties.get_customer(request.customer_id)
        priced, subtotal, tax_amount = price_lines(request.lines)

        valid_until = request.valid_until or (
            request.issue_date
            + timedelta(days=get_settings().DEFAULT_PAYMENT_TERMS_DAYS)
        )
        estimate = Estimate(
            estimate_number=self.sequences.next_number(ESTIMATE),
            customer_id=customer.id,
            issue_date=request.issue_date,
            valid_until=valid_until,
            status=EstimateStatus.DRAFT,
            subtotal=subtotal,
            tax_amount=tax_amount,
            total=subtotal + tax_amount,
            converted_to_invoice=False,
        )
        for number, line in enumerate(priced, start=1):
            estimate.lines.append(EstimateLine(
                line_number=number,
                description=line.description,
                quantity=line.quantity,
                unit_price=line.unit_price,
                tax_rate=line.tax_rate,
            ))
        self.db.add(estimate)
        self.db.flush()

        logger.info(
            "estimate_created number=%s customer_id=%s total=%s",
            estimate.estimate_number, customer.id, estimate.total,
        )
        return estimate

    def get_estimate(self, estimate_id: int) -> Estimate:
        estimate = self.db.get(Estimate, estimate_id)
        if not estimate:
            raise NotFoundError("Estimate", estimate_id)
        return estimate

    def list_estimates(
        self,
        customer_id: int | None = None,
        status: EstimateStatus | None = None,
    ) -> list[Estimate]:
        query = select(Estimate).order_by(Estimate.issue_date, Estimate.id)
        if customer_id is not None:
            query = query.where(Estimate.customer_id == customer_id)
        if status is not None:
            query = query.where(Estimate.status == status)
        return list(self.db.execute(query).scalars().all())

    def _lock_estimate(self, estimate_id: int) -> Estimate:
        self.db.flush()
        estimate = self.db.execute(
            select(Estimate)
            .where(Estimate.id == estimate_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if not estimate:
            raise NotFoundError("Estimate", estimate_id)
        return estimate

    def _transition(self, estimate_id: int, new_status: EstimateStatus) -> Estimate:
        estimate = self._lock_estimate(estimate_id)
        if new_status not in VALID_TRANSITIONS[estimate.status]:
            raise InvalidStateError(
                f"Cannot change estimate {estimate.estimate_number} from "
                f"{estimate.status.value} to {new_status.value}"
            )
        estimate.status = new_status
        self.db.flush()
        logger.info(
            "estimate_status number=%s status=%s",
            estimate.estimate_number, new_status.value,
        )
        return estimate

    def send_estimate(self, estimate_id: int) -> Estimate:
        return self._transition(estimate_id, EstimateStatus.SENT)

    def accept_estimate(self, estimate_id: int) -> Estimate:
        return self._transition(estimate_id, EstimateStatus.ACCEPTED)

    def decline_estimate(self, estimate_id: int) -> Estimate:
        return self._transition(estimate_id, EstimateStatus.DECLINED)

    def convert_to_invoice(
        self,
        estimate_id: int,
        issue_date: date | None = None,
        due_date: date | None = None,
    ) -> EstimateConversion:
        """
        Turn an accepted estimate into an invoice.

        Raises InvalidStateError unless the estimate is ACCEPTED
        and has not been converted before.
        """
        estimate = self._lock_estimate(estimate_id)

        if estimate.status != EstimateStatus.ACCEPTED:
            raise InvalidStateError(
                f"Only accepted estimates can be converted "
                f"(estimate {estimate.estimate_number} is {estimate.status.value})"
            )
        if estimate.converted_to_invoice:
            raise InvalidStateError(
                f"Estimate {estimate.estimate_number} was already converted "
                f"to invoice {estimate.invoice_id}"
            )

        result = InvoiceService(self.db).create_invoice(InvoiceCreate(
            customer_id=estimate.customer_id,
            issue_date=issue_date or date.today(),
            due_date=due_date,
            lines=[
                InvoiceLineCreate(
                    description=line.description,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    tax_rate=line.tax_rate,
                )
                for line in estimate.lines
            ],
            notes=f"Converted from estimate {estimate.estimate_number}",
            estimate_id=estimate.id,
        ))

        estimate.converted_to_invoice = True
        estimate.invoice_id = result.invoice.id
        self.db.flush()

        logger.info(
            "estimate_converted number=%s invoice=%s",
            estimate.estimate_number, result.invoice.invoice_number,
        )
        return EstimateConversion(estimate=estimate, invoice=result)
