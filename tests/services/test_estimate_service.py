"""
Tests for the estimate lifecycle and conversion to invoices.
"""

from datetime import date
from decimal import Decimal

import pytest

from general_ledger.exceptions import InvalidStateError, NotFoundError
from general_ledger.models.enums import EstimateStatus, InvoiceStatus
from general_ledger.models.journal_entry import JournalEntry
from general_ledger.schemas.invoice import EstimateCreate, InvoiceLineCreate
from general_ledger.schemas.party import CustomerCreate
from general_ledger.services.estimate_service import EstimateService
from general_ledger.services.party_service import PartyService


def make_estimate(db, customer_id=None):
    if customer_id is None:
        customer_id = PartyService(db).create_customer(
            CustomerCreate(name="Savannah Traders")
        ).id
    return EstimateService(db).create_estimate(EstimateCreate(
        customer_id=customer_id,
        issue_date=date(2024, 5, 2),
        lines=[
            InvoiceLineCreate(description="Website build", quantity=Decimal("1"),
                              unit_price=Decimal("80000"), tax_rate=Decimal("16")),
            InvoiceLineCreate(description="Hosting", quantity=Decimal("12"),
                              unit_price=Decimal("1500"), tax_rate=Decimal("16")),
        ],
    ))


def accepted_estimate(db):
    service = EstimateService(db)
    estimate = make_estimate(db)
    service.send_estimate(estimate.id)
    service.accept_estimate(estimate.id)
    return estimate


class TestCreateEstimate:

    def test_estimate_is_priced_like_an_invoice(self, seeded_chart):
        estimate = make_estimate(seeded_chart)
        seeded_chart.commit()

        assert estimate.estimate_number == "EST-0001"
        assert estimate.status == EstimateStatus.DRAFT
        assert estimate.subtotal == Decimal("98000.00")
        assert estimate.tax_amount == Decimal("15680.00")
        assert estimate.total == Decimal("113680.00")
        assert estimate.valid_until == date(2024, 6, 1)

    def test_estimate_does_not_touch_the_ledger(self, seeded_chart):
        make_estimate(seeded_chart)
        seeded_chart.commit()
        assert seeded_chart.query(JournalEntry).count() == 0

    def test_unknown_customer_raises(self, seeded_chart):
        with pytest.raises(NotFoundError):
            make_estimate(seeded_chart, customer_id=404)


class TestTransitions:

    def test_draft_to_sent_to_accepted(self, seeded_chart):
        estimate = accepted_estimate(seeded_chart)
        assert estimate.status == EstimateStatus.ACCEPTED

    def test_sent_estimate_can_be_declined(self, seeded_chart):
        service = EstimateService(seeded_chart)
        estimate = make_estimate(seeded_chart)
        service.send_estimate(estimate.id)
        service.decline_estimate(estimate.id)
        assert estimate.status == EstimateStatus.DECLINED

    def test_draft_cannot_be_accepted(self, seeded_chart):
        estimate = make_estimate(seeded_chart)
        with pytest.raises(InvalidStateError):
            EstimateService(seeded_chart).accept_estimate(estimate.id)

    def test_declined_estimate_is_final(self, seeded_chart):
        service = EstimateService(seeded_chart)
        estimate = make_estimate(seeded_chart)
        service.send_estimate(estimate.id)
        service.decline_estimate(estimate.id)
        with pytest.raises(InvalidStateError):
            service.accept_estimate(estimate.id)


class TestConvertToInvoice:

    def test_conversion_raises_an_invoice(self, seeded_chart):
        estimate = accepted_estimate(seeded_chart)
        conversion = EstimateService(seeded_chart).convert_to_invoice(
            estimate.id, issue_date=date(2024, 5, 10),
        )
        seeded_chart.commit()

        invoice = conversion.invoice.invoice
        assert invoice.total == estimate.total
        assert invoice.estimate_id == estimate.id
        assert invoice.status == InvoiceStatus.DRAFT
        assert len(invoice.lines) == 2
        assert estimate.converted_to_invoice is True
        assert estimate.invoice_id == invoice.id
        assert conversion.invoice.customer_balance == Decimal("113680.00")

    def test_issue_date_defaults_to_today(self, seeded_chart):
        estimate = accepted_estimate(seeded_chart)
        conversion = EstimateService(seeded_chart).convert_to_invoice(estimate.id)
        assert conversion.invoice.invoice.issue_date == date.today()

    def test_only_accepted_estimates_convert(self, seeded_chart):
        service = EstimateService(seeded_chart)
        estimate = make_estimate(seeded_chart)
        service.send_estimate(estimate.id)

        with pytest.raises(InvalidStateError):
            service.convert_to_invoice(estimate.id)

    def test_estimate_converts_only_once(self, seeded_chart):
        service = EstimateService(seeded_chart)
        estimate = accepted_estimate(seeded_chart)
        service.convert_to_invoice(estimate.id)
        seeded_chart.commit()

        with pytest.raises(InvalidStateError):
            service.convert_to_invoice(estimate.id)
