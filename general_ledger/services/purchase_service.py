"""
Purchase workflow (vendor bills).

Accounting:
    DEBIT  each line's expense or asset account
    DEBIT  VAT Input            (recoverable VAT)
    CREDIT Accounts Payable     (total)

The vendor's running balance is the amount owed to them,
positive like the payables account it mirrors, so a purchase
adds its total. A convention where the vendor balance is
negative while money is owed would subtract instead; that
would put the vendor ledger and Accounts Payable on opposite
signs.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from general_ledger.exceptions import EmptyEntryError, NotFoundError, ValidationError
from general_ledger.models.enums import AccountType, SourceModule
from general_ledger.models.journal_entry import JournalEntry
from general_ledger.models.purchase import Purchase, PurchaseLine
from general_ledger.schemas.ledger import JournalEntryCreate, JournalLineCreate
from general_ledger.schemas.purchase import PurchaseCreate
from general_ledger.services.ledger_service import LedgerService
from general_ledger.services.party_service import PartyService
from general_ledger.services.sequence_service import PURCHASE
from general_ledger.tax.jurisdictions import get_jurisdiction
from general_ledger.utils.money import ZERO, percent_of, quantize_money

logger = logging.getLogger(__name__)

CHARGEABLE_TYPES = (AccountType.ASSET, AccountType.EXPENSE)


@dataclass
class PurchaseResult:
    purchase: Purchase
    journal_entry: JournalEntry
    vendor_balance: Decimal
    account_balances: dict[str, Decimal]


class PurchaseService:

    def __init__(self, db: Session):
        self.db = db
        self.ledger = LedgerService(db)
        self.parties = PartyService(db)

    def create_purchase(self, request: PurchaseCreate) -> PurchaseResult:
        vendor = self.parties.get_vendor(request.vendor_id)

        vat_rate = request.vat_rate
        if vat_rate is None:
            vat_rate = get_jurisdiction().vat_rate

        # --- Price lines against their target accounts ---
        priced = []
        for line in request.lines:
            account = self.ledger.chart.get_account(line.account_code)
            if account.account_type not in CHARGEABLE_TYPES:
                raise ValidationError(
                    f"Purchases can only be charged to asset or expense "
                    f"accounts; {account.code} is {account.account_type.value}"
                )
            priced.append((line, account, quantize_money(line.quantity * line.unit_price)))

        subtotal = quantize_money(sum((amount for _, _, amount in priced), ZERO))
        vat_amount = percent_of(subtotal, vat_rate)
        total = subtotal + vat_amount
        if total <= 0:
            raise EmptyEntryError("Purchase total must be greater than zero")

        lines = [
            JournalLineCreate(
                account_id=account.id,
                debit=amount,
                description=line.description,
            )
            for line, account, amount in priced
            if amount > 0
        ]
        if vat_amount > 0:
            lines.append(JournalLineCreate(
                account_id=self.ledger.chart.get_by_role("VAT_INPUT").id,
                debit=vat_amount,
                description="VAT input",
            ))
        lines.append(JournalLineCreate(
            account_id=self.ledger.chart.get_by_role("ACCOUNTS_PAYABLE").id,
            credit=total,
            description="Accounts payable",
        ))

        entry_request = JournalEntryCreate(
            entry_date=request.purchase_date,
            reference="pending",
            description=f"Purchase from {vendor.name}"[:255],
            lines=lines,
            source_module=SourceModule.PURCHASES,
        )
        self.ledger.validate_entry(entry_request)

        # --- Create the purchase record ---
        purchase = Purchase(
            purchase_number=self.ledger.sequences.next_number(PURCHASE),
            vendor_id=vendor.id,
            purchase_date=request.purchase_date,
            reference=request.reference,
            subtotal=subtotal,
            vat_rate=vat_rate,
            vat_amount=vat_amount,
            total=total,
        )
        for number, (line, account, amount) in enumerate(priced, start=1):
            purchase.lines.append(PurchaseLine(
                line_number=number,
                description=line.description,
                account_id=account.id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                line_total=amount,
            ))
        self.db.add(purchase)
        self.db.flush()

        entry = self.ledger.post_direct(entry_request.model_copy(update={
            "reference": purchase.purchase_number,
            "description": f"Purchase {purchase.purchase_number} - {vendor.name}"[:255],
            "source_id": purchase.id,
        }))
        purchase.journal_entry_id = entry.id

        vendor = self.parties.lock_vendor(vendor.id)
        vendor.balance = quantize_money(vendor.balance + total)
        vendor.last_transaction_date = datetime.utcnow()
        self.db.flush()

        logger.info(
            "purchase_created number=%s vendor_id=%s total=%s entry_id=%s",
            purchase.purchase_number, vendor.id, total, entry.id,
        )
        return PurchaseResult(
            purchase=purchase,
            journal_entry=entry,
            vendor_balance=quantize_money(vendor.balance),
            account_balances=self.ledger.account_balances(entry),
        )

    def get_purchase(self, purchase_id: int) -> Purchase:
        purchase = self.db.get(Purchase, purchase_id)
        if not purchase:
            raise NotFoundError("Purchase", purchase_id)
        return purchase

    def list_purchases(self, vendor_id: int | None = None) -> list[Purchase]:
        query = select(Purchase).order_by(Purchase.purchase_date, Purchase.id)
        if vendor_id is not None:
            query = query.where(Purchase.vendor_id == vendor_id)
        return list(self.db.execute(query).scalars().all())
