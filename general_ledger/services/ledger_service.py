"""
Ledger service: the journal entry store and posting engine.

This service enforces the fundamental rules:
1. A posted entry has at least one line and a non-zero total
2. Total debits equal total credits, compared in minor units
3. Accounts must exist and be active
4. Posted entries are immutable; corrections are reversals

No other service writes journal entries or account balances.
Every subledger workflow posts through post_direct().
"""

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from general_ledger.exceptions import (
    AlreadyPostedError,
    AlreadyReversedError,
    EmptyEntryError,
    InactiveAccountError,
    NotFoundError,
    NotPostedError,
    UnbalancedEntryError,
)
from general_ledger.models.audit_log import AuditLog
from general_ledger.models.enums import EntryStatus, POSTED_STATUSES, SourceModule
from general_ledger.models.journal_entry import JournalEntry, JournalLine
from general_ledger.models.ledger_account import LedgerAccount
from general_ledger.schemas.ledger import JournalEntryCreate, JournalLineCreate
from general_ledger.services.balance_service import BalanceAccumulator
from general_ledger.services.chart_service import (
    ChartOfAccountsService,
    normal_balance_sign,
)
from general_ledger.services.sequence_service import JOURNAL_ENTRY, SequenceService
from general_ledger.utils.money import ZERO, quantize_money, to_minor_units

logger = logging.getLogger(__name__)


@dataclass
class ResolvedLine:
    account: LedgerAccount
    debit: Decimal
    credit: Decimal
    description: str


@dataclass
class AccountActivity:
    entry_id: int
    entry_number: str
    entry_date: date
    reference: str
    description: str
    debit: Decimal
    credit: Decimal
    running_balance: Decimal


class LedgerService:
    """
    All journal operations pass through this service.

    The service takes a database session as a constructor
    argument. This means the caller controls the transaction
    boundary: they decide when to commit or rollback.
    """

    def __init__(self, db: Session):
        self.db = db
        self.chart = ChartOfAccountsService(db)
        self.accumulator = BalanceAccumulator(db)
        self.sequences = SequenceService(db)

    # --- Validation ---

    def _resolve_lines(self, lines: list[JournalLineCreate]) -> list[ResolvedLine]:
        resolved = []
        for line in lines:
            key = line.account_id if line.account_id is not None else line.account_code
            resolved.append(ResolvedLine(
                account=self.chart.get_account(key),
                debit=quantize_money(line.debit),
                credit=quantize_money(line.credit),
                description=line.description,
            ))
        return resolved

    def _check_postable(self, lines: list[ResolvedLine]) -> None:
        """
        Raise unless the lines could be posted as one entry.

        Nothing is written here, so a failure leaves the
        session exactly as it was.
        """
        if not lines:
            raise EmptyEntryError("Journal entry has no lines")

        total_debits = sum(to_minor_units(line.debit) for line in lines)
        total_credits = sum(to_minor_units(line.credit) for line in lines)

        if total_debits == 0 and total_credits == 0:
            raise EmptyEntryError("Journal entry has a zero total")

        if total_debits != total_credits:
            debits = sum((line.debit for line in lines), ZERO)
            credits = sum((line.credit for line in lines), ZERO)
            logger.warning(
                "entry_rejected reason=unbalanced debits=%s credits=%s",
                debits, credits,
            )
            raise UnbalancedEntryError(debits, credits)

        for line in lines:
            if not line.account.is_active:
                logger.warning(
                    "entry_rejected reason=inactive_account code=%s",
                    line.account.code,
                )
                raise InactiveAccountError(line.account.code)

    # --- Writes ---

    def _write_entry(
        self,
        request: JournalEntryCreate,
        lines: list[ResolvedLine],
        reversal_of_id: int | None = None,
    ) -> JournalEntry:
        entry = JournalEntry(
            entry_number=self.sequences.next_number(JOURNAL_ENTRY),
            entry_date=request.entry_date,
            reference=request.reference,
            description=request.description,
            status=EntryStatus.DRAFT,
            created_by=request.created_by,
            source_module=request.source_module,
            source_id=request.source_id,
            reversal_of_id=reversal_of_id,
        )
        for number, line in enumerate(lines, start=1):
            entry.lines.append(JournalLine(
                line_number=number,
                account=line.account,
                debit=line.debit,
                credit=line.credit,
                description=line.description or request.description,
            ))
        self.db.add(entry)
        self.db.flush()
        return entry

    def _mark_posted(self, entry: JournalEntry) -> JournalEntry:
        entry.status = EntryStatus.POSTED
        entry.posted_at = datetime.utcnow()
        self.db.flush()

        self.accumulator.apply_entry(entry)
        self._audit("ENTRY_POSTED", {
            "entry_id": entry.id,
            "entry_number": entry.entry_number,
            "source_module": entry.source_module.value,
            "source_id": entry.source_id,
            "total": str(entry.total_debit),
        })

        logger.info(
            "entry_posted id=%s number=%s source=%s total=%s",
            entry.id, entry.entry_number,
            entry.source_module.value, entry.total_debit,
        )
        return entry

    def _audit(self, event_type: str, details: dict) -> None:
        self.db.add(AuditLog(event_type=event_type, details=json.dumps(details)))

    def _get_entry_for_update(self, entry_id: int) -> JournalEntry:
        entry = self.db.execute(
            select(JournalEntry)
            .where(JournalEntry.id == entry_id)
            .with_for_update()
        ).scalar_one_or_none()
        if not entry:
            raise NotFoundError("Journal entry", entry_id)
        return entry

    def create_draft(self, request: JournalEntryCreate) -> JournalEntry:
        """
        Save an entry as DRAFT.

        Drafts do not affect balances and are not checked for
        balance; post() does that. Unknown accounts still fail.
        """
        lines = self._resolve_lines(request.lines)
        entry = self._write_entry(request, lines)
        logger.info("entry_drafted id=%s number=%s", entry.id, entry.entry_number)
        return entry

    def post(self, entry_id: int) -> JournalEntry:
        """
        Post a draft entry and apply it to account balances.

        Raises AlreadyPostedError unless the entry is a draft,
        and EmptyEntryError / UnbalancedEntryError /
        InactiveAccountError if its lines cannot be posted.
        The caller is responsible for calling db.commit().
        """
        entry = self._get_entry_for_update(entry_id)

        if entry.status != EntryStatus.DRAFT:
            raise AlreadyPostedError(
                f"Journal entry {entry.entry_number} is already "
                f"{entry.status.value}"
            )

        self._check_postable([
            ResolvedLine(line.account, line.debit, line.credit, line.description)
            for line in entry.lines
        ])
        return self._mark_posted(entry)

    def validate_entry(self, request: JournalEntryCreate) -> None:
        """
        Raise if the entry could not be posted, without writing anything.

        Workflows call this before creating their own records so a
        bad entry never leaves a half-written invoice behind.
        """
        self._check_postable(self._resolve_lines(request.lines))

    def post_direct(self, request: JournalEntryCreate) -> JournalEntry:
        """
        Validate, store and post an entry in one unit of work.

        This is the path used by every subledger workflow.
        Validation runs before the entry row is written.
        """
        lines = self._resolve_lines(request.lines)
        self._check_postable(lines)
        entry = self._write_entry(request, lines)
        return self._mark_posted(entry)

    def reverse(
        self,
        entry_id: int,
        reversal_date: date | None = None,
        created_by: str = "system",
    ) -> JournalEntry:
        """
        Reverse a posted entry.

        The original is not modified apart from its status: a new
        entry with every line's debit and credit swapped is posted
        and points back at the original. Net effect on every
        account is the exact inverse of the original posting.
        """
        original = self._get_entry_for_update(entry_id)

        if original.status == EntryStatus.DRAFT:
            raise NotPostedError(
                f"Journal entry {original.entry_number} is not posted"
            )
        if original.status == EntryStatus.REVERSED:
            raise AlreadyReversedError(
                f"Journal entry {original.entry_number} is already reversed"
            )

        lines = [
            ResolvedLine(
                account=line.account,
                debit=line.credit,
                credit=line.debit,
                description=f"Reversal: {line.description}"[:255],
            )
            for line in original.lines
        ]
        self._check_postable(lines)

        request = JournalEntryCreate(
            entry_date=reversal_date or date.today(),
            reference=f"REV-{original.entry_number}",
            description=f"Reversal of {original.entry_number}: {original.description}"[:255],
            created_by=created_by,
            source_module=SourceModule.REVERSAL,
            source_id=original.id,
        )
        reversal = self._write_entry(request, lines, reversal_of_id=original.id)
        self._mark_posted(reversal)

        original.status = EntryStatus.REVERSED
        self.db.flush()

        self._audit("ENTRY_REVERSED", {
            "entry_id": original.id,
            "reversal_id": reversal.id,
        })
        logger.info(
            "entry_reversed id=%s reversal_id=%s",
            original.id, reversal.id,
        )
        return reversal

    def post_opening_balances(
        self,
        entry_date: date,
        balances: dict[str, Decimal],
        created_by: str = "system",
    ) -> JournalEntry:
        """
        Post opening balances as one journal entry.

        Each amount is in the account's normal direction. The
        difference is taken up by the opening balance equity
        account, so the entry always balances.
        """
        lines = []
        offset = ZERO
        for code, amount in balances.items():
            amount = quantize_money(amount)
            if amount == 0:
                continue
            account = self.chart.get_account(str(code))
            # debit - credit needed to move the balance by ``amount``
            net = amount * normal_balance_sign(account.account_type)
            offset += net
            lines.append(JournalLineCreate(
                account_id=account.id,
                debit=net if net > 0 else ZERO,
                credit=-net if net < 0 else ZERO,
                description=f"Opening balance {account.code}",
            ))

        if offset != 0:
            equity = self.chart.get_by_role("OPENING_BALANCE_EQUITY")
            lines.append(JournalLineCreate(
                account_id=equity.id,
                debit=-offset if offset < 0 else ZERO,
                credit=offset if offset > 0 else ZERO,
                description="Opening balance offset",
            ))

        return self.post_direct(JournalEntryCreate(
            entry_date=entry_date,
            reference="OPENING-BALANCES",
            description="Opening balances",
            lines=lines,
            created_by=created_by,
            source_module=SourceModule.OPENING_BALANCE,
        ))

    # --- Queries ---

    def get_entry(self, entry_id: int) -> JournalEntry:
        entry = self.db.get(JournalEntry, entry_id)
        if not entry:
            raise NotFoundError("Journal entry", entry_id)
        return entry

    def list_entries(
        self,
        start: date | None = None,
        end: date | None = None,
        status: EntryStatus | None = None,
        source_module: SourceModule | None = None,
        source_id: int | None = None,
    ) -> list[JournalEntry]:
        query = select(JournalEntry).order_by(
            JournalEntry.entry_date, JournalEntry.id
        )
        if start is not None:
            query = query.where(JournalEntry.entry_date >= start)
        if end is not None:
            query = query.where(JournalEntry.entry_date <= end)
        if status is not None:
            query = query.where(JournalEntry.status == status)
        if source_module is not None:
            query = query.where(JournalEntry.source_module == source_module)
        if source_id is not None:
            query = query.where(JournalEntry.source_id == source_id)
        return list(self.db.execute(query).scalars().all())

    def get_account_balance(self, account_id: int, as_of: date | None = None) -> Decimal:
        """
        Balance of an account in its normal direction.

        Without a date this is the stored running balance; with
        one it is replayed from entries dated on or before it.
        """
        account = self.chart.get_account(account_id)
        if as_of is None:
            return quantize_money(account.balance)
        return self.accumulator.replay_balance(account.id, as_of)

    def get_account_activity(
        self,
        account_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> list[AccountActivity]:
        """Posted lines for an account in date order, with a running balance."""
        account = self.chart.get_account(account_id)
        sign = normal_balance_sign(account.account_type)

        running = ZERO
        if start is not None:
            running = self.accumulator.replay_balance(
                account.id, start - timedelta(days=1)
            )

        query = (
            select(JournalLine, JournalEntry)
            .join(JournalEntry, JournalLine.entry_id == JournalEntry.id)
            .where(
                JournalLine.account_id == account.id,
                JournalEntry.status.in_(POSTED_STATUSES),
            )
            .order_by(JournalEntry.entry_date, JournalEntry.id, JournalLine.line_number)
        )
        if start is not None:
            query = query.where(JournalEntry.entry_date >= start)
        if end is not None:
            query = query.where(JournalEntry.entry_date <= end)

        activity = []
        for line, entry in self.db.execute(query).all():
            running = quantize_money(running + sign * (line.debit - line.credit))
            activity.append(AccountActivity(
                entry_id=entry.id,
                entry_number=entry.entry_number,
                entry_date=entry.entry_date,
                reference=entry.reference,
                description=line.description,
                debit=quantize_money(line.debit),
                credit=quantize_money(line.credit),
                running_balance=running,
            ))
        return activity

    def account_balances(self, entry: JournalEntry) -> dict[str, Decimal]:
        """Current balance of every account an entry touched, by code."""
        return {
            line.account.code: quantize_money(line.account.balance)
            for line in entry.lines
        }
