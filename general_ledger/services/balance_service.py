"""
Balance accumulator.

LedgerAccount.balance is a cache of a fold over posted journal
lines. It is updated incrementally when an entry is posted or
reversed, and can be rebuilt at any time by replaying history.
Both paths use normal_balance_sign(), so they always agree.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from general_ledger.models.enums import POSTED_STATUSES
from general_ledger.models.journal_entry import JournalEntry, JournalLine
from general_ledger.models.ledger_account import LedgerAccount
from general_ledger.services.chart_service import normal_balance_sign
from general_ledger.utils.money import ZERO, quantize_money, to_minor_units

logger = logging.getLogger(__name__)


def posted_line_totals(
    db: Session,
    start: date | None = None,
    end: date | None = None,
    account_ids=None,
) -> dict[int, tuple[Decimal, Decimal]]:
    """
    Sum posted debits and credits per account.

    Only entries that have been posted count (status POSTED or
    REVERSED; a reversed entry is cancelled by its reversal, not
    removed). Dates are inclusive.
    """
    query = (
        select(
            JournalLine.account_id,
            func.coalesce(func.sum(JournalLine.debit), 0),
            func.coalesce(func.sum(JournalLine.credit), 0),
        )
        .join(JournalEntry, JournalLine.entry_id == JournalEntry.id)
        .where(JournalEntry.status.in_(POSTED_STATUSES))
        .group_by(JournalLine.account_id)
    )
    if start is not None:
        query = query.where(JournalEntry.entry_date >= start)
    if end is not None:
        query = query.where(JournalEntry.entry_date <= end)
    if account_ids is not None:
        query = query.where(JournalLine.account_id.in_(list(account_ids)))

    return {
        account_id: (quantize_money(debit), quantize_money(credit))
        for account_id, debit, credit in db.execute(query).all()
    }


@dataclass
class BalanceMismatch:
    account_id: int
    account_code: str
    stored_balance: Decimal
    replayed_balance: Decimal


class BalanceAccumulator:

    def __init__(self, db: Session):
        self.db = db

    def lock_accounts(self, account_ids) -> dict[int, LedgerAccount]:
        """
        Load accounts with SELECT ... FOR UPDATE, in ascending id order.

        A fixed lock order keeps two postings over overlapping
        account sets from deadlocking each other.
        """
        ids = sorted(set(account_ids))
        if not ids:
            return {}
        # populate_existing below would discard unflushed changes
        self.db.flush()
        accounts = self.db.execute(
            select(LedgerAccount)
            .where(LedgerAccount.id.in_(ids))
            .order_by(LedgerAccount.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars().all()
        return {account.id: account for account in accounts}

    def apply_entry(self, entry: JournalEntry) -> dict[int, Decimal]:
        """
        Add an entry's effect to the stored balances.

        Returns the new balance of every account the entry touched.
        """
        accounts = self.lock_accounts(line.account_id for line in entry.lines)

        for line in entry.lines:
            account = accounts[line.account_id]
            delta = normal_balance_sign(account.account_type) * (
                line.debit - line.credit
            )
            account.balance = quantize_money(account.balance + delta)

        self.db.flush()
        return {account_id: a.balance for account_id, a in accounts.items()}

    def replay_balance(self, account_id: int, as_of: date | None = None) -> Decimal:
        """Fold every posted line for the account without touching the stored value."""
        account = self.db.get(LedgerAccount, account_id)
        totals = posted_line_totals(self.db, end=as_of, account_ids=[account_id])
        debit, credit = totals.get(account_id, (ZERO, ZERO))
        return quantize_money(
            normal_balance_sign(account.account_type) * (debit - credit)
        )

    def recompute(self, account_id: int) -> LedgerAccount:
        """Overwrite the stored balance with the replayed one."""
        account = self.lock_accounts([account_id])[account_id]
        replayed = self.replay_balance(account_id)

        if to_minor_units(account.balance) != to_minor_units(replayed):
            logger.warning(
                "balance_corrected code=%s stored=%s replayed=%s",
                account.code, account.balance, replayed,
            )
        account.balance = replayed
        self.db.flush()
        return account

    def recompute_all(self) -> list[LedgerAccount]:
        ids = self.db.execute(
            select(LedgerAccount.id).order_by(LedgerAccount.id)
        ).scalars().all()
        return [self.recompute(account_id) for account_id in ids]

    def verify(self) -> list[BalanceMismatch]:
        """Return every account whose stored balance differs from a full replay."""
        totals = posted_line_totals(self.db)
        accounts = self.db.execute(
            select(LedgerAccount).order_by(LedgerAccount.code)
        ).scalars().all()

        mismatches = []
        for account in accounts:
            debit, credit = totals.get(account.id, (ZERO, ZERO))
            replayed = quantize_money(
                normal_balance_sign(account.account_type) * (debit - credit)
            )
            if to_minor_units(account.balance) != to_minor_units(replayed):
                mismatches.append(BalanceMismatch(
                    account_id=account.id,
                    account_code=account.code,
                    stored_balance=quantize_money(account.balance),
                    replayed_balance=replayed,
                ))
        return mismatches
