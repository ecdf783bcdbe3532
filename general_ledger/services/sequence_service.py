"""
Sequence service: human-readable document numbers.

Numbers come from a locked counter row per document type,
never from counting existing records, so two concurrent
creates cannot be handed the same number. The increment is
part of the caller's transaction; a rollback returns it.
"""

import logging

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from general_ledger.exceptions import ConfigurationError
from general_ledger.models.sequence import SequenceCounter

logger = logging.getLogger(__name__)


# Prefix -> zero-padded width
JOURNAL_ENTRY = "JE"
INVOICE = "INV"
PAYMENT = "PAY"
ESTIMATE = "EST"
PAYROLL_RUN = "PR"
PURCHASE = "PUR"

WIDTHS = {
    JOURNAL_ENTRY: 6,
    INVOICE: 4,
    PAYMENT: 4,
    ESTIMATE: 4,
    PAYROLL_RUN: 4,
    PURCHASE: 4,
}

# Dialects with INSERT ... ON CONFLICT DO NOTHING
UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class SequenceService:

    def __init__(self, db: Session):
        self.db = db

    def _ensure_counter(self, name: str) -> None:
        """
        Create the counter row unless it already exists.

        A row that does not exist yet cannot be locked, so two
        first uses of a prefix would both try to create it. The
        losing insert is a no-op rather than a key violation, and
        that transaction then waits on the winner's row lock.
        """
        dialect = self.db.get_bind().dialect.name
        insert = UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise ConfigurationError(
                f"Sequence counters are not supported on database dialect {dialect}"
            )
        self.db.execute(
            insert(SequenceCounter)
            .values(name=name, current_value=0)
            .on_conflict_do_nothing(index_elements=[SequenceCounter.name])
        )

    def next_value(self, name: str) -> int:
        """Lock the counter row (creating it on first use) and increment it."""
        # populate_existing below would discard unflushed changes
        self.db.flush()
        self._ensure_counter(name)
        counter = self.db.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == name)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one()

        counter.current_value += 1
        self.db.flush()

        logger.debug("sequence=%s value=%s", name, counter.current_value)
        return counter.current_value

    def next_number(self, prefix: str) -> str:
        """Return the next formatted number, e.g. ``INV-0007``."""
        value = self.next_value(prefix)
        width = WIDTHS.get(prefix, 4)
        return f"{prefix}-{value:0{width}d}"
