"""
Journal entry and journal line models.

An entry groups one or more lines whose debits and credits
must balance before it can be posted. Posted entries are
never modified or deleted; a reversal adds a new entry with
debit and credit swapped and marks the original REVERSED.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, ForeignKey, Integer,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from general_ledger.models.base import Base
from general_ledger.models.enums import EntryStatus, SourceModule


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    entry_number: Mapped[str] = mapped_column(
        String(30), unique=True, nullable=False
    )
    entry_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    reference: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[EntryStatus] = mapped_column(
        SAEnum(EntryStatus, name="entry_status_enum", create_constraint=True),
        nullable=False,
        default=EntryStatus.DRAFT,
        index=True,
    )
    created_by: Mapped[str] = mapped_column(
        String(100), nullable=False, default="system"
    )
    source_module: Mapped[SourceModule] = mapped_column(
        SAEnum(SourceModule, name="source_module_enum", create_constraint=True),
        nullable=False,
        default=SourceModule.MANUAL,
    )
    source_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reversal_of_id: Mapped[int | None] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    posted_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )

    lines: Mapped[list["JournalLine"]] = relationship(
        back_populates="entry",
        order_by="JournalLine.line_number",
        cascade="all, delete-orphan",
    )
    reversal_of: Mapped["JournalEntry | None"] = relationship(
        remote_side=[id]
    )

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), Decimal("0"))

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), Decimal("0"))

    def __repr__(self) -> str:
        return f"<JournalEntry {self.entry_number} ({self.status.value})>"


class JournalLine(Base):
    """
    One debit or credit against a single ledger account.

    Exactly one of debit/credit is normally non-zero; the
    entry-level balance rule is what the posting engine enforces.
    """

    __tablename__ = "journal_lines"

    id: Mapped[int] = mapped_column(primary_key=True)
    entry_id: Mapped[int] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=False, index=True
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("ledger_accounts.id"), nullable=False, index=True
    )
    debit: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    credit: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    description: Mapped[str] = mapped_column(String(255), nullable=False)

    entry: Mapped["JournalEntry"] = relationship(back_populates="lines")
    account: Mapped["LedgerAccount"] = relationship(back_populates="lines")

    @property
    def account_code(self) -> str:
        return self.account.code

    @property
    def account_name(self) -> str:
        return self.account.name

    def __repr__(self) -> str:
        return (
            f"<JournalLine {self.account_id} "
            f"Dr {self.debit} Cr {self.credit}>"
        )
