"""
Ledger account model (chart of accounts).

Every account in the system (cash, receivables, VAT output,
sales revenue, salaries, etc.) is a ledger account. Journal
lines are posted against these accounts.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Boolean, DateTime, Numeric, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from general_ledger.models.base import Base
from general_ledger.models.enums import AccountType


class LedgerAccount(Base):
    """
    A single account in the chart of accounts.

    ``balance`` is positive in the account's normal direction
    (debit for assets and expenses, credit for liabilities,
    equity and revenue). It is written only by the balance
    accumulator while posting or reversing an entry, and can
    always be rebuilt by replaying posted journal lines.

    Once referenced by entries, an account is never deleted,
    only deactivated via is_active=False.
    """

    __tablename__ = "ledger_accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(AccountType, name="account_type_enum"),
        nullable=False,
    )
    subtype: Mapped[str] = mapped_column(String(50), nullable=False)
    balance: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    lines: Mapped[list["JournalLine"]] = relationship(
        back_populates="account"
    )

    def __repr__(self) -> str:
        return f"<LedgerAccount {self.code} ({self.account_type.value})>"
