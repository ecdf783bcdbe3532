"""
Payroll run and payslip models.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, ForeignKey, Integer,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from general_ledger.models.base import Base
from general_ledger.models.enums import PayrollStatus


class PayrollRun(Base):
    __tablename__ = "payroll_runs"

    id: Mapped[int] = mapped_column(primary_key=True)
    run_number: Mapped[str] = mapped_column(
        String(30), unique=True, nullable=False
    )
    pay_period_start: Mapped[date] = mapped_column(Date, nullable=False)
    pay_period_end: Mapped[date] = mapped_column(Date, nullable=False)
    pay_date: Mapped[date] = mapped_column(Date, nullable=False)
    jurisdiction: Mapped[str] = mapped_column(String(5), nullable=False)
    status: Mapped[PayrollStatus] = mapped_column(
        SAEnum(PayrollStatus, name="payroll_status_enum", create_constraint=True),
        nullable=False,
        default=PayrollStatus.DRAFT,
    )
    employee_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_gross: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    total_paye: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    total_social_security: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    total_health: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    total_net: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    journal_entry_id: Mapped[int | None] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=True
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    payslips: Mapped[list["Payslip"]] = relationship(
        back_populates="payroll_run", cascade="all, delete-orphan"
    )
    journal_entry: Mapped["JournalEntry | None"] = relationship()

    @property
    def total_deductions(self) -> Decimal:
        return self.total_paye + self.total_social_security + self.total_health


class Payslip(Base):
    """One employee's pay and statutory deductions within a run."""

    __tablename__ = "payslips"

    id: Mapped[int] = mapped_column(primary_key=True)
    payroll_run_id: Mapped[int] = mapped_column(
        ForeignKey("payroll_runs.id"), nullable=False, index=True
    )
    employee_id: Mapped[int] = mapped_column(
        ForeignKey("employees.id"), nullable=False, index=True
    )
    gross_pay: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    paye: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    social_security: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    health: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)

    payroll_run: Mapped["PayrollRun"] = relationship(back_populates="payslips")
    employee: Mapped["Employee"] = relationship()
