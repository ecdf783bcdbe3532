"""
Payroll workflow.

For each employee in the run:
    gross = monthly salary
    paye, social security, health = jurisdiction calculators
    net = gross - paye - social security - health

Accounting for the whole run, as one entry:
    DEBIT  Salaries Expense              (sum of gross)
    CREDIT PAYE Payable                  (sum of PAYE)
    CREDIT Social Security Payable       (sum of social security)
    CREDIT Health Insurance Payable      (sum of health)
    CREDIT Bank                          (sum of net)

Run status goes DRAFT -> PROCESSING -> PROCESSED within the call.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from general_ledger.exceptions import NotFoundError, ValidationError
from general_ledger.models.enums import PayrollStatus, SourceModule
from general_ledger.models.journal_entry import JournalEntry
from general_ledger.models.party import Employee
from general_ledger.models.payroll import PayrollRun, Payslip
from general_ledger.schemas.ledger import JournalEntryCreate, JournalLineCreate
from general_ledger.schemas.payroll import PayrollRunCreate
from general_ledger.services.ledger_service import LedgerService
from general_ledger.services.sequence_service import PAYROLL_RUN
from general_ledger.tax.calculators import (
    calculate_health_contribution,
    calculate_paye,
    calculate_social_security,
)
from general_ledger.tax.jurisdictions import JurisdictionTaxConfig, get_jurisdiction
from general_ledger.utils.money import ZERO, quantize_money

logger = logging.getLogger(__name__)


@dataclass
class PayslipFigures:
    employee_id: int
    gross_pay: Decimal
    paye: Decimal
    social_security: Decimal
    health: Decimal
    net_pay: Decimal


def compute_payslip(employee: Employee, config: JurisdictionTaxConfig) -> PayslipFigures:
    gross = quantize_money(employee.salary)
    paye = calculate_paye(gross, config)
    social = calculate_social_security(gross, config)
    health = calculate_health_contribution(gross, config)
    net = quantize_money(gross - paye - social - health)
    if net < 0:
        raise ValidationError(
            f"Deductions {quantize_money(paye + social + health)} for employee "
            f"{employee.employee_number} exceed gross pay {gross}"
        )
    return PayslipFigures(
        employee_id=employee.id,
        gross_pay=gross,
        paye=paye,
        social_security=social,
        health=health,
        net_pay=net,
    )


@dataclass
class PayrollResult:
    payroll_run: PayrollRun
    journal_entry: JournalEntry
    account_balances: dict[str, Decimal]


class PayrollService:

    def __init__(self, db: Session):
        self.db = db
        self.ledger = LedgerService(db)

    def _select_employees(self, employee_ids: list[int] | None) -> list[Employee]:
        if employee_ids is None:
            return list(self.db.execute(
                select(Employee)
                .where(Employee.is_active.is_(True))
                .order_by(Employee.id)
            ).scalars().all())

        employees = []
        for employee_id in sorted(set(employee_ids)):
            employee = self.db.get(Employee, employee_id)
            if not employee:
                raise NotFoundError("Employee", employee_id)
            if not employee.is_active:
                raise ValidationError(f"Employee {employee_id} is not active")
            employees.append(employee)
        return employees

    def process_payroll_run(self, request: PayrollRunCreate) -> PayrollResult:
        config = get_jurisdiction(request.jurisdiction)

        employees = self._select_employees(request.employee_ids)
        if not employees:
            raise ValidationError("No active employees to pay")

        slips = [compute_payslip(employee, config) for employee in employees]
        total_gross = quantize_money(sum((s.gross_pay for s in slips), ZERO))
        total_paye = quantize_money(sum((s.paye for s in slips), ZERO))
        total_social = quantize_money(sum((s.social_security for s in slips), ZERO))
        total_health = quantize_money(sum((s.health for s in slips), ZERO))
        total_net = quantize_money(sum((s.net_pay for s in slips), ZERO))

        # --- Build the entry, omitting zero lines ---
        chart = self.ledger.chart
        lines = [JournalLineCreate(
            account_id=chart.get_by_role("SALARIES_EXPENSE").id,
            debit=total_gross,
            description="Gross salaries",
        )]
        for role, amount, description in (
            ("PAYE_PAYABLE", total_paye, "PAYE withheld"),
            ("SOCIAL_SECURITY_PAYABLE", total_social, "Social security withheld"),
            ("HEALTH_PAYABLE", total_health, "Health insurance withheld"),
            ("BANK", total_net, "Net pay"),
        ):
            if amount > 0:
                lines.append(JournalLineCreate(
                    account_id=chart.get_by_role(role).id,
                    credit=amount,
                    description=description,
                ))

        entry_request = JournalEntryCreate(
            entry_date=request.pay_date,
            reference="pending",
            description=(
                f"Payroll {request.pay_period_start.isoformat()} to "
                f"{request.pay_period_end.isoformat()}"
            ),
            lines=lines,
            source_module=SourceModule.PAYROLL,
        )
        self.ledger.validate_entry(entry_request)

        # --- Create the run ---
        run = PayrollRun(
            run_number=self.ledger.sequences.next_number(PAYROLL_RUN),
            pay_period_start=request.pay_period_start,
            pay_period_end=request.pay_period_end,
            pay_date=request.pay_date,
            jurisdiction=config.country_code,
            status=PayrollStatus.DRAFT,
        )
        self.db.add(run)
        self.db.flush()

        run.status = PayrollStatus.PROCESSING
        for slip in slips:
            run.payslips.append(Payslip(
                employee_id=slip.employee_id,
                gross_pay=slip.gross_pay,
                paye=slip.paye,
                social_security=slip.social_security,
                health=slip.health,
                net_pay=slip.net_pay,
            ))
        run.employee_count = len(slips)
        run.total_gross = total_gross
        run.total_paye = total_paye
        run.total_social_security = total_social
        run.total_health = total_health
        run.total_net = total_net
        self.db.flush()

        entry = self.ledger.post_direct(entry_request.model_copy(update={
            "reference": run.run_number,
            "source_id": run.id,
        }))

        run.journal_entry_id = entry.id
        run.status = PayrollStatus.PROCESSED
        run.processed_at = datetime.utcnow()
        self.db.flush()

        logger.info(
            "payroll_processed run=%s employees=%d gross=%s net=%s entry_id=%s",
            run.run_number, run.employee_count, total_gross, total_net, entry.id,
        )
        return PayrollResult(
            payroll_run=run,
            journal_entry=entry,
            account_balances=self.ledger.account_balances(entry),
        )

    def get_payroll_run(self, run_id: int) -> PayrollRun:
        run = self.db.get(PayrollRun, run_id)
        if not run:
            raise NotFoundError("Payroll run", run_id)
        return run

    def list_payroll_runs(self) -> list[PayrollRun]:
        return list(self.db.execute(
            select(PayrollRun).order_by(PayrollRun.pay_date, PayrollRun.id)
        ).scalars().all())
