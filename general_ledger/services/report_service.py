"""
Reporting engine.

Read-only. Every figure is derived from posted journal lines
(or, for AR aging, open invoice balances), never from the
cached LedgerAccount.balance. Nothing here writes to the session.

Amounts are reported in each account's normal direction, so
revenue, liabilities and equity appear as positive figures.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, aliased

from general_ledger.config import get_settings
from general_ledger.exceptions import InvalidDateRangeError
from general_ledger.models.enums import (
    POSTED_STATUSES,
    AccountSubtype,
    AccountType,
    SourceModule,
)
from general_ledger.models.invoice import Invoice
from general_ledger.models.journal_entry import JournalEntry, JournalLine
from general_ledger.models.ledger_account import LedgerAccount
from general_ledger.models.party import Customer
from general_ledger.schemas.report import (
    AgingBuckets,
    ARAgingReport,
    AssetSection,
    BalanceSheetReport,
    CashFlowReport,
    CustomerAging,
    EquitySection,
    LiabilitySection,
    ProfitAndLossReport,
    ReportLine,
    TrialBalanceReport,
    TrialBalanceRow,
    VatReturnReport,
)
from general_ledger.services.balance_service import posted_line_totals
from general_ledger.services.chart_service import (
    ChartOfAccountsService,
    normal_balance_sign,
)
from general_ledger.tax.jurisdictions import get_jurisdiction
from general_ledger.utils.money import ZERO, percent_of, quantize_money, to_minor_units

logger = logging.getLogger(__name__)

HUNDRED = Decimal(100)


def check_date_range(start: date, end: date) -> None:
    if start > end:
        raise InvalidDateRangeError(
            f"Start date {start.isoformat()} is after end date {end.isoformat()}"
        )


def _margin(amount: Decimal, revenue: Decimal) -> Decimal:
    if revenue == 0:
        return quantize_money(ZERO)
    return quantize_money(amount / revenue * HUNDRED)


def _total(values) -> Decimal:
    return quantize_money(sum(values, ZERO))


def _line(account: LedgerAccount, amount: Decimal) -> ReportLine:
    return ReportLine(code=account.code, name=account.name, amount=amount)


def _next_month_day(day_in_month: date, day: int) -> date:
    year, month = day_in_month.year, day_in_month.month + 1
    if month == 13:
        year, month = year + 1, 1
    return date(year, month, day)


class ReportService:

    def __init__(self, db: Session):
        self.db = db
        self.chart = ChartOfAccountsService(db)

    def _accounts(self) -> list[LedgerAccount]:
        return self.chart.list_accounts()

    def _balances(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> dict[int, Decimal]:
        """Per-account movement in the normal direction over a date window."""
        accounts = {a.id: a for a in self._accounts()}
        totals = posted_line_totals(self.db, start=start, end=end)
        return {
            account_id: quantize_money(
                normal_balance_sign(accounts[account_id].account_type)
                * (debit - credit)
            )
            for account_id, (debit, credit) in totals.items()
        }

    def _earnings(self, accounts, balances: dict[int, Decimal]) -> Decimal:
        """Revenue less expenses."""
        revenue = _total(
            balances.get(a.id, ZERO) for a in accounts
            if a.account_type == AccountType.REVENUE
        )
        expenses = _total(
            balances.get(a.id, ZERO) for a in accounts
            if a.account_type == AccountType.EXPENSE
        )
        return revenue - expenses

    # --- Profit & Loss ---

    def profit_and_loss(self, start: date, end: date) -> ProfitAndLossReport:
        check_date_range(start, end)
        balances = self._balances(start, end)

        revenue_lines, opex_lines = [], []
        other_income = cost_of_sales = other_expenses = ZERO

        for account in self._accounts():
            amount = balances.get(account.id, ZERO)
            if amount == 0:
                continue
            if account.account_type == AccountType.REVENUE:
                if account.subtype == AccountSubtype.OTHER_REVENUE.value:
                    other_income += amount
                else:
                    revenue_lines.append(_line(account, amount))
            elif account.account_type == AccountType.EXPENSE:
                if account.subtype == AccountSubtype.COST_OF_SALES.value:
                    cost_of_sales += amount
                elif account.subtype == AccountSubtype.OPERATING_EXPENSE.value:
                    opex_lines.append(_line(account, amount))
                else:
                    other_expenses += amount

        revenue = _total(line.amount for line in revenue_lines)
        operating_expenses = _total(line.amount for line in opex_lines)
        gross_profit = revenue - cost_of_sales
        operating_income = gross_profit - operating_expenses
        net_income = operating_income + other_income - other_expenses

        return ProfitAndLossReport(
            start_date=start,
            end_date=end,
            revenue=revenue,
            revenue_lines=revenue_lines,
            other_income=quantize_money(other_income),
            cost_of_sales=quantize_money(cost_of_sales),
            gross_profit=quantize_money(gross_profit),
            operating_expenses=operating_expenses,
            operating_expense_lines=opex_lines,
            operating_income=quantize_money(operating_income),
            other_expenses=quantize_money(other_expenses),
            net_income=quantize_money(net_income),
            gross_margin=_margin(gross_profit, revenue),
            operating_margin=_margin(operating_income, revenue),
            net_margin=_margin(net_income, revenue),
        )

    # --- Balance Sheet ---

    def balance_sheet(self, as_of: date) -> BalanceSheetReport:
        """
        Position as of a date (entries dated on or before it).

        Earnings not yet closed to retained earnings are shown
        inside equity, which is what makes assets equal
        liabilities plus equity at any date.
        """
        accounts = self._accounts()
        balances = self._balances(end=as_of)

        current_assets = fixed_assets = ZERO
        current_liabilities = long_term = ZERO
        equity_accounts = ZERO
        asset_lines, liability_lines, equity_lines = [], [], []

        for account in accounts:
            amount = balances.get(account.id, ZERO)
            if amount == 0:
                continue
            if account.account_type == AccountType.ASSET:
                asset_lines.append(_line(account, amount))
                if account.subtype == AccountSubtype.FIXED_ASSET.value:
                    fixed_assets += amount
                else:
                    current_assets += amount
            elif account.account_type == AccountType.LIABILITY:
                liability_lines.append(_line(account, amount))
                if account.subtype == AccountSubtype.LONG_TERM_LIABILITY.value:
                    long_term += amount
                else:
                    current_liabilities += amount
            elif account.account_type == AccountType.EQUITY:
                equity_lines.append(_line(account, amount))
                equity_accounts += amount

        current_earnings = self._earnings(accounts, balances)
        assets_total = quantize_money(current_assets + fixed_assets)
        liabilities_total = quantize_money(current_liabilities + long_term)
        equity_total = quantize_money(equity_accounts + current_earnings)

        return BalanceSheetReport(
            as_of=as_of,
            assets=AssetSection(
                current=quantize_money(current_assets),
                fixed=quantize_money(fixed_assets),
                total=assets_total,
                lines=asset_lines,
            ),
            liabilities=LiabilitySection(
                current=quantize_money(current_liabilities),
                long_term=quantize_money(long_term),
                total=liabilities_total,
                lines=liability_lines,
            ),
            equity=EquitySection(
                accounts=quantize_money(equity_accounts),
                current_earnings=quantize_money(current_earnings),
                total=equity_total,
                lines=equity_lines,
            ),
            is_balanced=(
                to_minor_units(assets_total)
                == to_minor_units(liabilities_total + equity_total)
            ),
        )

    # --- Cash Flow ---

    def cash_flow(self, start: date, end: date) -> CashFlowReport:
        """
        Indirect-method cash flow for a period.

        Operating starts from net income and removes the movement
        in non-cash working capital. Investing is the movement in
        fixed assets; financing is long-term debt plus equity.
        """
        check_date_range(start, end)
        settings = get_settings()
        receivable_code = settings.account_code("ACCOUNTS_RECEIVABLE")
        inventory_code = settings.account_code("INVENTORY")
        payable_code = settings.account_code("ACCOUNTS_PAYABLE")

        accounts = self._accounts()
        opening = self._balances(end=start - timedelta(days=1))
        closing = self._balances(end=end)
        period = self._balances(start, end)

        change = defaultdict(lambda: ZERO)
        beginning_cash = ending_cash = ZERO

        for account in accounts:
            delta = closing.get(account.id, ZERO) - opening.get(account.id, ZERO)
            if account.account_type == AccountType.ASSET:
                if account.subtype == AccountSubtype.CASH.value:
                    beginning_cash += opening.get(account.id, ZERO)
                    ending_cash += closing.get(account.id, ZERO)
                elif account.subtype == AccountSubtype.FIXED_ASSET.value:
                    change["fixed_assets"] += delta
                elif account.code == receivable_code:
                    change["receivables"] += delta
                elif account.code == inventory_code:
                    change["inventory"] += delta
                else:
                    change["other_current_assets"] += delta
            elif account.account_type == AccountType.LIABILITY:
                if account.subtype == AccountSubtype.LONG_TERM_LIABILITY.value:
                    change["long_term"] += delta
                elif account.code == payable_code:
                    change["payables"] += delta
                else:
                    change["other_current_liabilities"] += delta
            elif account.account_type == AccountType.EQUITY:
                change["equity"] += delta

        net_income = self._earnings(accounts, period)
        operating = (
            net_income
            - change["receivables"]
            - change["inventory"]
            - change["other_current_assets"]
            + change["payables"]
            + change["other_current_liabilities"]
        )
        investing = -change["fixed_assets"]
        financing = change["long_term"] + change["equity"]

        return CashFlowReport(
            start_date=start,
            end_date=end,
            net_income=quantize_money(net_income),
            change_in_receivables=quantize_money(change["receivables"]),
            change_in_inventory=quantize_money(change["inventory"]),
            change_in_other_current_assets=quantize_money(change["other_current_assets"]),
            change_in_payables=quantize_money(change["payables"]),
            change_in_other_current_liabilities=quantize_money(
                change["other_current_liabilities"]
            ),
            operating=quantize_money(operating),
            investing=quantize_money(investing),
            financing=quantize_money(financing),
            net_cash_flow=quantize_money(operating + investing + financing),
            beginning_cash=quantize_money(beginning_cash),
            ending_cash=quantize_money(ending_cash),
        )

    # --- AR Aging ---

    def ar_aging(self, as_of: date) -> ARAgingReport:
        """
        Open invoices bucketed by days since issue.

        0 days or fewer is current; then 1-30, 31-60, 61-90 and
        over 90. Uses each invoice's outstanding balance today.
        """
        rows = self.db.execute(
            select(Invoice, Customer)
            .join(Customer, Invoice.customer_id == Customer.id)
            .where(Invoice.issue_date <= as_of, Invoice.balance > 0)
            .order_by(Customer.name, Invoice.issue_date)
        ).all()

        per_customer: dict[int, CustomerAging] = {}
        totals = AgingBuckets()

        for invoice, customer in rows:
            if customer.id not in per_customer:
                per_customer[customer.id] = CustomerAging(
                    customer_id=customer.id, customer_name=customer.name
                )
            bucket = self._bucket((as_of - invoice.issue_date).days)
            balance = quantize_money(invoice.balance)

            for target in (per_customer[customer.id], totals):
                setattr(target, bucket, getattr(target, bucket) + balance)
                target.total += balance

        return ARAgingReport(
            as_of=as_of,
            customers=list(per_customer.values()),
            totals=totals,
        )

    @staticmethod
    def _bucket(days: int) -> str:
        if days <= 0:
            return "current"
        if days <= 30:
            return "days_1_30"
        if days <= 60:
            return "days_31_60"
        if days <= 90:
            return "days_61_90"
        return "over_90"

    # --- Trial Balance ---

    def trial_balance(self, as_of: date) -> TrialBalanceReport:
        """Debit or credit column per account with a non-zero balance."""
        totals = posted_line_totals(self.db, end=as_of)

        rows = []
        for account in self._accounts():
            debit, credit = totals.get(account.id, (ZERO, ZERO))
            net = quantize_money(debit - credit)
            if net == 0:
                continue
            rows.append(TrialBalanceRow(
                code=account.code,
                name=account.name,
                account_type=account.account_type,
                debit=net if net > 0 else quantize_money(ZERO),
                credit=-net if net < 0 else quantize_money(ZERO),
            ))

        total_debit = _total(row.debit for row in rows)
        total_credit = _total(row.credit for row in rows)
        if total_debit != total_credit:
            logger.error(
                "trial_balance_out_of_balance debit=%s credit=%s",
                total_debit, total_credit,
            )

        return TrialBalanceReport(
            as_of=as_of,
            rows=rows,
            total_debit=total_debit,
            total_credit=total_credit,
            difference=total_debit - total_credit,
        )

    # --- VAT Return ---

    def _purchase_movement(self, start: date, end: date, exclude_ids: list[int]) -> Decimal:
        """
        Net amount charged by posted purchase entries in the period.

        Reversals of purchase entries count against it, the same
        way they net out of the VAT input account.
        """
        original = aliased(JournalEntry)
        total = self.db.execute(
            select(func.coalesce(func.sum(JournalLine.debit - JournalLine.credit), 0))
            .join(JournalEntry, JournalLine.entry_id == JournalEntry.id)
            .outerjoin(original, JournalEntry.reversal_of_id == original.id)
            .where(
                JournalEntry.status.in_(POSTED_STATUSES),
                JournalEntry.entry_date >= start,
                JournalEntry.entry_date <= end,
                or_(
                    JournalEntry.source_module == SourceModule.PURCHASES,
                    original.source_module == SourceModule.PURCHASES,
                ),
                JournalLine.account_id.notin_(exclude_ids),
            )
        ).scalar()
        return quantize_money(total)

    def vat_return(self, start: date, end: date) -> VatReturnReport:
        """
        VAT return for a period.

        Output VAT is the net credit to the VAT output account and
        input VAT the net debit to VAT input. Purchases come from
        the same posted purchase entries as input VAT. Withholding
        VAT is the jurisdiction's share of output VAT withheld at
        source.
        """
        check_date_range(start, end)
        config = get_jurisdiction()

        vat_output = self.chart.get_by_role("VAT_OUTPUT")
        vat_input = self.chart.get_by_role("VAT_INPUT")
        balances = self._balances(start, end)

        output_vat = balances.get(vat_output.id, ZERO)
        input_vat = balances.get(vat_input.id, ZERO)
        taxable_sales = _total(
            balances.get(a.id, ZERO) for a in self._accounts()
            if a.account_type == AccountType.REVENUE
            and a.subtype != AccountSubtype.OTHER_REVENUE.value
        )
        purchases = self._purchase_movement(
            start, end,
            exclude_ids=[
                vat_input.id,
                self.chart.get_by_role("ACCOUNTS_PAYABLE").id,
            ],
        )

        net_vat = output_vat - input_vat
        withholding_vat = percent_of(output_vat, config.withholding_vat_rate)

        return VatReturnReport(
            start_date=start,
            end_date=end,
            jurisdiction=config.country_code,
            tax_authority=config.tax_authority,
            taxable_sales=taxable_sales,
            output_vat=quantize_money(output_vat),
            purchases=purchases,
            input_vat=quantize_money(input_vat),
            net_vat=quantize_money(net_vat),
            withholding_vat=withholding_vat,
            vat_payable=quantize_money(net_vat - withholding_vat),
            due_date=_next_month_day(end, config.vat_due_day),
        )
