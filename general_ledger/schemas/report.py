"""
Report shapes returned by the reporting engine.

Plain structured data: rows of labels and amounts. Rendering
to CSV, PDF or spreadsheets is left to whoever consumes them.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from general_ledger.models.enums import AccountType


class ReportLine(BaseModel):
    code: str
    name: str
    amount: Decimal


# --- Profit & Loss ---

class ProfitAndLossReport(BaseModel):
    start_date: date
    end_date: date
    revenue: Decimal
    revenue_lines: list[ReportLine]
    other_income: Decimal
    cost_of_sales: Decimal
    gross_profit: Decimal
    operating_expenses: Decimal
    operating_expense_lines: list[ReportLine]
    operating_income: Decimal
    other_expenses: Decimal
    net_income: Decimal
    # Percentages of revenue; 0 when there is no revenue
    gross_margin: Decimal
    operating_margin: Decimal
    net_margin: Decimal


# --- Balance Sheet ---

class AssetSection(BaseModel):
    current: Decimal
    fixed: Decimal
    total: Decimal
    lines: list[ReportLine]


class LiabilitySection(BaseModel):
    current: Decimal
    long_term: Decimal
    total: Decimal
    lines: list[ReportLine]


class EquitySection(BaseModel):
    accounts: Decimal
    # Revenue less expenses not yet closed to retained earnings
    current_earnings: Decimal
    total: Decimal
    lines: list[ReportLine]


class BalanceSheetReport(BaseModel):
    as_of: date
    assets: AssetSection
    liabilities: LiabilitySection
    equity: EquitySection
    is_balanced: bool


# --- Cash Flow ---

class CashFlowReport(BaseModel):
    start_date: date
    end_date: date
    net_income: Decimal
    change_in_receivables: Decimal
    change_in_inventory: Decimal
    change_in_other_current_assets: Decimal
    change_in_payables: Decimal
    change_in_other_current_liabilities: Decimal
    operating: Decimal
    investing: Decimal
    financing: Decimal
    net_cash_flow: Decimal
    beginning_cash: Decimal
    ending_cash: Decimal


# --- AR Aging ---

class AgingBuckets(BaseModel):
    current: Decimal = Decimal("0")
    days_1_30: Decimal = Decimal("0")
    days_31_60: Decimal = Decimal("0")
    days_61_90: Decimal = Decimal("0")
    over_90: Decimal = Decimal("0")
    total: Decimal = Decimal("0")


class CustomerAging(AgingBuckets):
    customer_id: int
    customer_name: str


class ARAgingReport(BaseModel):
    as_of: date
    customers: list[CustomerAging]
    totals: AgingBuckets


# --- Trial Balance ---

class TrialBalanceRow(BaseModel):
    code: str
    name: str
    account_type: AccountType
    debit: Decimal
    credit: Decimal


class TrialBalanceReport(BaseModel):
    as_of: date
    rows: list[TrialBalanceRow]
    total_debit: Decimal
    total_credit: Decimal
    difference: Decimal


# --- VAT Return ---

class VatReturnReport(BaseModel):
    start_date: date
    end_date: date
    jurisdiction: str
    tax_authority: str
    taxable_sales: Decimal
    output_vat: Decimal
    purchases: Decimal
    input_vat: Decimal
    net_vat: Decimal
    withholding_vat: Decimal
    vat_payable: Decimal
    due_date: date
