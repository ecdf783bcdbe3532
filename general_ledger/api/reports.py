"""
Financial report endpoints.

All read-only. Reports are computed from posted journal
lines on every request.
"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from general_ledger.api.errors import http_error
from general_ledger.exceptions import LedgerError
from general_ledger.models.base import get_db
from general_ledger.schemas.report import (
    ARAgingReport,
    BalanceSheetReport,
    CashFlowReport,
    ProfitAndLossReport,
    TrialBalanceReport,
    VatReturnReport,
)
from general_ledger.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/profit-and-loss", response_model=ProfitAndLossReport)
def profit_and_loss(start: date, end: date, db: Session = Depends(get_db)):
    try:
        return ReportService(db).profit_and_loss(start, end)
    except LedgerError as e:
        raise http_error(e)


@router.get("/balance-sheet", response_model=BalanceSheetReport)
def balance_sheet(as_of: date, db: Session = Depends(get_db)):
    return ReportService(db).balance_sheet(as_of)


@router.get("/cash-flow", response_model=CashFlowReport)
def cash_flow(start: date, end: date, db: Session = Depends(get_db)):
    try:
        return ReportService(db).cash_flow(start, end)
    except LedgerError as e:
        raise http_error(e)


@router.get("/ar-aging", response_model=ARAgingReport)
def ar_aging(as_of: date, db: Session = Depends(get_db)):
    return ReportService(db).ar_aging(as_of)


@router.get("/trial-balance", response_model=TrialBalanceReport)
def trial_balance(as_of: date, db: Session = Depends(get_db)):
    return ReportService(db).trial_balance(as_of)


@router.get("/vat-return", response_model=VatReturnReport)
def vat_return(start: date, end: date, db: Session = Depends(get_db)):
    try:
        return ReportService(db).vat_return(start, end)
    except LedgerError as e:
        raise http_error(e)
