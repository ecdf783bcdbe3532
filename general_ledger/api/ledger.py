"""
Chart of accounts endpoints.

The API layer is thin: it handles HTTP concerns (status codes,
response formatting) and delegates all business logic to the
services.
"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from general_ledger.api.errors import http_error
from general_ledger.config import get_settings
from general_ledger.exceptions import LedgerError
from general_ledger.models.base import get_db
from general_ledger.models.enums import AccountType
from general_ledger.schemas.ledger import (
    AccountActivityResponse,
    AccountBalanceResponse,
    LedgerAccountCreate,
    LedgerAccountResponse,
    RecomputeResponse,
    SeedChartResponse,
)
from general_ledger.services.balance_service import BalanceAccumulator
from general_ledger.services.chart_service import ChartOfAccountsService
from general_ledger.services.ledger_service import LedgerService

router = APIRouter(prefix="/ledger", tags=["Ledger"])


@router.post("/accounts", response_model=LedgerAccountResponse, status_code=201)
def create_ledger_account(
    request: LedgerAccountCreate,
    db: Session = Depends(get_db),
):
    """
    Create a new ledger account.

    Every account in the chart of accounts must be created
    before entries can be posted to it.
    """
    service = ChartOfAccountsService(db)
    try:
        account = service.create_account(request)
        db.commit()
        return account
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/accounts", response_model=list[LedgerAccountResponse])
def list_ledger_accounts(
    account_type: AccountType | None = None,
    active_only: bool = False,
    db: Session = Depends(get_db),
):
    return ChartOfAccountsService(db).list_accounts(account_type, active_only)


@router.post("/accounts/seed", response_model=SeedChartResponse, status_code=201)
def seed_chart_of_accounts(db: Session = Depends(get_db)):
    """Provision the standard chart. Existing codes are left alone."""
    created, skipped = ChartOfAccountsService(db).seed_default_chart()
    db.commit()
    return SeedChartResponse(created=created, skipped=skipped)


@router.get("/accounts/{account_id}", response_model=LedgerAccountResponse)
def get_ledger_account(account_id: int, db: Session = Depends(get_db)):
    try:
        return ChartOfAccountsService(db).get_account(account_id)
    except LedgerError as e:
        raise http_error(e)


@router.post(
    "/accounts/{account_id}/deactivate",
    response_model=LedgerAccountResponse,
)
def deactivate_ledger_account(account_id: int, db: Session = Depends(get_db)):
    """Deactivate an account. Its balance must be zero."""
    service = ChartOfAccountsService(db)
    try:
        account = service.deactivate(account_id)
        db.commit()
        return account
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get(
    "/accounts/{account_id}/balance",
    response_model=AccountBalanceResponse,
)
def get_account_balance(
    account_id: int,
    as_of: date | None = None,
    db: Session = Depends(get_db),
):
    """
    Get the balance of a ledger account.

    Without as_of this is the running balance; with it the
    balance is replayed from entries up to that date.
    """
    service = LedgerService(db)
    try:
        balance = service.get_account_balance(account_id, as_of)
        account = service.chart.get_account(account_id)
    except LedgerError as e:
        raise http_error(e)

    return AccountBalanceResponse(
        account_id=account.id,
        account_code=account.code,
        account_type=account.account_type,
        balance=balance,
        currency=get_settings().FUNCTIONAL_CURRENCY,
    )


@router.get(
    "/accounts/{account_id}/activity",
    response_model=list[AccountActivityResponse],
)
def get_account_activity(
    account_id: int,
    start: date | None = None,
    end: date | None = None,
    db: Session = Depends(get_db),
):
    """Posted lines against an account, oldest first, with running balance."""
    try:
        return LedgerService(db).get_account_activity(account_id, start, end)
    except LedgerError as e:
        raise http_error(e)


@router.post(
    "/accounts/{account_id}/recompute",
    response_model=RecomputeResponse,
)
def recompute_account_balance(account_id: int, db: Session = Depends(get_db)):
    """Rebuild an account's stored balance from posted history."""
    try:
        account = ChartOfAccountsService(db).get_account(account_id)
        previous = account.balance
        account = BalanceAccumulator(db).recompute(account.id)
        db.commit()
    except LedgerError as e:
        db.rollback()
        raise http_error(e)

    return RecomputeResponse(
        account_id=account.id,
        account_code=account.code,
        previous_balance=previous,
        balance=account.balance,
    )


@router.get("/verify")
def verify_balances(db: Session = Depends(get_db)):
    """List accounts whose stored balance disagrees with a full replay."""
    mismatches = BalanceAccumulator(db).verify()
    return {
        "consistent": not mismatches,
        "mismatches": [
            {
                "account_id": m.account_id,
                "account_code": m.account_code,
                "stored_balance": str(m.stored_balance),
                "replayed_balance": str(m.replayed_balance),
            }
            for m in mismatches
        ],
    }
