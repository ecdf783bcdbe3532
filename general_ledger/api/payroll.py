"""
Payroll and purchase endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from general_ledger.api.errors import http_error
from general_ledger.exceptions import LedgerError
from general_ledger.models.base import get_db
from general_ledger.schemas.payroll import (
    PayrollRunCreate,
    PayrollRunResponse,
    PayrollWorkflowResponse,
)
from general_ledger.schemas.purchase import (
    PurchaseCreate,
    PurchaseResponse,
    PurchaseWorkflowResponse,
)
from general_ledger.services.payroll_service import PayrollService
from general_ledger.services.purchase_service import PurchaseService

router = APIRouter(tags=["Payroll & Purchases"])


# --- Payroll ---

@router.post("/payroll/runs", response_model=PayrollWorkflowResponse, status_code=201)
def process_payroll_run(request: PayrollRunCreate, db: Session = Depends(get_db)):
    """Pay employees for a period and post the payroll journal."""
    service = PayrollService(db)
    try:
        result = service.process_payroll_run(request)
        db.commit()
        return PayrollWorkflowResponse(
            payroll_run=result.payroll_run,
            journal_entry=result.journal_entry,
            account_balances=result.account_balances,
        )
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/payroll/runs", response_model=list[PayrollRunResponse])
def list_payroll_runs(db: Session = Depends(get_db)):
    return PayrollService(db).list_payroll_runs()


@router.get("/payroll/runs/{run_id}", response_model=PayrollRunResponse)
def get_payroll_run(run_id: int, db: Session = Depends(get_db)):
    try:
        return PayrollService(db).get_payroll_run(run_id)
    except LedgerError as e:
        raise http_error(e)


# --- Purchases ---

@router.post("/purchases", response_model=PurchaseWorkflowResponse, status_code=201)
def create_purchase(request: PurchaseCreate, db: Session = Depends(get_db)):
    """Record a vendor bill and post it to payables and VAT input."""
    service = PurchaseService(db)
    try:
        result = service.create_purchase(request)
        db.commit()
        return PurchaseWorkflowResponse(
            purchase=result.purchase,
            journal_entry=result.journal_entry,
            vendor_balance=result.vendor_balance,
            account_balances=result.account_balances,
        )
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/purchases", response_model=list[PurchaseResponse])
def list_purchases(vendor_id: int | None = None, db: Session = Depends(get_db)):
    return PurchaseService(db).list_purchases(vendor_id)


@router.get("/purchases/{purchase_id}", response_model=PurchaseResponse)
def get_purchase(purchase_id: int, db: Session = Depends(get_db)):
    try:
        return PurchaseService(db).get_purchase(purchase_id)
    except LedgerError as e:
        raise http_error(e)
