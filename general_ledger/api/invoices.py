"""
Invoice, payment and estimate endpoints.

Each workflow call is committed as one unit or rolled back
as one unit: the record, its journal entry and the party
balance change together.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from general_ledger.api.errors import http_error
from general_ledger.exceptions import LedgerError
from general_ledger.models.base import get_db
from general_ledger.models.enums import EstimateStatus, InvoiceStatus
from general_ledger.schemas.invoice import (
    ConvertEstimateRequest,
    EstimateConversionResponse,
    EstimateCreate,
    EstimateResponse,
    InvoiceCreate,
    InvoiceResponse,
    InvoiceWorkflowResponse,
    PaymentCreate,
    PaymentResponse,
    PaymentWorkflowResponse,
)
from general_ledger.services.estimate_service import EstimateService
from general_ledger.services.invoice_service import InvoiceResult, InvoiceService
from general_ledger.services.payment_service import PaymentService

router = APIRouter(tags=["Receivables"])


def _invoice_response(result: InvoiceResult) -> InvoiceWorkflowResponse:
    return InvoiceWorkflowResponse(
        invoice=result.invoice,
        journal_entry=result.journal_entry,
        customer_balance=result.customer_balance,
        account_balances=result.account_balances,
    )


# --- Invoices ---

@router.post("/invoices", response_model=InvoiceWorkflowResponse, status_code=201)
def create_invoice(request: InvoiceCreate, db: Session = Depends(get_db)):
    """Raise an invoice and post it to receivables, revenue and VAT."""
    service = InvoiceService(db)
    try:
        result = service.create_invoice(request)
        db.commit()
        return _invoice_response(result)
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/invoices", response_model=list[InvoiceResponse])
def list_invoices(
    customer_id: int | None = None,
    status: InvoiceStatus | None = None,
    db: Session = Depends(get_db),
):
    return InvoiceService(db).list_invoices(customer_id, status)


@router.get("/invoices/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(invoice_id: int, db: Session = Depends(get_db)):
    try:
        return InvoiceService(db).get_invoice(invoice_id)
    except LedgerError as e:
        raise http_error(e)


@router.post("/invoices/{invoice_id}/send", response_model=InvoiceResponse)
def send_invoice(invoice_id: int, db: Session = Depends(get_db)):
    service = InvoiceService(db)
    try:
        invoice = service.send_invoice(invoice_id)
        db.commit()
        return invoice
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


# --- Payments ---

@router.post("/payments", response_model=PaymentWorkflowResponse, status_code=201)
def record_payment(request: PaymentCreate, db: Session = Depends(get_db)):
    """Record a customer payment allocated across their invoices."""
    service = PaymentService(db)
    try:
        result = service.record_payment(request)
        db.commit()
        return PaymentWorkflowResponse(
            payment=result.payment,
            invoices=result.invoices,
            journal_entry=result.journal_entry,
            customer_balance=result.customer_balance,
            account_balances=result.account_balances,
        )
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/payments", response_model=list[PaymentResponse])
def list_payments(customer_id: int | None = None, db: Session = Depends(get_db)):
    return PaymentService(db).list_payments(customer_id)


@router.get("/payments/{payment_id}", response_model=PaymentResponse)
def get_payment(payment_id: int, db: Session = Depends(get_db)):
    try:
        return PaymentService(db).get_payment(payment_id)
    except LedgerError as e:
        raise http_error(e)


# --- Estimates ---

@router.post("/estimates", response_model=EstimateResponse, status_code=201)
def create_estimate(request: EstimateCreate, db: Session = Depends(get_db)):
    service = EstimateService(db)
    try:
        estimate = service.create_estimate(request)
        db.commit()
        return estimate
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/estimates", response_model=list[EstimateResponse])
def list_estimates(
    customer_id: int | None = None,
    status: EstimateStatus | None = None,
    db: Session = Depends(get_db),
):
    return EstimateService(db).list_estimates(customer_id, status)


@router.get("/estimates/{estimate_id}", response_model=EstimateResponse)
def get_estimate(estimate_id: int, db: Session = Depends(get_db)):
    try:
        return EstimateService(db).get_estimate(estimate_id)
    except LedgerError as e:
        raise http_error(e)


@router.post("/estimates/{estimate_id}/send", response_model=EstimateResponse)
def send_estimate(estimate_id: int, db: Session = Depends(get_db)):
    service = EstimateService(db)
    try:
        estimate = service.send_estimate(estimate_id)
        db.commit()
        return estimate
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.post("/estimates/{estimate_id}/accept", response_model=EstimateResponse)
def accept_estimate(estimate_id: int, db: Session = Depends(get_db)):
    service = EstimateService(db)
    try:
        estimate = service.accept_estimate(estimate_id)
        db.commit()
        return estimate
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.post("/estimates/{estimate_id}/decline", response_model=EstimateResponse)
def decline_estimate(estimate_id: int, db: Session = Depends(get_db)):
    service = EstimateService(db)
    try:
        estimate = service.decline_estimate(estimate_id)
        db.commit()
        return estimate
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.post(
    "/estimates/{estimate_id}/convert",
    response_model=EstimateConversionResponse,
    status_code=201,
)
def convert_estimate(
    estimate_id: int,
    request: ConvertEstimateRequest | None = None,
    db: Session = Depends(get_db),
):
    """Turn an accepted estimate into an invoice."""
    request = request or ConvertEstimateRequest()
    service = EstimateService(db)
    try:
        conversion = service.convert_to_invoice(
            estimate_id,
            issue_date=request.issue_date,
            due_date=request.due_date,
        )
        db.commit()
        return EstimateConversionResponse(
            estimate=conversion.estimate,
            invoice=_invoice_response(conversion.invoice),
        )
    except LedgerError as e:
        db.rollback()
        raise http_error(e)
