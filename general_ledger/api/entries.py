"""
Journal entry endpoints.
"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from general_ledger.api.errors import http_error
from general_ledger.exceptions import LedgerError
from general_ledger.models.base import get_db
from general_ledger.models.enums import EntryStatus, SourceModule
from general_ledger.schemas.ledger import (
    JournalEntryCreate,
    JournalEntryResponse,
    OpeningBalancesRequest,
    ReverseEntryRequest,
)
from general_ledger.services.ledger_service import LedgerService

router = APIRouter(prefix="/ledger", tags=["Journal Entries"])


@router.post("/entries", response_model=JournalEntryResponse, status_code=201)
def post_journal_entry(
    request: JournalEntryCreate,
    db: Session = Depends(get_db),
):
    """
    Post a balanced journal entry.

    Total debits must equal total credits and every account
    must exist and be active. Nothing is written otherwise.
    """
    service = LedgerService(db)
    try:
        entry = service.post_direct(request)
        db.commit()
        return entry
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.post("/entries/drafts", response_model=JournalEntryResponse, status_code=201)
def create_draft_entry(
    request: JournalEntryCreate,
    db: Session = Depends(get_db),
):
    """Save an entry as a draft. Drafts do not affect balances."""
    service = LedgerService(db)
    try:
        entry = service.create_draft(request)
        db.commit()
        return entry
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.post("/entries/{entry_id}/post", response_model=JournalEntryResponse)
def post_draft_entry(entry_id: int, db: Session = Depends(get_db)):
    service = LedgerService(db)
    try:
        entry = service.post(entry_id)
        db.commit()
        return entry
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.post(
    "/entries/{entry_id}/reverse",
    response_model=JournalEntryResponse,
    status_code=201,
)
def reverse_journal_entry(
    entry_id: int,
    request: ReverseEntryRequest | None = None,
    db: Session = Depends(get_db),
):
    """Reverse a posted entry. Returns the new reversing entry."""
    request = request or ReverseEntryRequest()
    service = LedgerService(db)
    try:
        reversal = service.reverse(
            entry_id,
            reversal_date=request.reversal_date,
            created_by=request.created_by,
        )
        db.commit()
        return reversal
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/entries/{entry_id}", response_model=JournalEntryResponse)
def get_journal_entry(entry_id: int, db: Session = Depends(get_db)):
    try:
        return LedgerService(db).get_entry(entry_id)
    except LedgerError as e:
        raise http_error(e)


@router.get("/entries", response_model=list[JournalEntryResponse])
def list_journal_entries(
    start: date | None = None,
    end: date | None = None,
    status: EntryStatus | None = None,
    source_module: SourceModule | None = None,
    source_id: int | None = None,
    db: Session = Depends(get_db),
):
    return LedgerService(db).list_entries(
        start=start,
        end=end,
        status=status,
        source_module=source_module,
        source_id=source_id,
    )


@router.post(
    "/opening-balances",
    response_model=JournalEntryResponse,
    status_code=201,
)
def post_opening_balances(
    request: OpeningBalancesRequest,
    db: Session = Depends(get_db),
):
    """Seed account balances through a single opening entry."""
    service = LedgerService(db)
    try:
        entry = service.post_opening_balances(
            request.entry_date,
            request.balances,
            created_by=request.created_by,
        )
        db.commit()
        return entry
    except LedgerError as e:
        db.rollback()
        raise http_error(e)
