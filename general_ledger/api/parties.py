"""
Customer, vendor and employee endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from general_ledger.api.errors import http_error
from general_ledger.exceptions import LedgerError
from general_ledger.models.base import get_db
from general_ledger.schemas.party import (
    CustomerCreate,
    CustomerResponse,
    EmployeeCreate,
    EmployeeResponse,
    VendorCreate,
    VendorResponse,
)
from general_ledger.services.party_service import PartyService

router = APIRouter(tags=["Parties"])


# --- Customers ---

@router.post("/customers", response_model=CustomerResponse, status_code=201)
def create_customer(request: CustomerCreate, db: Session = Depends(get_db)):
    service = PartyService(db)
    try:
        customer = service.create_customer(request)
        db.commit()
        return customer
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/customers", response_model=list[CustomerResponse])
def list_customers(active_only: bool = False, db: Session = Depends(get_db)):
    return PartyService(db).list_customers(active_only)


@router.get("/customers/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    try:
        return PartyService(db).get_customer(customer_id)
    except LedgerError as e:
        raise http_error(e)


# --- Vendors ---

@router.post("/vendors", response_model=VendorResponse, status_code=201)
def create_vendor(request: VendorCreate, db: Session = Depends(get_db)):
    service = PartyService(db)
    try:
        vendor = service.create_vendor(request)
        db.commit()
        return vendor
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/vendors", response_model=list[VendorResponse])
def list_vendors(active_only: bool = False, db: Session = Depends(get_db)):
    return PartyService(db).list_vendors(active_only)


@router.get("/vendors/{vendor_id}", response_model=VendorResponse)
def get_vendor(vendor_id: int, db: Session = Depends(get_db)):
    try:
        return PartyService(db).get_vendor(vendor_id)
    except LedgerError as e:
        raise http_error(e)


# --- Employees ---

@router.post("/employees", response_model=EmployeeResponse, status_code=201)
def create_employee(request: EmployeeCreate, db: Session = Depends(get_db)):
    service = PartyService(db)
    try:
        employee = service.create_employee(request)
        db.commit()
        return employee
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/employees", response_model=list[EmployeeResponse])
def list_employees(active_only: bool = False, db: Session = Depends(get_db)):
    return PartyService(db).list_employees(active_only)


@router.get("/employees/{employee_id}", response_model=EmployeeResponse)
def get_employee(employee_id: int, db: Session = Depends(get_db)):
    try:
        return PartyService(db).get_employee(employee_id)
    except LedgerError as e:
        raise http_error(e)


@router.post("/employees/{employee_id}/deactivate", response_model=EmployeeResponse)
def deactivate_employee(employee_id: int, db: Session = Depends(get_db)):
    service = PartyService(db)
    try:
        employee = service.deactivate_employee(employee_id)
        db.commit()
        return employee
    except LedgerError as e:
        db.rollback()
        raise http_error(e)
