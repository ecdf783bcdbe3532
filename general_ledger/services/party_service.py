"""
Party service: customers, vendors and employees.

Running balances on customers and vendors are never written
here; only the invoice, payment and purchase workflows change
them, under the row lock taken by lock_customer/lock_vendor.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from general_ledger.exceptions import NotFoundError, ValidationError
from general_ledger.models.party import Customer, Employee, Vendor
from general_ledger.schemas.party import CustomerCreate, EmployeeCreate, VendorCreate

logger = logging.getLogger(__name__)


class PartyService:

    def __init__(self, db: Session):
        self.db = db

    def _lock(self, model, party_id: int, kind: str):
        self.db.flush()
        party = self.db.execute(
            select(model)
            .where(model.id == party_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if not party:
            raise NotFoundError(kind, party_id)
        return party

    def _check_unique_email(self, model, email: str | None, kind: str) -> None:
        if not email:
            return
        existing = self.db.execute(
            select(model).where(model.email == email)
        ).scalar_one_or_none()
        if existing:
            raise ValidationError(f"{kind} with email '{email}' already exists")

    # --- Customers ---

    def create_customer(self, request: CustomerCreate) -> Customer:
        self._check_unique_email(Customer, request.email, "Customer")
        customer = Customer(
            name=request.name,
            email=request.email,
            tax_id=request.tax_id,
        )
        self.db.add(customer)
        self.db.flush()
        logger.info("customer_created id=%s", customer.id)
        return customer

    def get_customer(self, customer_id: int) -> Customer:
        customer = self.db.get(Customer, customer_id)
        if not customer:
            raise NotFoundError("Customer", customer_id)
        return customer

    def lock_customer(self, customer_id: int) -> Customer:
        return self._lock(Customer, customer_id, "Customer")

    def list_customers(self, active_only: bool = False) -> list[Customer]:
        query = select(Customer).order_by(Customer.name)
        if active_only:
            query = query.where(Customer.is_active.is_(True))
        return list(self.db.execute(query).scalars().all())

    # --- Vendors ---

    def create_vendor(self, request: VendorCreate) -> Vendor:
        self._check_unique_email(Vendor, request.email, "Vendor")
        vendor = Vendor(
            name=request.name,
            email=request.email,
            tax_id=request.tax_id,
        )
        self.db.add(vendor)
        self.db.flush()
        logger.info("vendor_created id=%s", vendor.id)
        return vendor

    def get_vendor(self, vendor_id: int) -> Vendor:
        vendor = self.db.get(Vendor, vendor_id)
        if not vendor:
            raise NotFoundError("Vendor", vendor_id)
        return vendor

    def lock_vendor(self, vendor_id: int) -> Vendor:
        return self._lock(Vendor, vendor_id, "Vendor")

    def list_vendors(self, active_only: bool = False) -> list[Vendor]:
        query = select(Vendor).order_by(Vendor.name)
        if active_only:
            query = query.where(Vendor.is_active.is_(True))
        return list(self.db.execute(query).scalars().all())

    # --- Employees ---

    def create_employee(self, request: EmployeeCreate) -> Employee:
        existing = self.db.execute(
            select(Employee).where(
                Employee.employee_number == request.employee_number
            )
        ).scalar_one_or_none()
        if existing:
            raise ValidationError(
                f"Employee number '{request.employee_number}' already exists"
            )

        employee = Employee(
            employee_number=request.employee_number,
            first_name=request.first_name,
            last_name=request.last_name,
            email=request.email,
            salary=request.salary,
        )
        self.db.add(employee)
        self.db.flush()
        logger.info("employee_created id=%s", employee.id)
        return employee

    def get_employee(self, employee_id: int) -> Employee:
        employee = self.db.get(Employee, employee_id)
        if not employee:
            raise NotFoundError("Employee", employee_id)
        return employee

    def list_employees(self, active_only: bool = False) -> list[Employee]:
        query = select(Employee).order_by(Employee.employee_number)
        if active_only:
            query = query.where(Employee.is_active.is_(True))
        return list(self.db.execute(query).scalars().all())

    def deactivate_employee(self, employee_id: int) -> Employee:
        """Exclude an employee from future payroll runs."""
        employee = self.get_employee(employee_id)
        employee.is_active = False
        self.db.flush()
        return employee
