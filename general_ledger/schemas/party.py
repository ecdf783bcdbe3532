"""
Pydantic schemas for customers, vendors and employees.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


# --- Customer Schemas ---

class CustomerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: str | None = Field(default=None, min_length=5, max_length=255)
    tax_id: str | None = Field(default=None, max_length=50)


class CustomerResponse(BaseModel):
    id: int
    external_id: uuid.UUID
    name: str
    email: str | None
    tax_id: str | None
    balance: Decimal
    is_active: bool
    last_transaction_date: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


# --- Vendor Schemas ---

class VendorCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: str | None = Field(default=None, min_length=5, max_length=255)
    tax_id: str | None = Field(default=None, max_length=50)


class VendorResponse(BaseModel):
    id: int
    external_id: uuid.UUID
    name: str
    email: str | None
    tax_id: str | None
    balance: Decimal
    is_active: bool
    last_transaction_date: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


# --- Employee Schemas ---

class EmployeeCreate(BaseModel):
    employee_number: str = Field(min_length=1, max_length=30)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str | None = Field(default=None, min_length=5, max_length=255)
    salary: Decimal = Field(gt=0)


class EmployeeResponse(BaseModel):
    id: int
    employee_number: str
    first_name: str
    last_name: str
    email: str | None
    salary: Decimal
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
