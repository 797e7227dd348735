"""Pydantic schemas for loan data validation."""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from components.core.schemas import RequestModel, WireModel


class LoanCreate(RequestModel):
    """Schema for issuing a book."""
    book_id: int
    student_id: int
    days: int = Field(gt=0, le=365)
    remarks: Optional[str] = Field(None, max_length=255)
    created_by: Optional[str] = None


class LoanUpdate(RequestModel):
    """Schema for editing an open loan in place."""
    book_id: int
    student_id: int
    days: int = Field(gt=0, le=365)
    remarks: Optional[str] = Field(None, max_length=255)
    modified_by: Optional[str] = None


class LoanAction(BaseModel):
    """Schema for renew/return requests, keyed in camelCase."""
    status: Optional[Literal["returned", "renewed"]] = None
    renew_days: Optional[int] = Field(None, gt=0, le=365)
    remarks: Optional[str] = Field(None, max_length=255)
    fine_amount: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    modified_by: Optional[str] = Field(None, alias="ModifiedBy")

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "forbid"


class Loan(WireModel):
    """Schema for loan response."""
    issue_id: int
    book_id: int
    book_title: Optional[str] = None
    student_id: int
    student_name: Optional[str] = None
    issue_date: datetime
    due_date: datetime
    return_date: Optional[datetime] = None
    status: str
    is_renewed: bool
    is_overdue: bool
    overdue_days: int
    late_days: int
    remarks: Optional[str] = None
    created_by: str
    created_on: datetime
    modified_by: Optional[str] = None
    modified_on: Optional[datetime] = None


class LoanActionResult(WireModel):
    """Schema for the outcome of a renew/return request."""
    message: str
    loan: Loan
    new_due_date: Optional[datetime] = None
    penalty_id: Optional[int] = None
