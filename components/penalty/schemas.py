"""Pydantic schemas for penalty and payment data validation."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import Field

from components.core.schemas import RequestModel, WireModel
from components.payment.models import PaymentMode


class PenaltyCreate(RequestModel):
    """Schema for recording a fine against a late-returned loan."""
    issue_id: int
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    remarks: Optional[str] = Field(None, max_length=255)
    created_by: str = Field(min_length=1, max_length=100)


class Penalty(WireModel):
    """Schema for penalty response with its settlement progress."""
    penalty_id: int
    issue_id: int
    student_id: int
    student_name: Optional[str] = None
    book_id: int
    book_title: Optional[str] = None
    amount: float
    total_paid: float
    remaining: float
    penalty_status: str
    late_days: int
    due_date: datetime
    return_date: Optional[datetime] = None
    remarks: Optional[str] = None
    created_by: str
    created_on: datetime
    modified_by: Optional[str] = None
    modified_on: Optional[datetime] = None


class PaymentCreate(RequestModel):
    """Schema for one payment against a penalty."""
    issue_id: int
    student_id: int
    amount_paid: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    payment_mode: PaymentMode
    transaction_id: Optional[str] = Field(None, max_length=100)
    receive_by: Optional[str] = Field(None, max_length=100)
    created_by: Optional[str] = Field(None, max_length=100)


class Payment(WireModel):
    """Schema for payment response."""
    payment_id: int = Field(validation_alias="id", serialization_alias="PaymentId")
    issue_id: int
    student_id: int
    amount_paid: float
    payment_mode: str
    transaction_id: Optional[str] = None
    receive_by: str
    created_by: str
    created_on: datetime


class PaymentResult(WireModel):
    """Schema for the outcome of a payment."""
    message: str
    payment: Payment
    total_paid: float
    remaining: float
    penalty_status: str
