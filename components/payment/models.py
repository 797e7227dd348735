"""Library payment model for the database."""

import enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String

from components.core.clock import utcnow
from components.core.database import Base


class PaymentMode(str, enum.Enum):
    CASH = "Cash"
    CHEQUE = "Cheque"
    BANK_TRANSFER = "Bank Transfer"


class Payment(Base):
    """Payment model for storing one settlement against a penalty."""
    __tablename__ = "library_payments"

    id = Column(Integer, primary_key=True, index=True)
    issue_id = Column(Integer, ForeignKey("book_issues.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    amount_paid = Column(Numeric(10, 2), nullable=False)
    payment_mode = Column(String(20), nullable=False)
    transaction_id = Column(String(100), unique=True, nullable=True)
    receive_by = Column(String(100), nullable=False)
    created_by = Column(String(100), nullable=False, default="system")
    created_on = Column(DateTime, nullable=False, default=utcnow)
