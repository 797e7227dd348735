"""Penalty model for the database."""

import enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from components.core.clock import utcnow
from components.core.database import Base


class PenaltyStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class Penalty(Base):
    """Penalty model storing the fine for one late return."""
    __tablename__ = "penalties"

    id = Column(Integer, primary_key=True, index=True)
    issue_id = Column(Integer, ForeignKey("book_issues.id"), unique=True, nullable=False)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=PenaltyStatus.UNPAID.value)
    remarks = Column(String(255), nullable=True)
    created_by = Column(String(100), nullable=False, default="system")
    created_on = Column(DateTime, nullable=False, default=utcnow)
    modified_by = Column(String(100), nullable=True)
    modified_on = Column(DateTime, nullable=True)

    # Relationships
    loan = relationship("Loan", back_populates="penalty")
