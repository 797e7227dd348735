"""Loan (book issue) model for the database."""

import enum
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from components.core.clock import utcnow
from components.core.database import Base


class LoanStatus(str, enum.Enum):
    ISSUED = "issued"
    RENEWED = "renewed"
    RETURNED = "returned"


OPEN_STATUSES = (LoanStatus.ISSUED.value, LoanStatus.RENEWED.value)


class Loan(Base):
    """Loan model representing one student borrowing one copy of a book."""
    __tablename__ = "book_issues"

    id = Column(Integer, primary_key=True, index=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    issue_date = Column(DateTime, nullable=False)
    due_date = Column(DateTime, nullable=False)
    return_date = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default=LoanStatus.ISSUED.value, index=True)
    remarks = Column(String(255), nullable=True)
    is_renewed = Column(Boolean, nullable=False, default=False)
    created_by = Column(String(100), nullable=False, default="system")
    created_on = Column(DateTime, nullable=False, default=utcnow)
    modified_by = Column(String(100), nullable=True)
    modified_on = Column(DateTime, nullable=True)

    # Relationships
    book = relationship("Book", back_populates="loans")
    student = relationship("Student", back_populates="loans")
    penalty = relationship("Penalty", back_populates="loan", uselist=False)

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    def is_overdue(self, now: datetime) -> bool:
        """Overdue is derived, never stored: open and strictly past the due date."""
        return self.is_open and now > self.due_date
