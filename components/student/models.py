"""Student model for the database."""

from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship

from components.core.database import Base


class Student(Base):
    """Student model representing a borrower in the system."""
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    course_id = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationship with Loans
    loans = relationship("Loan", back_populates="student", foreign_keys="Loan.student_id")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
