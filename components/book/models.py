"""Book model for the database."""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from components.core.clock import utcnow
from components.core.database import Base


class Book(Base):
    """Book model representing a catalog title and its copy counters."""
    __tablename__ = "books"
    __table_args__ = (
        CheckConstraint("available_copies >= 0", name="ck_books_available_non_negative"),
        CheckConstraint("available_copies <= total_copies", name="ck_books_available_le_total"),
    )

    id = Column(Integer, primary_key=True, index=True)
    isbn_number = Column(String(20), unique=True, nullable=False)
    title = Column(String(255), nullable=False, index=True)
    author = Column(String(255), nullable=False)
    course_id = Column(Integer, nullable=True)
    subject_id = Column(Integer, nullable=True)
    publication_id = Column(Integer, nullable=True)
    total_copies = Column(Integer, nullable=False, default=0)
    available_copies = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(String(100), nullable=False, default="system")
    created_on = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    loans = relationship("Loan", back_populates="book")
    stock_history = relationship("StockHistory", back_populates="book")
