"""Stock history model for the database."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from components.core.clock import utcnow
from components.core.database import Base


class StockHistory(Base):
    """One manual inventory adjustment, not tied to a loan."""
    __tablename__ = "book_stock_history"

    id = Column(Integer, primary_key=True, index=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False, index=True)
    copies_added = Column(Integer, nullable=False)  # signed delta
    remarks = Column(String(255), nullable=False, default="")
    created_by = Column(String(100), nullable=False, default="system")
    created_on = Column(DateTime, nullable=False, default=utcnow)
    modified_by = Column(String(100), nullable=True)
    modified_on = Column(DateTime, nullable=True)

    # Relationships
    book = relationship("Book", back_populates="stock_history")
