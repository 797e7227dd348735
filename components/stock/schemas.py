"""Pydantic schemas for stock adjustment data validation."""

from datetime import datetime
from typing import Optional
from pydantic import Field

from components.core.schemas import RequestModel, WireModel


class StockAdjustmentCreate(RequestModel):
    """Schema for a manual stock adjustment; negative values write copies off."""
    book_id: int
    copies_added: int
    remarks: str = Field("", max_length=255)
    created_by: Optional[str] = Field(None, max_length=100)


class StockRemarksUpdate(RequestModel):
    """Only the remarks of a history row may be corrected."""
    remarks: str = Field("", max_length=255)
    modified_by: Optional[str] = Field(None, max_length=100)


class StockHistory(WireModel):
    """Schema for stock history response."""
    book_stock_history_id: int
    book_id: int
    book_name: Optional[str] = None
    copies_added: int
    remarks: str
    created_by: str
    created_on: datetime
    modified_by: Optional[str] = None
    modified_on: Optional[datetime] = None


class StockAdjustmentResult(WireModel):
    """Schema for the outcome of an adjustment."""
    message: str
    history: StockHistory
    total_copies: int
    available_copies: int
