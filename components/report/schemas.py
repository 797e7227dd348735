"""Pydantic schemas for report data."""

from typing import List
from components.core.schemas import WireModel


class DashboardSummary(WireModel):
    """Schema for dashboard counters."""
    total_books: int
    available_books: int
    total_copies: int
    available_copies: int
    total_students: int
    open_loans: int
    overdue_loans: int
    unpaid_penalties: int
    outstanding_fines: float


class MonthIssues(WireModel):
    """Schema for one month of circulation."""
    month: int
    issued: int
    returned: int
    late_returns: int
    late_days: int


class YearIssues(WireModel):
    """Schema for yearly circulation summary."""
    year: int
    total_issued: int
    total_returned: int
    total_late_returns: int
    monthly_summaries: List[MonthIssues]
