"""Report endpoints for the API."""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.clock import Clock, get_clock
from components.core.init_db import get_db
from components.report.repository import ReportRepository
from components.report import schemas
from restapi.errors import ERROR_RESPONSES

router = APIRouter(
    prefix="/reports",
    tags=["reports"],
    responses=ERROR_RESPONSES,
)


@router.get("/dashboard", response_model=schemas.DashboardSummary)
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Get librarian dashboard counters.

    Returns:
    - Number of titles and titles with a copy on the shelf
    - Total and available copies
    - Number of students
    - Open and overdue loans
    - Unpaid penalties and the outstanding fine balance
    """
    repo = ReportRepository(db, clock)
    return await repo.get_dashboard()


@router.get("/monthly-issues", response_model=schemas.YearIssues)
async def get_monthly_issues(
    year: Optional[int] = Query(None, ge=1900, le=9998, description="Year to analyze (defaults to current year)"),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Get circulation for a year, grouped by month.

    Returns monthly summaries with issued books, returned books, late returns
    and the total late days of those returns.
    """
    repo = ReportRepository(db, clock)
    return await repo.get_year_issues(year or clock().year)
