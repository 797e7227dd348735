"""Repository for dashboard and circulation reports."""

from datetime import datetime
from decimal import Decimal

import pandas as pd
from sqlalchemy import func, or_, select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from components.book.models import Book
from components.core.clock import Clock, utcnow
from components.loan.models import Loan, LoanStatus, OPEN_STATUSES
from components.loan.utils import late_days
from components.payment.models import Payment
from components.penalty.models import Penalty, PenaltyStatus
from components.report import schemas
from components.student.models import Student


class ReportRepository:
    """Repository for report operations."""

    def __init__(self, session: AsyncSession, clock: Clock = utcnow):
        """Initialize repository with database session and time source."""
        self.session = session
        self.clock = clock

    async def _scalar(self, query) -> int:
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def get_dashboard(self) -> schemas.DashboardSummary:
        """
        Get the counters shown on the librarian dashboard.

        Overdue loans are counted from the due dates at request time; no
        overdue status is stored.
        """
        now = self.clock()
        total_books = await self._scalar(select(func.count(Book.id)))
        available_books = await self._scalar(
            select(func.count(Book.id)).where(Book.available_copies > 0)
        )
        total_copies = await self._scalar(select(func.coalesce(func.sum(Book.total_copies), 0)))
        available_copies = await self._scalar(
            select(func.coalesce(func.sum(Book.available_copies), 0))
        )
        total_students = await self._scalar(select(func.count(Student.id)))
        open_loans = await self._scalar(
            select(func.count(Loan.id)).where(Loan.status.in_(OPEN_STATUSES))
        )
        overdue_loans = await self._scalar(
            select(func.count(Loan.id)).where(Loan.status.in_(OPEN_STATUSES), Loan.due_date < now)
        )
        unpaid_penalties = await self._scalar(
            select(func.count(Penalty.id)).where(Penalty.status == PenaltyStatus.UNPAID.value)
        )
        fines = await self._scalar(select(func.coalesce(func.sum(Penalty.amount), 0)))
        paid = await self._scalar(select(func.coalesce(func.sum(Payment.amount_paid), 0)))

        return schemas.DashboardSummary(
            total_books=total_books,
            available_books=available_books,
            total_copies=int(total_copies),
            available_copies=int(available_copies),
            total_students=total_students,
            open_loans=open_loans,
            overdue_loans=overdue_loans,
            unpaid_penalties=unpaid_penalties,
            outstanding_fines=float(Decimal(str(fines)) - Decimal(str(paid))),
        )

    async def get_year_issues(self, year: int) -> schemas.YearIssues:
        """
        Get circulation for a given year, grouped by month.

        Returns monthly summaries with:
        - Number of books issued in the month
        - Number of books returned in the month
        - Number of those returns that came after the due date
        - Total late days of those returns
        """
        start = datetime(year, 1, 1)
        end = datetime(year + 1, 1, 1)
        result = await self.session.execute(
            select(Loan.issue_date, Loan.due_date, Loan.return_date, Loan.status)
            .where(or_(
                and_(Loan.issue_date >= start, Loan.issue_date < end),
                and_(Loan.return_date >= start, Loan.return_date < end),
            ))
        )
        loans = pd.DataFrame(
            result.all(), columns=["issue_date", "due_date", "return_date", "status"]
        )

        months = pd.Index(range(1, 13), name="month")
        if loans.empty:
            issued = returned = late = days = pd.Series(0, index=months)
        else:
            for column in ("issue_date", "due_date", "return_date"):
                loans[column] = pd.to_datetime(loans[column])

            in_year = loans[loans["issue_date"].dt.year == year]
            issued = in_year.groupby(in_year["issue_date"].dt.month).size()

            returns = loans[
                (loans["status"] == LoanStatus.RETURNED.value)
                & (loans["return_date"].dt.year == year)
            ].copy()
            returns["late_days"] = [
                late_days(due.to_pydatetime(), ret.to_pydatetime())
                for due, ret in zip(returns["due_date"], returns["return_date"])
            ]
            by_month = returns.groupby(returns["return_date"].dt.month)
            returned = by_month.size()
            late = by_month["late_days"].apply(lambda s: int((s > 0).sum()))
            days = by_month["late_days"].sum()

            issued = issued.reindex(months, fill_value=0)
            returned = returned.reindex(months, fill_value=0)
            late = late.reindex(months, fill_value=0)
            days = days.reindex(months, fill_value=0)

        monthly_summaries = [
            schemas.MonthIssues(
                month=month,
                issued=int(issued[month]),
                returned=int(returned[month]),
                late_returns=int(late[month]),
                late_days=int(days[month]),
            )
            for month in months
        ]
        return schemas.YearIssues(
            year=year,
            total_issued=int(issued.sum()),
            total_returned=int(returned.sum()),
            total_late_returns=int(late.sum()),
            monthly_summaries=monthly_summaries,
        )
