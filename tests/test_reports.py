from decimal import Decimal

import pytest

from components.loan.repository import LoanRepository
from components.loan.schemas import LoanCreate
from components.penalty.repository import PenaltyRepository
from components.penalty.schemas import PaymentCreate
from components.report.repository import ReportRepository


@pytest.fixture
async def circulation(session, clock, make_book, make_student):
    """Two loans in March 2024: one returned three days late and part paid, one overdue."""
    first_book = await make_book(total_copies=2)
    second_book = await make_book(total_copies=1)
    first_student = await make_student()
    second_student = await make_student(first_name="Ravi", last_name="Kumar")

    loans = LoanRepository(session, clock)
    returned = await loans.issue(
        LoanCreate(book_id=first_book.book_id, student_id=first_student.student_id, days=7),
        "librarian",
    )
    await loans.issue(
        LoanCreate(book_id=second_book.book_id, student_id=second_student.student_id, days=7),
        "librarian",
    )

    clock.advance(days=10)
    await loans.return_book(returned.issue_id, None, Decimal("50"), "librarian")
    await PenaltyRepository(session, clock).record_payment(
        PaymentCreate(
            issue_id=returned.issue_id,
            student_id=first_student.student_id,
            amount_paid=Decimal("20"),
            payment_mode="Cash",
        ),
        "cashier",
    )


async def test_dashboard_counts(session, clock, circulation):
    summary = await ReportRepository(session, clock).get_dashboard()

    assert summary.total_books == 2
    assert summary.available_books == 1
    assert summary.total_copies == 3
    assert summary.available_copies == 2
    assert summary.total_students == 2
    assert summary.open_loans == 1
    assert summary.overdue_loans == 1
    assert summary.unpaid_penalties == 1
    assert summary.outstanding_fines == 30.0


async def test_monthly_issues_group_by_month(session, clock, circulation):
    report = await ReportRepository(session, clock).get_year_issues(2024)

    assert report.total_issued == 2
    assert report.total_returned == 1
    assert report.total_late_returns == 1
    assert len(report.monthly_summaries) == 12
    march = report.monthly_summaries[2]
    assert (march.month, march.issued, march.returned) == (3, 2, 1)
    assert (march.late_returns, march.late_days) == (1, 3)
    assert report.monthly_summaries[0].issued == 0


async def test_monthly_issues_for_empty_year(session, clock):
    report = await ReportRepository(session, clock).get_year_issues(2023)

    assert report.total_issued == 0
    assert [m.month for m in report.monthly_summaries] == list(range(1, 13))
    assert all(m.issued == 0 and m.returned == 0 for m in report.monthly_summaries)
