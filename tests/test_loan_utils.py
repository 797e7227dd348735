from datetime import datetime, timedelta

from components.loan.utils import late_days, overdue_days

DUE = datetime(2024, 3, 8, 9, 0, 0)


def test_late_days_rounds_partial_days_up():
    assert late_days(DUE, DUE + timedelta(days=3)) == 3
    assert late_days(DUE, DUE + timedelta(days=2, hours=1)) == 3
    assert late_days(DUE, DUE + timedelta(seconds=1)) == 1


def test_no_late_days_on_or_before_due_date():
    assert late_days(DUE, DUE) == 0
    assert late_days(DUE, DUE - timedelta(days=1)) == 0
    assert late_days(DUE, None) == 0


def test_overdue_days_counts_from_now():
    assert overdue_days(DUE, DUE + timedelta(days=4)) == 4
    assert overdue_days(DUE, DUE) == 0
