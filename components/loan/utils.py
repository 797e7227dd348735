import math
from datetime import datetime, timedelta
from typing import Optional

ONE_DAY = timedelta(days=1)


def late_days(due_date: datetime, return_date: Optional[datetime]) -> int:
    """Whole days a return came after the due date, rounded up, never negative."""
    if return_date is None or return_date <= due_date:
        return 0
    return math.ceil((return_date - due_date) / ONE_DAY)


def overdue_days(due_date: datetime, now: datetime) -> int:
    """Days an open loan is past its due date as of `now`."""
    return late_days(due_date, now)
