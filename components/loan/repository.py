"""Repository for the book issue lifecycle."""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from components.book.ledger import InventoryLedger
from components.core.clock import Clock, utcnow
from components.core.config import get_settings
from components.core.database import atomic
from components.core.exceptions import InvalidState, LibraryError, NotFound, ValidationError
from components.loan.models import Loan, LoanStatus, OPEN_STATUSES
from components.loan import schemas
from components.loan.utils import late_days, overdue_days
from components.penalty.models import Penalty
from components.penalty.repository import PenaltyRepository
from components.student.models import Student

logger = logging.getLogger(__name__)

DEFAULT_ISSUE_REMARKS = "Added New Book"


def to_schema(loan: Loan, now: datetime) -> schemas.Loan:
    """Build the loan response, deriving overdue from `now`."""
    student = loan.student
    return schemas.Loan(
        issue_id=loan.id,
        book_id=loan.book_id,
        book_title=loan.book.title if loan.book else None,
        student_id=loan.student_id,
        student_name=student.full_name if student else None,
        issue_date=loan.issue_date,
        due_date=loan.due_date,
        return_date=loan.return_date,
        status=loan.status,
        is_renewed=loan.is_renewed,
        is_overdue=loan.is_overdue(now),
        overdue_days=overdue_days(loan.due_date, now) if loan.is_open else 0,
        late_days=late_days(loan.due_date, loan.return_date),
        remarks=loan.remarks,
        created_by=loan.created_by,
        created_on=loan.created_on,
        modified_by=loan.modified_by,
        modified_on=loan.modified_on,
    )


class LoanRepository:
    """
    Repository owning the state machine of a single loan.

    States are `issued` and `renewed` (both open) and `returned` (terminal).
    Every transition that touches the copy counters runs in one transaction
    together with the loan row, so a failure leaves both untouched.
    """

    def __init__(self, session: AsyncSession, clock: Clock = utcnow):
        """Initialize repository with database session and time source."""
        self.session = session
        self.clock = clock
        self.ledger = InventoryLedger(session)
        self.settings = get_settings()

    async def get(self, issue_id: int, for_update: bool = False) -> Loan:
        """Get the loan row or raise NotFound."""
        query = (
            select(Loan)
            .where(Loan.id == issue_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        loan = result.scalar_one_or_none()
        if loan is None:
            logger.warning("Issue not found: %s", issue_id)
            raise NotFound(f"Issue not found: {issue_id}")
        return loan

    async def get_by_id(self, issue_id: int) -> schemas.Loan:
        """Get loan by ID with book and student details."""
        result = await self.session.execute(
            select(Loan)
            .options(selectinload(Loan.book), selectinload(Loan.student))
            .where(Loan.id == issue_id)
            .execution_options(populate_existing=True)
        )
        loan = result.scalar_one_or_none()
        if loan is None:
            raise NotFound(f"Issue not found: {issue_id}")
        return to_schema(loan, self.clock())

    async def get_all(
        self,
        student_id: Optional[int] = None,
        status: Optional[str] = None,
        book_id: Optional[int] = None,
    ) -> List[schemas.Loan]:
        """
        Get loans, newest first.

        `status` accepts the stored values and the derived value `overdue`,
        which selects open loans whose due date has strictly passed.
        """
        now = self.clock()
        query = (
            select(Loan)
            .options(selectinload(Loan.book), selectinload(Loan.student))
            .execution_options(populate_existing=True)
        )

        if student_id is not None:
            query = query.where(Loan.student_id == student_id)
        if book_id is not None:
            query = query.where(Loan.book_id == book_id)
        if status == "overdue":
            query = query.where(Loan.status.in_(OPEN_STATUSES), Loan.due_date < now)
        elif status == "open":
            query = query.where(Loan.status.in_(OPEN_STATUSES))
        elif status:
            query = query.where(Loan.status == status)

        query = query.order_by(Loan.issue_date.desc(), Loan.id.desc())
        result = await self.session.execute(query)
        return [to_schema(loan, now) for loan in result.scalars().all()]

    async def count_open(self, book_id: int) -> int:
        """Number of open loans holding a copy of the book."""
        result = await self.session.execute(
            select(Loan.id).where(Loan.book_id == book_id, Loan.status.in_(OPEN_STATUSES))
        )
        return len(result.all())

    async def _require_student(self, student_id: int) -> Student:
        student = await self.session.get(Student, student_id)
        if student is None:
            raise NotFound(f"Student not found: {student_id}")
        if not student.is_active:
            raise ValidationError(f"Student is not active: {student_id}")
        return student

    async def _ensure_not_already_issued(
        self, book_id: int, student_id: int, exclude_issue_id: Optional[int] = None
    ) -> None:
        query = select(Loan.id).where(
            Loan.book_id == book_id,
            Loan.student_id == student_id,
            Loan.status.in_(OPEN_STATUSES),
        )
        if exclude_issue_id is not None:
            query = query.where(Loan.id != exclude_issue_id)
        result = await self.session.execute(query)
        if result.first() is not None:
            raise InvalidState("This book is already issued to the student")

    async def issue(self, data: schemas.LoanCreate, actor: str) -> schemas.Loan:
        """Issue one copy of a book to a student for `days` days."""
        now = self.clock()
        try:
            async with atomic(self.session):
                await self.ledger.get_book(data.book_id)
                await self._require_student(data.student_id)
                await self._ensure_not_already_issued(data.book_id, data.student_id)
                await self.ledger.reserve_copy(data.book_id)

                loan = Loan(
                    book_id=data.book_id,
                    student_id=data.student_id,
                    issue_date=now,
                    due_date=now + timedelta(days=data.days),
                    status=LoanStatus.ISSUED.value,
                    remarks=data.remarks or DEFAULT_ISSUE_REMARKS,
                    is_renewed=False,
                    created_by=actor,
                    created_on=now,
                )
                self.session.add(loan)
                await self.session.flush()
        except LibraryError as exc:
            logger.warning(
                "Book issue rejected (book=%s student=%s): %s",
                data.book_id, data.student_id, exc.message,
            )
            raise

        logger.info("Book issued successfully: %s to student %s", data.book_id, data.student_id)
        return await self.get_by_id(loan.id)

    async def renew(self, issue_id: int, days: Optional[int], actor: str) -> schemas.Loan:
        """Extend the due date of an open loan, counting from the current due date."""
        if days is None:
            days = self.settings.DEFAULT_RENEW_DAYS
        if days <= 0:
            logger.warning("Renew rejected, non-positive days for %s: %s", issue_id, days)
            raise ValidationError("Renew days must be a positive number")
        now = self.clock()
        async with atomic(self.session):
            loan = await self.get(issue_id, for_update=True)
            if not loan.is_open:
                logger.warning("Renew rejected, book not currently issued: %s", issue_id)
                raise InvalidState("Book is not currently issued")

            loan.due_date = loan.due_date + timedelta(days=days)
            loan.status = LoanStatus.RENEWED.value
            loan.is_renewed = True
            loan.modified_by = actor
            loan.modified_on = now

        logger.info("Book renewed successfully: %s for %s days", issue_id, days)
        return await self.get_by_id(issue_id)

    async def return_book(
        self,
        issue_id: int,
        remarks: Optional[str],
        fine_amount: Optional[Decimal],
        actor: str,
    ) -> Tuple[schemas.Loan, Optional[Penalty]]:
        """
        Close an open loan and put the copy back on the shelf.

        A return after the due date needs a fine above MIN_LATE_FINE; the
        penalty is recorded in the same transaction as the return.
        """
        now = self.clock()
        penalty = None
        try:
            async with atomic(self.session):
                loan = await self.get(issue_id, for_update=True)
                if not loan.is_open:
                    raise InvalidState("Book is not currently issued")

                is_late = now > loan.due_date
                if is_late:
                    minimum = Decimal(str(self.settings.MIN_LATE_FINE))
                    if fine_amount is None or fine_amount <= minimum:
                        raise ValidationError(
                            f"Book is returned {late_days(loan.due_date, now)} day(s) late; "
                            f"a fine greater than {minimum} is required"
                        )
                elif fine_amount:
                    logger.info("Ignoring fine for on-time return: %s", issue_id)

                loan.status = LoanStatus.RETURNED.value
                loan.return_date = now
                if remarks:
                    loan.remarks = remarks
                loan.modified_by = actor
                loan.modified_on = now

                await self.ledger.release_copy(loan.book_id)

                if is_late:
                    penalty = await PenaltyRepository(self.session, self.clock).add_penalty(
                        loan, fine_amount, remarks, actor
                    )
        except LibraryError as exc:
            logger.warning("Book return rejected (%s): %s", issue_id, exc.message)
            raise

        logger.info("Book returned successfully: %s", issue_id)
        return await self.get_by_id(issue_id), penalty

    async def update(self, issue_id: int, data: schemas.LoanUpdate, actor: str) -> schemas.Loan:
        """
        Reissue an open loan in place.

        When the book changes, the old copy is released and a copy of the new
        book reserved; if the new book has no free copy the edit is rolled back.
        """
        now = self.clock()
        try:
            async with atomic(self.session):
                loan = await self.get(issue_id, for_update=True)
                if not loan.is_open:
                    raise InvalidState("Book is not currently issued")

                await self._require_student(data.student_id)
                await self._ensure_not_already_issued(
                    data.book_id, data.student_id, exclude_issue_id=issue_id
                )

                if data.book_id != loan.book_id:
                    await self.ledger.release_copy(loan.book_id)
                    await self.ledger.reserve_copy(data.book_id)

                loan.book_id = data.book_id
                loan.student_id = data.student_id
                loan.issue_date = now
                loan.due_date = now + timedelta(days=data.days)
                loan.remarks = data.remarks
                loan.modified_by = actor
                loan.modified_on = now
        except LibraryError as exc:
            logger.warning("Book issue update rejected (%s): %s", issue_id, exc.message)
            raise

        logger.info("Book issue updated successfully: %s", issue_id)
        return await self.get_by_id(issue_id)

    async def delete(self, issue_id: int) -> None:
        """Delete an open loan and release its copy."""
        try:
            async with atomic(self.session):
                loan = await self.get(issue_id, for_update=True)
                if not loan.is_open:
                    # The copy of a returned loan is already back on the shelf.
                    raise InvalidState("Book is not currently issued")
                book_id = loan.book_id
                await self.session.execute(delete(Loan).where(Loan.id == issue_id))
                await self.ledger.release_copy(book_id)
        except LibraryError as exc:
            logger.warning("Book issue deletion rejected (%s): %s", issue_id, exc.message)
            raise

        logger.info("Book issue deleted successfully: %s", issue_id)
