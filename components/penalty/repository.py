"""Repository for penalty accrual and settlement."""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from components.core.clock import Clock, utcnow
from components.core.config import get_settings
from components.core.database import atomic
from components.core.exceptions import (
    DuplicateTransaction,
    InvalidState,
    LibraryError,
    NotFound,
    ValidationError,
)
from components.loan.models import Loan, LoanStatus
from components.loan.utils import late_days
from components.payment.models import Payment, PaymentMode
from components.penalty.models import Penalty, PenaltyStatus
from components.penalty import schemas

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
DEFAULT_PENALTY_REMARKS = "Late return penalty"


def to_money(value) -> Decimal:
    """Normalise a Numeric/aggregate value to a two-place Decimal."""
    return Decimal(str(value or 0)).quantize(CENT)


def payment_to_schema(payment: Payment) -> schemas.Payment:
    return schemas.Payment(
        payment_id=payment.id,
        issue_id=payment.issue_id,
        student_id=payment.student_id,
        amount_paid=float(payment.amount_paid),
        payment_mode=payment.payment_mode,
        transaction_id=payment.transaction_id,
        receive_by=payment.receive_by,
        created_by=payment.created_by,
        created_on=payment.created_on,
    )


class PenaltyRepository:
    """
    Repository for fines tied to late returns and the payments settling them.

    The fine amount is supplied by the operator and fixed at creation.
    Payments accumulate until they reach it; the remaining balance is
    re-read under a row lock in the same transaction as each insert.
    """

    def __init__(self, session: AsyncSession, clock: Clock = utcnow):
        """Initialize repository with database session and time source."""
        self.session = session
        self.clock = clock

    async def add_penalty(
        self,
        loan: Loan,
        amount: Decimal,
        remarks: Optional[str],
        actor: str,
    ) -> Penalty:
        """Stage a penalty for a late-returned loan inside the caller's transaction."""
        penalty = Penalty(
            issue_id=loan.id,
            student_id=loan.student_id,
            amount=to_money(amount),
            status=PenaltyStatus.UNPAID.value,
            remarks=remarks or DEFAULT_PENALTY_REMARKS,
            created_by=actor,
            created_on=self.clock(),
        )
        self.session.add(penalty)
        await self.session.flush()
        logger.info("Penalty %s staged for issue %s: %s", penalty.id, loan.id, penalty.amount)
        return penalty

    async def create(self, data: schemas.PenaltyCreate, actor: str) -> schemas.Penalty:
        """
        Record a fine for a loan that came back late without one.

        The amount must exceed MIN_LATE_FINE, as on the return path. The loan
        must be returned after its due date and must not already carry a
        penalty.
        """
        minimum = Decimal(str(get_settings().MIN_LATE_FINE))
        try:
            if data.amount <= minimum:
                raise ValidationError(f"A late return fine must be greater than {minimum}")
            async with atomic(self.session):
                loan = await self.session.get(Loan, data.issue_id, populate_existing=True)
                if loan is None:
                    raise NotFound(f"Issue not found: {data.issue_id}")
                if loan.status != LoanStatus.RETURNED.value:
                    raise InvalidState("Penalties are recorded only for returned books")
                if late_days(loan.due_date, loan.return_date) == 0:
                    raise InvalidState("Book was not returned late")
                if await self._find(data.issue_id) is not None:
                    raise InvalidState(f"Penalty already exists for issue {data.issue_id}")
                penalty = await self.add_penalty(loan, data.amount, data.remarks, actor)
        except LibraryError as exc:
            logger.warning("Penalty creation rejected (issue %s): %s", data.issue_id, exc.message)
            raise
        logger.info("Penalty created successfully: %s", penalty.id)
        return await self.get_by_issue(data.issue_id)

    async def _find(self, issue_id: int, for_update: bool = False) -> Optional[Penalty]:
        query = (
            select(Penalty)
            .where(Penalty.issue_id == issue_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def _lock(self, issue_id: int) -> None:
        # A write takes the row lock even on engines that ignore FOR UPDATE.
        await self.session.execute(
            update(Penalty)
            .where(Penalty.issue_id == issue_id)
            .values(status=Penalty.status)
            .execution_options(synchronize_session=False)
        )

    async def total_paid(self, issue_id: int) -> Decimal:
        """Sum of all payments recorded against a loan."""
        result = await self.session.execute(
            select(func.coalesce(func.sum(Payment.amount_paid), 0))
            .where(Payment.issue_id == issue_id)
        )
        return to_money(result.scalar())

    async def remaining(self, issue_id: int) -> Decimal:
        """Outstanding balance of the penalty for a loan."""
        penalty = await self._find(issue_id)
        if penalty is None:
            raise NotFound(f"Penalty not found for IssueId: {issue_id}")
        return to_money(penalty.amount) - await self.total_paid(issue_id)

    async def transaction_exists(self, transaction_id: str) -> bool:
        result = await self.session.execute(
            select(Payment.id).where(Payment.transaction_id == transaction_id)
        )
        return result.first() is not None

    async def record_payment(self, data: schemas.PaymentCreate, actor: str) -> schemas.PaymentResult:
        """
        Apply one payment to the penalty of a loan.

        Rejects non-positive amounts, amounts above the remaining balance,
        a student other than the penalised one, non-cash payments without a
        transaction id and any transaction id already used.
        """
        transaction_id = (data.transaction_id or "").strip() or None
        amount = to_money(data.amount_paid)
        try:
            async with atomic(self.session):
                await self._lock(data.issue_id)
                penalty = await self._find(data.issue_id, for_update=True)
                if penalty is None:
                    raise NotFound(f"Penalty not found for IssueId: {data.issue_id}")
                if penalty.student_id != data.student_id:
                    raise ValidationError(
                        f"Penalty for issue {data.issue_id} belongs to another student"
                    )
                if amount <= 0:
                    raise ValidationError("Payment amount must be positive")

                paid = await self.total_paid(data.issue_id)
                fine = to_money(penalty.amount)
                if paid + amount > fine:
                    raise ValidationError(
                        f"Payment amount exceeds remaining penalty amount ({fine - paid})"
                    )

                if data.payment_mode != PaymentMode.CASH and not transaction_id:
                    raise ValidationError(
                        f"Transaction id is required for {data.payment_mode.value} payments"
                    )
                if transaction_id and await self.transaction_exists(transaction_id):
                    raise DuplicateTransaction(f"Transaction id {transaction_id} already used")

                now = self.clock()
                payment = Payment(
                    issue_id=data.issue_id,
                    student_id=data.student_id,
                    amount_paid=amount,
                    payment_mode=data.payment_mode.value,
                    transaction_id=transaction_id,
                    receive_by=data.receive_by or actor,
                    created_by=actor,
                    created_on=now,
                )
                self.session.add(payment)
                try:
                    await self.session.flush()
                except IntegrityError as exc:
                    # A concurrent insert won the unique transaction id.
                    raise DuplicateTransaction(
                        f"Transaction id {transaction_id} already used"
                    ) from exc

                paid += amount
                if paid == fine:
                    penalty.status = PenaltyStatus.PAID.value
                    penalty.modified_by = actor
                    penalty.modified_on = now
        except LibraryError as exc:
            logger.warning("Payment rejected (issue %s): %s", data.issue_id, exc.message)
            raise

        logger.info(
            "Payment created successfully for IssueId: %s, StudentId: %s",
            data.issue_id, data.student_id,
        )
        return schemas.PaymentResult(
            message="Payment created successfully",
            payment=payment_to_schema(payment),
            total_paid=float(paid),
            remaining=float(fine - paid),
            penalty_status=penalty.status,
        )

    async def get_by_issue(self, issue_id: int) -> schemas.Penalty:
        """Get the penalty of a loan with its settlement progress."""
        penalties = await self.get_all(issue_id=issue_id)
        if not penalties:
            raise NotFound(f"Penalty not found for IssueId: {issue_id}")
        return penalties[0]

    async def get_all(
        self,
        student_id: Optional[int] = None,
        status: Optional[str] = None,
        issue_id: Optional[int] = None,
    ) -> List[schemas.Penalty]:
        """Get penalties, newest first, each with paid total and remaining balance."""
        paid_totals = (
            select(
                Payment.issue_id.label("issue_id"),
                func.sum(Payment.amount_paid).label("total_paid"),
            )
            .group_by(Payment.issue_id)
            .subquery()
        )
        query = (
            select(Penalty, paid_totals.c.total_paid)
            .outerjoin(paid_totals, paid_totals.c.issue_id == Penalty.issue_id)
            .options(
                selectinload(Penalty.loan).selectinload(Loan.book),
                selectinload(Penalty.loan).selectinload(Loan.student),
            )
            .execution_options(populate_existing=True)
        )
        if student_id is not None:
            query = query.where(Penalty.student_id == student_id)
        if status:
            query = query.where(Penalty.status == status)
        if issue_id is not None:
            query = query.where(Penalty.issue_id == issue_id)
        query = query.order_by(Penalty.created_on.desc(), Penalty.id.desc())

        result = await self.session.execute(query)
        penalties = []
        for penalty, total_paid in result.all():
            loan = penalty.loan
            amount = to_money(penalty.amount)
            paid = to_money(total_paid)
            penalties.append(schemas.Penalty(
                penalty_id=penalty.id,
                issue_id=penalty.issue_id,
                student_id=penalty.student_id,
                student_name=loan.student.full_name if loan.student else None,
                book_id=loan.book_id,
                book_title=loan.book.title if loan.book else None,
                amount=float(amount),
                total_paid=float(paid),
                remaining=float(amount - paid),
                penalty_status=penalty.status,
                late_days=late_days(loan.due_date, loan.return_date),
                due_date=loan.due_date,
                return_date=loan.return_date,
                remarks=penalty.remarks,
                created_by=penalty.created_by,
                created_on=penalty.created_on,
                modified_by=penalty.modified_by,
                modified_on=penalty.modified_on,
            ))
        return penalties

    async def get_payments(
        self,
        issue_id: Optional[int] = None,
        student_id: Optional[int] = None,
    ) -> List[schemas.Payment]:
        """Get payment history, newest first."""
        query = select(Payment)
        if issue_id is not None:
            query = query.where(Payment.issue_id == issue_id)
        if student_id is not None:
            query = query.where(Payment.student_id == student_id)
        query = query.order_by(Payment.created_on.desc(), Payment.id.desc())
        result = await self.session.execute(query)
        return [payment_to_schema(p) for p in result.scalars().all()]
