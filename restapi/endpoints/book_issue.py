"""Book issue endpoints: issue, renew, return, edit and delete loans."""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.clock import Clock, get_clock
from components.core.exceptions import ValidationError
from components.core.init_db import get_db
from components.core.schemas import Message
from components.loan.repository import LoanRepository
from components.loan import schemas
from restapi.endpoints.auth import get_current_actor, resolve_actor
from restapi.errors import ERROR_RESPONSES

router = APIRouter(
    prefix="/book-issue",
    tags=["book-issue"],
    responses=ERROR_RESPONSES,
)


@router.get("", response_model=List[schemas.Loan])
async def read_loans(
    student_id: Optional[int] = Query(None, alias="studentId"),
    status: Optional[str] = Query(
        None, description="issued, renewed, returned, open or overdue (derived)"
    ),
    book_id: Optional[int] = Query(None, alias="bookId"),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Get loans, newest first, optionally filtered by student, book and status."""
    repo = LoanRepository(db, clock)
    return await repo.get_all(student_id=student_id, status=status, book_id=book_id)


@router.get("/{issue_id}", response_model=schemas.Loan)
async def read_loan(
    issue_id: int,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Get a specific loan by ID."""
    repo = LoanRepository(db, clock)
    return await repo.get_by_id(issue_id)


@router.post("", response_model=schemas.LoanActionResult)
async def issue_book(
    loan_in: schemas.LoanCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    token_actor: Optional[str] = Depends(get_current_actor),
):
    """
    Issue a book to a student.

    Fails with 400 when the book has no available copy or is already issued
    to the student, and with 404 when the book or student does not exist.
    """
    repo = LoanRepository(db, clock)
    loan = await repo.issue(loan_in, resolve_actor(token_actor, loan_in.created_by))
    return schemas.LoanActionResult(message="Book issued successfully", loan=loan)


@router.put("", response_model=schemas.LoanActionResult)
async def renew_or_return_book(
    action: schemas.LoanAction,
    issue_id: int = Query(..., alias="id"),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    token_actor: Optional[str] = Depends(get_current_actor),
):
    """
    Renew or return a loan.

    - `status: "returned"` closes the loan; a late return needs `fineAmount`.
    - `status: "renewed"` (or only `renewDays`) extends the due date from the
      current due date.
    """
    repo = LoanRepository(db, clock)
    actor = resolve_actor(token_actor, action.modified_by)

    if action.status == "returned":
        loan, penalty = await repo.return_book(
            issue_id, action.remarks, action.fine_amount, actor
        )
        return schemas.LoanActionResult(
            message="Book returned successfully",
            loan=loan,
            penalty_id=penalty.id if penalty is not None else None,
        )

    if action.status == "renewed" or (action.status is None and action.renew_days):
        loan = await repo.renew(issue_id, action.renew_days, actor)
        return schemas.LoanActionResult(
            message="Book renewed successfully",
            loan=loan,
            new_due_date=loan.due_date,
        )

    raise ValidationError("Invalid action")


@router.patch("", response_model=schemas.LoanActionResult)
async def update_loan(
    loan_in: schemas.LoanUpdate,
    issue_id: int = Query(..., alias="id"),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    token_actor: Optional[str] = Depends(get_current_actor),
):
    """Edit an open loan; changing the book moves the reservation to the new book."""
    repo = LoanRepository(db, clock)
    loan = await repo.update(issue_id, loan_in, resolve_actor(token_actor, loan_in.modified_by))
    return schemas.LoanActionResult(message="Book issue updated successfully", loan=loan)


@router.delete("", response_model=Message)
async def delete_loan(
    issue_id: int = Query(..., alias="id"),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Delete an open loan and put its copy back on the shelf."""
    repo = LoanRepository(db, clock)
    await repo.delete(issue_id)
    return Message(message="Book issue deleted successfully")
