"""Penalty endpoints for the API."""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.clock import Clock, get_clock
from components.core.init_db import get_db
from components.penalty.repository import PenaltyRepository
from components.penalty import schemas
from restapi.endpoints.auth import get_current_actor, resolve_actor
from restapi.errors import ERROR_RESPONSES

router = APIRouter(
    prefix="/penalty",
    tags=["penalty"],
    responses=ERROR_RESPONSES,
)


@router.get("", response_model=List[schemas.Penalty])
async def read_penalties(
    student_id: Optional[int] = Query(None, alias="studentId"),
    status: Optional[str] = Query(None, description="unpaid or paid"),
    db: AsyncSession = Depends(get_db),
):
    """
    Get penalties with their settlement progress.

    Each penalty carries the fine amount, the total paid so far, the
    remaining balance and the number of days the book came back late.
    """
    repo = PenaltyRepository(db)
    return await repo.get_all(student_id=student_id, status=status)


@router.get("/by-issue/{issue_id}", response_model=schemas.Penalty)
async def read_penalty(issue_id: int, db: AsyncSession = Depends(get_db)):
    """Get the penalty of a loan."""
    repo = PenaltyRepository(db)
    return await repo.get_by_issue(issue_id)


@router.post("", response_model=schemas.Penalty)
async def create_penalty(
    penalty_in: schemas.PenaltyCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    token_actor: Optional[str] = Depends(get_current_actor),
):
    """Record a fine for a book that was returned late without one."""
    repo = PenaltyRepository(db, clock)
    return await repo.create(penalty_in, resolve_actor(token_actor, penalty_in.created_by))


@router.post("/payment", response_model=schemas.PaymentResult)
async def pay_penalty(
    payment_in: schemas.PaymentCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    token_actor: Optional[str] = Depends(get_current_actor),
):
    """Apply a payment to the penalty of a loan."""
    repo = PenaltyRepository(db, clock)
    return await repo.record_payment(
        payment_in, resolve_actor(token_actor, payment_in.created_by)
    )
