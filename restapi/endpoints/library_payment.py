"""Library payment endpoints for the API."""

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
    prefix="/library-payment",
    tags=["library-payment"],
    responses=ERROR_RESPONSES,
)


@router.get("", response_model=List[schemas.Payment])
async def read_payments(
    issue_id: Optional[int] = Query(None, alias="issueId"),
    student_id: Optional[int] = Query(None, alias="studentId"),
    db: AsyncSession = Depends(get_db),
):
    """Get payment history, newest first."""
    repo = PenaltyRepository(db)
    return await repo.get_payments(issue_id=issue_id, student_id=student_id)


@router.post("", response_model=schemas.PaymentResult)
async def create_payment(
    payment_in: schemas.PaymentCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    token_actor: Optional[str] = Depends(get_current_actor),
):
    """
    Record a payment against a penalty.

    Rejected with 400 when it exceeds the remaining balance, when a non-cash
    payment has no transaction id, or when the transaction id was used before.
    """
    repo = PenaltyRepository(db, clock)
    return await repo.record_payment(
        payment_in, resolve_actor(token_actor, payment_in.created_by)
    )
