"""Student endpoints for the API."""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.clock import Clock, get_clock
from components.core.init_db import get_db
from components.loan.repository import LoanRepository
from components.loan import schemas as loan_schemas
from components.penalty.repository import PenaltyRepository
from components.penalty import schemas as penalty_schemas
from components.student.repository import StudentRepository
from components.student import schemas
from restapi.errors import ERROR_RESPONSES

router = APIRouter(
    prefix="/student",
    tags=["student"],
    responses=ERROR_RESPONSES,
)


@router.post("", response_model=schemas.Student)
async def create_student(
    student: schemas.StudentCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a new student."""
    repo = StudentRepository(db)
    return await repo.create(student)


@router.get("", response_model=List[schemas.Student])
async def read_students(
    search: Optional[str] = Query(None, description="Matches name or email"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Number of records to return"),
    db: AsyncSession = Depends(get_db),
):
    """Get list of students."""
    repo = StudentRepository(db)
    return await repo.get_all(search=search, skip=skip, limit=limit)


@router.get("/{student_id}", response_model=schemas.Student)
async def read_student(student_id: int, db: AsyncSession = Depends(get_db)):
    """Get a specific student by ID."""
    repo = StudentRepository(db)
    return await repo.get_by_id(student_id)


@router.get("/{student_id}/loans", response_model=List[loan_schemas.Loan])
async def read_student_loans(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """A student's own loan history, including derived overdue flags."""
    await StudentRepository(db).get(student_id)
    return await LoanRepository(db, clock).get_all(student_id=student_id)


@router.get("/{student_id}/penalties", response_model=List[penalty_schemas.Penalty])
async def read_student_penalties(student_id: int, db: AsyncSession = Depends(get_db)):
    """A student's own penalties with paid and remaining amounts."""
    await StudentRepository(db).get(student_id)
    return await PenaltyRepository(db).get_all(student_id=student_id)
