"""Book catalog endpoints for the API."""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.book.repository import BookRepository
from components.book import schemas
from components.core.init_db import get_db
from restapi.endpoints.auth import get_current_actor, resolve_actor
from restapi.errors import ERROR_RESPONSES

router = APIRouter(
    prefix="/book",
    tags=["book"],
    responses=ERROR_RESPONSES,
)


@router.get("", response_model=List[schemas.Book])
async def read_books(
    search: str = Query("", description="Matches title or ISBN"),
    status: str = Query("all", pattern="^(all|active|inactive)$"),
    available_copies: bool = Query(False, alias="availableCopies"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Number of records to return"),
    db: AsyncSession = Depends(get_db),
):
    """Get list of books with optional filtering."""
    repo = BookRepository(db)
    return await repo.get_all(
        search=search,
        status=status,
        available_only=available_copies,
        skip=skip,
        limit=limit,
    )


@router.get("/{book_id}", response_model=schemas.Book)
async def read_book(book_id: int, db: AsyncSession = Depends(get_db)):
    """Get a specific book by ID."""
    repo = BookRepository(db)
    return await repo.get_by_id(book_id)


@router.post("", response_model=schemas.Book)
async def create_book(
    book: schemas.BookCreate,
    db: AsyncSession = Depends(get_db),
    token_actor: Optional[str] = Depends(get_current_actor),
):
    """Create a new book; all its copies start on the shelf."""
    repo = BookRepository(db)
    return await repo.create(book, resolve_actor(token_actor, book.created_by))
