"""Book stock history endpoints for the API."""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.clock import Clock, get_clock
from components.core.init_db import get_db
from components.stock.repository import StockRepository
from components.stock import schemas
from restapi.endpoints.auth import get_current_actor, resolve_actor
from restapi.errors import ERROR_RESPONSES

router = APIRouter(
    prefix="/book-stock-history",
    tags=["book-stock-history"],
    responses=ERROR_RESPONSES,
)


@router.get("", response_model=List[schemas.StockHistory])
async def read_stock_history(
    book_id: Optional[int] = Query(None, alias="bookId"),
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    publication_id: Optional[int] = Query(None, alias="publicationId"),
    db: AsyncSession = Depends(get_db),
):
    """Get stock adjustments, newest first."""
    repo = StockRepository(db)
    return await repo.get_all(
        book_id=book_id,
        search_term=search_term,
        publication_id=publication_id,
    )


@router.post("", response_model=schemas.StockAdjustmentResult)
async def adjust_stock(
    adjustment: schemas.StockAdjustmentCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    token_actor: Optional[str] = Depends(get_current_actor),
):
    """
    Add or write off copies of a book.

    A positive `CopiesAdded` is new stock; a negative one removes copies and
    is rejected with InsufficientStock when not enough copies are on the shelf.
    """
    repo = StockRepository(db, clock)
    return await repo.adjust(adjustment, resolve_actor(token_actor, adjustment.created_by))


@router.put("", response_model=schemas.StockHistory)
async def update_stock_history(
    update_in: schemas.StockRemarksUpdate,
    history_id: int = Query(..., alias="id"),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    token_actor: Optional[str] = Depends(get_current_actor),
):
    """Correct the remarks of a stock history entry."""
    repo = StockRepository(db, clock)
    return await repo.update_remarks(
        history_id, update_in, resolve_actor(token_actor, update_in.modified_by)
    )
