"""Repository for the manual stock adjustment ledger."""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from components.book.ledger import InventoryLedger
from components.book.models import Book
from components.core.clock import Clock, utcnow
from components.core.database import atomic
from components.core.exceptions import LibraryError, NotFound, ValidationError
from components.stock.models import StockHistory
from components.stock import schemas

logger = logging.getLogger(__name__)


def to_schema(row: StockHistory) -> schemas.StockHistory:
    return schemas.StockHistory(
        book_stock_history_id=row.id,
        book_id=row.book_id,
        book_name=row.book.title if row.book else None,
        copies_added=row.copies_added,
        remarks=row.remarks,
        created_by=row.created_by,
        created_on=row.created_on,
        modified_by=row.modified_by,
        modified_on=row.modified_on,
    )


class StockRepository:
    """
    Append-only ledger of manual copy count changes.

    A wrong delta is corrected with a new offsetting entry; only the remarks
    of an existing entry can be edited.
    """

    def __init__(self, session: AsyncSession, clock: Clock = utcnow):
        """Initialize repository with database session and time source."""
        self.session = session
        self.clock = clock
        self.ledger = InventoryLedger(session)

    async def adjust(
        self, data: schemas.StockAdjustmentCreate, actor: str
    ) -> schemas.StockAdjustmentResult:
        """Apply a signed delta to a book's copies and log it."""
        try:
            if data.copies_added == 0:
                raise ValidationError("CopiesAdded must be a non-zero number of copies")
            async with atomic(self.session):
                book = await self.ledger.adjust_stock(data.book_id, data.copies_added)
                history = StockHistory(
                    book_id=data.book_id,
                    copies_added=data.copies_added,
                    remarks=data.remarks or "",
                    created_by=actor,
                    created_on=self.clock(),
                )
                self.session.add(history)
                await self.session.flush()
        except LibraryError as exc:
            logger.warning("Stock adjustment rejected (book %s): %s", data.book_id, exc.message)
            raise

        logger.info("Book copies adjusted for BookId: %s by %s", data.book_id, data.copies_added)
        return schemas.StockAdjustmentResult(
            message="Book stock updated successfully",
            history=await self.get_by_id(history.id),
            total_copies=book.total_copies,
            available_copies=book.available_copies,
        )

    async def update_remarks(
        self, history_id: int, data: schemas.StockRemarksUpdate, actor: str
    ) -> schemas.StockHistory:
        """Correct the remarks of a history row; the delta is never edited."""
        async with atomic(self.session):
            row = await self.session.get(StockHistory, history_id)
            if row is None:
                raise NotFound("Book stock history record not found")
            row.remarks = data.remarks or ""
            row.modified_by = actor
            row.modified_on = self.clock()
        logger.info("Book stock history updated: %s", history_id)
        return await self.get_by_id(history_id)

    async def get_by_id(self, history_id: int) -> schemas.StockHistory:
        result = await self.session.execute(
            select(StockHistory)
            .options(selectinload(StockHistory.book))
            .where(StockHistory.id == history_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFound("Book stock history record not found")
        return to_schema(row)

    async def get_all(
        self,
        book_id: Optional[int] = None,
        search_term: Optional[str] = None,
        publication_id: Optional[int] = None,
        limit: int = 1000,
    ) -> List[schemas.StockHistory]:
        """Get history rows, newest first."""
        query = (
            select(StockHistory)
            .join(Book, StockHistory.book_id == Book.id)
            .options(selectinload(StockHistory.book))
        )
        if book_id is not None:
            query = query.where(StockHistory.book_id == book_id)
        if search_term:
            query = query.where(Book.title.like(f"%{search_term}%"))
        if publication_id is not None:
            query = query.where(Book.publication_id == publication_id)
        query = query.order_by(StockHistory.created_on.desc(), StockHistory.id.desc()).limit(limit)
        result = await self.session.execute(query)
        return [to_schema(row) for row in result.scalars().all()]
