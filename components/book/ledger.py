"""Inventory ledger: the only code path that changes a book's copy counters."""

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from components.book.models import Book
from components.core.exceptions import InsufficientStock, InvalidState, NotFound, Unavailable

logger = logging.getLogger(__name__)


class InventoryLedger:
    """
    Keeps `available_copies`/`total_copies` consistent.

    Every mutation is a single conditional UPDATE, so the availability check
    and the write happen in one statement. Callers run these methods inside
    their own transaction and commit together with the dependent row.
    """

    def __init__(self, session: AsyncSession):
        """Initialize ledger with database session."""
        self.session = session

    async def get_book(self, book_id: int) -> Book:
        """Load a book with fresh counters or raise NotFound."""
        result = await self.session.execute(
            select(Book)
            .where(Book.id == book_id)
            .execution_options(populate_existing=True)
        )
        book = result.scalar_one_or_none()
        if book is None:
            raise NotFound(f"Book not found: {book_id}")
        return book

    async def reserve_copy(self, book_id: int) -> None:
        """Take one available copy, failing with Unavailable when none is free."""
        result = await self.session.execute(
            update(Book)
            .where(
                Book.id == book_id,
                Book.is_active.is_(True),
                Book.available_copies > 0,
            )
            .values(available_copies=Book.available_copies - 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return
        await self.get_book(book_id)
        logger.warning("Book not available: %s", book_id)
        raise Unavailable(f"Book not available: {book_id}")

    async def release_copy(self, book_id: int) -> None:
        """Give one copy back to the shelf."""
        result = await self.session.execute(
            update(Book)
            .where(
                Book.id == book_id,
                Book.available_copies < Book.total_copies,
            )
            .values(available_copies=Book.available_copies + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return
        await self.get_book(book_id)
        logger.error("Release would exceed total copies for book %s", book_id)
        raise InvalidState(f"All copies of book {book_id} are already on the shelf")

    async def adjust_stock(self, book_id: int, delta: int) -> Book:
        """
        Apply a signed change to both counters.

        A negative delta is only applied when enough copies are on the shelf
        and owned, otherwise InsufficientStock is raised and nothing changes.
        """
        statement = update(Book).where(Book.id == book_id)
        if delta < 0:
            statement = statement.where(
                Book.available_copies >= -delta,
                Book.total_copies >= -delta,
            )
        result = await self.session.execute(
            statement
            .values(
                total_copies=Book.total_copies + delta,
                available_copies=Book.available_copies + delta,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return await self.get_book(book_id)
        book = await self.get_book(book_id)
        logger.warning(
            "Insufficient stock for book %s: delta=%s available=%s total=%s",
            book_id, delta, book.available_copies, book.total_copies,
        )
        raise InsufficientStock(
            f"Cannot remove {-delta} copies: only {book.available_copies} available "
            f"of {book.total_copies} total"
        )
