"""Repository for book catalog operations."""

import logging
from typing import List

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from components.book.models import Book
from components.book import schemas
from components.core.database import atomic
from components.core.exceptions import NotFound, ValidationError

logger = logging.getLogger(__name__)


class BookRepository:
    """Repository for book catalog operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def create(self, book: schemas.BookCreate, actor: str) -> schemas.Book:
        """Create a new book with all its copies on the shelf."""
        async with atomic(self.session):
            if await self.exists(book.isbn_number):
                raise ValidationError(f"Book with ISBN {book.isbn_number} already exists")
            db_book = Book(
                isbn_number=book.isbn_number,
                title=book.title,
                author=book.author,
                course_id=book.course_id,
                subject_id=book.subject_id,
                publication_id=book.publication_id,
                total_copies=book.total_copies,
                available_copies=book.total_copies,
                is_active=True,
                created_by=actor,
            )
            self.session.add(db_book)
            await self.session.flush()
        logger.info("Book created: %s (%s)", db_book.id, db_book.title)
        return schemas.Book.model_validate(db_book)

    async def get_by_id(self, book_id: int) -> schemas.Book:
        """Get book by ID."""
        result = await self.session.execute(
            select(Book)
            .where(Book.id == book_id)
            .execution_options(populate_existing=True)
        )
        book = result.scalar_one_or_none()
        if book is None:
            raise NotFound(f"Book not found: {book_id}")
        return schemas.Book.model_validate(book)

    async def exists(self, isbn_number: str) -> bool:
        """Check if a book with given ISBN exists."""
        result = await self.session.execute(
            select(Book.id).where(Book.isbn_number == isbn_number)
        )
        return result.scalar_one_or_none() is not None

    async def get_all(
        self,
        search: str = "",
        status: str = "all",
        available_only: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> List[schemas.Book]:
        """Get books filtered by title/ISBN, active flag and availability."""
        query = select(Book).execution_options(populate_existing=True)

        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(or_(Book.title.like(pattern), Book.isbn_number.like(pattern)))
        if status != "all":
            query = query.where(Book.is_active.is_(status == "active"))
        if available_only:
            query = query.where(Book.available_copies > 0)

        query = query.order_by(Book.title).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return [schemas.Book.model_validate(book) for book in result.scalars().all()]
