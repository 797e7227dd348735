"""Simultaneous requests on separate sessions against a shared database file."""

import asyncio
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from components.book.repository import BookRepository
from components.book.schemas import BookCreate
from components.core.database import DatabaseManager
from components.core.exceptions import LibraryError
from components.loan.repository import LoanRepository
from components.loan.schemas import LoanCreate
from components.penalty.repository import PenaltyRepository
from components.penalty.schemas import PaymentCreate
from components.student.repository import StudentRepository
from components.student.schemas import StudentCreate


@pytest.fixture
async def file_db(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'library.db'}")
    manager = DatabaseManager(engine)
    await manager.create_all()
    yield manager
    await manager.dispose()


async def race(manager, *operations):
    """Run each operation in its own session at the same time; report ok or the error kind."""

    async def run(operation):
        async with manager.get_db() as session:
            try:
                await operation(session)
            except LibraryError as exc:
                return exc.kind
            return "ok"

    return await asyncio.gather(*(run(operation) for operation in operations))


async def seed(manager, students=1):
    async with manager.get_db() as session:
        book = await BookRepository(session).create(
            BookCreate(isbn_number="9781492056355", title="Fluent Python",
                       author="Luciano Ramalho", total_copies=1),
            "librarian",
        )
        created = [
            await StudentRepository(session).create(
                StudentCreate(first_name="Student", last_name=str(n), email=f"s{n}@example.edu")
            )
            for n in range(students)
        ]
    return book, created


async def test_last_copy_goes_to_one_borrower(file_db, clock):
    book, (first, second) = await seed(file_db, students=2)

    def borrow(student):
        return lambda session: LoanRepository(session, clock).issue(
            LoanCreate(book_id=book.book_id, student_id=student.student_id, days=7), "librarian"
        )

    results = await race(file_db, borrow(first), borrow(second))

    assert sorted(results) == ["Unavailable", "ok"]
    async with file_db.get_db() as session:
        current = await BookRepository(session).get_by_id(book.book_id)
        assert current.available_copies == 0
        assert await LoanRepository(session).count_open(book.book_id) == 1


async def test_parallel_payments_cannot_overpay(file_db, clock):
    book, (student,) = await seed(file_db)
    async with file_db.get_db() as session:
        loans = LoanRepository(session, clock)
        loan = await loans.issue(
            LoanCreate(book_id=book.book_id, student_id=student.student_id, days=7), "librarian"
        )
        clock.advance(days=10)
        await loans.return_book(loan.issue_id, None, Decimal("50"), "librarian")

    def pay(amount):
        return lambda session: PenaltyRepository(session, clock).record_payment(
            PaymentCreate(
                issue_id=loan.issue_id,
                student_id=student.student_id,
                amount_paid=Decimal(amount),
                payment_mode="Cash",
            ),
            "cashier",
        )

    results = await race(file_db, pay("30"), pay("30"))

    assert sorted(results) == ["ValidationError", "ok"]
    async with file_db.get_db() as session:
        repo = PenaltyRepository(session, clock)
        assert await repo.total_paid(loan.issue_id) == Decimal("30.00")
        assert await repo.remaining(loan.issue_id) == Decimal("20.00")
