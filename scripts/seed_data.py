"""Script to seed demo data into the database."""

import asyncio
from datetime import timedelta

from components.book.repository import BookRepository
from components.book.schemas import BookCreate
from components.core.clock import utcnow
from components.core.init_db import db_manager, get_db
from components.loan.repository import LoanRepository
from components.loan.schemas import LoanCreate
from components.stock.repository import StockRepository
from components.stock.schemas import StockAdjustmentCreate
from components.student.repository import StudentRepository
from components.student.schemas import StudentCreate

SEED_ACTOR = "seed"


async def seed_data():
    """Seed demo books, students, loans and a stock delivery."""
    await db_manager.create_all()
    async for db in get_db():
        books = BookRepository(db)
        titles = [
            BookCreate(isbn_number="9780131103627", title="The C Programming Language",
                       author="Kernighan, Ritchie", total_copies=3),
            BookCreate(isbn_number="9780262033848", title="Introduction to Algorithms",
                       author="Cormen et al.", total_copies=2),
            BookCreate(isbn_number="9781492056355", title="Fluent Python",
                       author="Luciano Ramalho", total_copies=4),
        ]
        created_books = [await books.create(book, SEED_ACTOR) for book in titles]
        print(f"Created {len(created_books)} books")

        students = StudentRepository(db)
        people = [
            StudentCreate(first_name="Asha", last_name="Verma", email="asha@example.edu"),
            StudentCreate(first_name="Ravi", last_name="Kumar", email="ravi@example.edu"),
            StudentCreate(first_name="Meera", last_name="Iyer", email="meera@example.edu"),
        ]
        created_students = [await students.create(student) for student in people]
        print(f"Created {len(created_students)} students")

        # Loans issued three weeks ago are already overdue
        past = utcnow() - timedelta(days=21)
        loans = LoanRepository(db, clock=lambda: past)
        for i, student in enumerate(created_students):
            book = created_books[i % len(created_books)]
            await loans.issue(
                LoanCreate(book_id=book.book_id, student_id=student.student_id, days=14),
                SEED_ACTOR,
            )
        print(f"Issued {len(created_students)} loans")

        await StockRepository(db).adjust(
            StockAdjustmentCreate(
                book_id=created_books[0].book_id,
                copies_added=2,
                remarks="New stock delivery",
            ),
            SEED_ACTOR,
        )
        print("Seed data created successfully!")
        break  # Only need one session
    await db_manager.dispose()

if __name__ == "__main__":
    asyncio.run(seed_data())
