import pytest

from components.book.repository import BookRepository
from components.core.exceptions import InsufficientStock, NotFound, ValidationError
from components.loan.repository import LoanRepository
from components.loan.schemas import LoanCreate
from components.stock.repository import StockRepository
from components.stock.schemas import StockAdjustmentCreate, StockRemarksUpdate


async def test_write_off_cannot_take_loaned_copies(session, clock, make_book, make_student):
    book = await make_book(total_copies=5)
    loans = LoanRepository(session, clock)
    for _ in range(4):
        student = await make_student()
        await loans.issue(
            LoanCreate(book_id=book.book_id, student_id=student.student_id, days=7), "librarian"
        )
    repo = StockRepository(session, clock)

    with pytest.raises(InsufficientStock):
        await repo.adjust(StockAdjustmentCreate(book_id=book.book_id, copies_added=-3), "librarian")
    assert await repo.get_all(book_id=book.book_id) == []

    result = await repo.adjust(
        StockAdjustmentCreate(book_id=book.book_id, copies_added=-1, remarks="Damaged"),
        "librarian",
    )
    assert (result.total_copies, result.available_copies) == (4, 0)
    assert result.history.copies_added == -1
    assert result.history.book_name == book.title

    current = await BookRepository(session).get_by_id(book.book_id)
    assert current.total_copies - current.available_copies == await loans.count_open(book.book_id)


async def test_new_stock_is_logged(session, clock, make_book):
    book = await make_book(total_copies=1, publication_id=3)
    repo = StockRepository(session, clock)

    result = await repo.adjust(
        StockAdjustmentCreate(book_id=book.book_id, copies_added=4, remarks="Delivery"), "librarian"
    )

    assert (result.total_copies, result.available_copies) == (5, 5)
    history = await repo.get_all(publication_id=3, search_term=book.title)
    assert [h.book_stock_history_id for h in history] == [result.history.book_stock_history_id]
    assert history[0].created_by == "librarian"
    assert history[0].created_on == clock.now


async def test_zero_adjustment_is_rejected(session, clock, make_book):
    book = await make_book(total_copies=1)
    with pytest.raises(ValidationError):
        await StockRepository(session, clock).adjust(
            StockAdjustmentCreate(book_id=book.book_id, copies_added=0), "librarian"
        )


async def test_adjusting_unknown_book_is_not_found(session, clock):
    with pytest.raises(NotFound):
        await StockRepository(session, clock).adjust(
            StockAdjustmentCreate(book_id=999, copies_added=2), "librarian"
        )


async def test_only_remarks_are_editable(session, clock, make_book):
    book = await make_book(total_copies=1)
    repo = StockRepository(session, clock)
    result = await repo.adjust(
        StockAdjustmentCreate(book_id=book.book_id, copies_added=2, remarks="Delivery"), "librarian"
    )

    clock.advance(hours=1)
    edited = await repo.update_remarks(
        result.history.book_stock_history_id,
        StockRemarksUpdate(remarks="Delivery from publisher"),
        "auditor",
    )

    assert edited.remarks == "Delivery from publisher"
    assert edited.copies_added == 2
    assert edited.modified_by == "auditor"
    assert edited.modified_on == clock.now

    with pytest.raises(NotFound):
        await repo.update_remarks(999, StockRemarksUpdate(remarks="x"), "auditor")
