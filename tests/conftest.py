"""Shared fixtures: in-memory database, controllable clock and an API client."""

from datetime import datetime, timedelta

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from components.book.repository import BookRepository
from components.book.schemas import BookCreate
from components.core.clock import get_clock
from components.core.database import Base, DatabaseManager
from components.core.init_db import get_db
from components.student.repository import StudentRepository
from components.student.schemas import StudentCreate
from restapi.router import create_app

START = datetime(2024, 3, 1, 9, 0, 0)


class FakeClock:
    """Clock that only moves when a test moves it."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(START)


@pytest.fixture
async def db_manager():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    manager = DatabaseManager(engine)
    await manager.create_all()
    yield manager
    await manager.dispose()


@pytest.fixture
async def session(db_manager):
    async with db_manager.get_db() as session:
        yield session


@pytest.fixture
async def client(db_manager, clock):
    app = create_app()

    async def override_get_db():
        async with db_manager.get_db() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_book(session):
    counter = {"n": 0}

    async def _make_book(total_copies: int = 1, title: str = None, **kwargs):
        counter["n"] += 1
        n = counter["n"]
        data = BookCreate(
            isbn_number=kwargs.pop("isbn_number", f"978000000{n:04d}"),
            title=title or f"Book {n}",
            author=kwargs.pop("author", "Author"),
            total_copies=total_copies,
            **kwargs,
        )
        return await BookRepository(session).create(data, "librarian")

    return _make_book


@pytest.fixture
def make_student(session):
    counter = {"n": 0}

    async def _make_student(first_name: str = "Asha", last_name: str = "Verma"):
        counter["n"] += 1
        data = StudentCreate(
            first_name=first_name,
            last_name=last_name,
            email=f"student{counter['n']}@example.edu",
        )
        return await StudentRepository(session).create(data)

    return _make_student
