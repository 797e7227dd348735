"""Application configuration and router setup."""

import logging
from contextlib import asynccontextmanager

import fastapi
from fastapi.exceptions import RequestValidationError
from fastapi.middleware import cors

from components.core.config import get_settings
from components.core.exceptions import LibraryError
from components.core.init_db import db_manager
from restapi import errors
from restapi.endpoints import (
    book,
    book_issue,
    book_stock_history,
    health_check,
    library_payment,
    penalty,
    reports,
    student,
)

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Create tables on startup and release the pool on shutdown."""
    logger.info("Starting library back office...")
    await db_manager.create_all()
    yield
    logger.info("Shutting down library back office...")
    await db_manager.dispose()


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = fastapi.FastAPI(
        title=settings.API_TITLE,
        description="Book circulation, inventory and fine settlement",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LibraryError, errors.library_error_handler)
    app.add_exception_handler(RequestValidationError, errors.request_validation_error_handler)
    app.add_exception_handler(Exception, errors.general_exception_handler)

    # Include routers
    app.include_router(health_check.router)
    app.include_router(book.router)
    app.include_router(student.router)
    app.include_router(book_issue.router)
    app.include_router(penalty.router)
    app.include_router(library_payment.router)
    app.include_router(book_stock_history.router)
    app.include_router(reports.router)

    return app
