"""Pydantic schemas for book data validation."""

from datetime import datetime
from typing import Optional
from pydantic import Field

from components.core.schemas import RequestModel, WireModel


class BookCreate(RequestModel):
    """Schema for book creation."""
    isbn_number: str = Field(min_length=1, max_length=20)
    title: str = Field(min_length=1, max_length=255)
    author: str = Field(min_length=1, max_length=255)
    course_id: Optional[int] = None
    subject_id: Optional[int] = None
    publication_id: Optional[int] = None
    total_copies: int = Field(ge=0)
    created_by: Optional[str] = None


class Book(WireModel):
    """Schema for book response."""
    book_id: int = Field(validation_alias="id", serialization_alias="BookId")
    isbn_number: str
    title: str
    author: str
    course_id: Optional[int] = None
    subject_id: Optional[int] = None
    publication_id: Optional[int] = None
    total_copies: int
    available_copies: int
    is_active: bool
    created_by: str
    created_on: datetime
