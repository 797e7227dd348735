"""Pydantic schemas for student data validation."""

from typing import Optional
from pydantic import Field

from components.core.schemas import RequestModel, WireModel


class StudentCreate(RequestModel):
    """Schema for student creation."""
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    course_id: Optional[int] = None


class Student(WireModel):
    """Schema for student response."""
    student_id: int = Field(validation_alias="id", serialization_alias="StudentId")
    first_name: str
    last_name: str
    email: str
    course_id: Optional[int] = None
    is_active: bool
