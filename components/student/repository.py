"""Repository for student operations."""

import logging
from typing import List, Optional
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.database import atomic
from components.core.exceptions import NotFound, ValidationError
from components.student.models import Student
from components.student import schemas

logger = logging.getLogger(__name__)


class StudentRepository:
    """Repository for student operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def create(self, student: schemas.StudentCreate) -> schemas.Student:
        """Create a new student."""
        async with atomic(self.session):
            if await self.exists(student.email):
                raise ValidationError(f"Student with email {student.email} already exists")
            db_student = Student(
                first_name=student.first_name,
                last_name=student.last_name,
                email=student.email,
                course_id=student.course_id,
                is_active=True,
            )
            self.session.add(db_student)
            await self.session.flush()
        logger.info("Student created: %s", db_student.id)
        return schemas.Student.model_validate(db_student)

    async def get(self, student_id: int) -> Student:
        """Get the student row or raise NotFound."""
        result = await self.session.execute(
            select(Student).where(Student.id == student_id)
        )
        student = result.scalar_one_or_none()
        if student is None:
            raise NotFound(f"Student not found: {student_id}")
        return student

    async def get_by_id(self, student_id: int) -> schemas.Student:
        """Get student by ID."""
        return schemas.Student.model_validate(await self.get(student_id))

    async def exists(self, email: str) -> bool:
        """Check if student with given email exists."""
        result = await self.session.execute(
            select(Student.id).where(Student.email == email)
        )
        return result.scalar_one_or_none() is not None

    async def get_all(
        self,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[schemas.Student]:
        """Get all students with optional name/email search."""
        query = select(Student)

        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(or_(
                Student.first_name.like(pattern),
                Student.last_name.like(pattern),
                Student.email.like(pattern),
            ))

        query = query.order_by(Student.id).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return [schemas.Student.model_validate(s) for s in result.scalars().all()]
