"""
Submission Repository

Database operations for students and their images.

These functions never commit: the coordinator owns the transaction so the
student and all of its image rows are written atomically.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from .models import Student, StudentImage
from .schemas import StudentSubmission


async def create_student(
    db: AsyncSession,
    student_id: UUID,
    data: StudentSubmission,
) -> Student:
    """Add a student row inside the current transaction and flush it."""

    new_student = Student(
        id=student_id,
        name=data.name,
        age=data.age,
        gender=data.gender,
        email=data.email,
        consent_given=data.consent_given,
    )

    db.add(new_student)
    await db.flush()

    return new_student


async def add_image(
    db: AsyncSession,
    student_id: UUID,
    file_path: str,
    image_age: int | None,
) -> StudentImage:
    """Add an image row for a student inside the current transaction."""

    new_image = StudentImage(
        student_id=student_id,
        file_path=file_path,
        image_age=image_age,
    )

    db.add(new_image)

    return new_image
