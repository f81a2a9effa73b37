"""
Submission Models

Students who gave consent and the images they submitted.
A student row is created only when the whole submission commits; image rows
are deleted together with their student.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from consent_portal.core.database import Base


class Student(Base):
    """
    Person record created on a successful submission.

    The id is the submission identity generated before any file was written,
    so it also names the student's storage directories.
    """

    __tablename__ = "students"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(Text, nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    gender: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    consent_given: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    images: Mapped[list["StudentImage"]] = relationship(
        "StudentImage",
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (Index("idx_students_email", "email"),)


class StudentImage(Base):
    """
    Metadata for one stored image.

    ``file_path`` is relative to the storage root so rows stay valid when the
    storage volume is mounted elsewhere.
    """

    __tablename__ = "student_images"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
    )

    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    # Age of the student when the photo was taken
    image_age: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    student: Mapped["Student"] = relationship("Student", back_populates="images")

    __table_args__ = (Index("idx_student_images_student_id", "student_id"),)
