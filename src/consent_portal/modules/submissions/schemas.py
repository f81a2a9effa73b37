"""
Submission Schemas

Pydantic schemas for the consent form fields and the submission response.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class StudentSubmission(BaseModel):
    """Form fields describing the student, as received by POST /submit."""

    name: str = Field(..., min_length=1, max_length=200)
    age: int
    gender: str | None = Field(None, max_length=50)
    email: str = Field(..., min_length=1, max_length=255)
    consent_given: bool


class SubmissionResponse(BaseModel):
    """Response after a successful submission."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "Submission successful!"
    student_id: UUID = Field(..., alias="studentId")
