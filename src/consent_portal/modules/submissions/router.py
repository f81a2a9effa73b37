"""
Submissions Router

Public endpoint receiving the consent form, the student's details and images.

Endpoints:
- POST /submit - multipart submission

Form fields:
- name, age, email, consentGiven ("true"), gender (optional)
- images: 1 to 10 image files
- consentForm: the signed consent PDF
- imageAges: JSON array of ages, one per image, in upload order
"""

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from consent_portal.core.database import get_db
from consent_portal.modules.submissions import service
from consent_portal.modules.submissions.errors import SubmissionServiceError
from consent_portal.modules.submissions.schemas import StudentSubmission, SubmissionResponse
from consent_portal.modules.submissions.storage import (
    IncomingPart,
    PartRole,
    UploadReceiver,
    get_upload_receiver,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_part(upload: UploadFile, role: PartRole) -> IncomingPart:
    return IncomingPart(
        role=role,
        filename=upload.filename or "",
        content_type=upload.content_type or "",
        file=upload.file,
        size=upload.size,
    )


@router.post(
    "/submit",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Consent and Images",
    description="""
Submit the consent form, student details and images.

All files are validated before anything is stored:
- `images`: image/* only, at most 10, each at most 5 MB
- `consentForm`: application/pdf, at most 5 MB
- `imageAges`: JSON array with exactly one entry per image

If saving to the database fails the stored files are removed in the background.
""",
    responses={
        201: {"description": "Submission stored", "model": SubmissionResponse},
        400: {
            "description": "Missing or invalid fields or files",
            "content": {
                "application/json": {
                    "example": {
                        "detail": {
                            "error": "INVALID_UPLOAD",
                            "message": "Invalid file type.",
                        }
                    }
                }
            },
        },
        500: {"description": "Storage or database failure"},
    },
)
async def submit(
    name: str = Form(..., min_length=1, max_length=200),
    age: int = Form(...),
    email: str = Form(..., min_length=1, max_length=255),
    consent_given: bool = Form(..., alias="consentGiven"),
    gender: str | None = Form(None, max_length=50),
    image_ages: str = Form(..., alias="imageAges"),
    images: list[UploadFile] | None = File(None),
    consent_form: UploadFile | None = File(None, alias="consentForm"),
    db: AsyncSession = Depends(get_db),
    receiver: UploadReceiver = Depends(get_upload_receiver),
) -> SubmissionResponse:
    data = StudentSubmission(
        name=name,
        age=age,
        gender=gender or None,
        email=email,
        consent_given=consent_given,
    )

    try:
        student_id = await service.submit(
            db=db,
            receiver=receiver,
            data=data,
            images=[_to_part(upload, PartRole.IMAGE) for upload in images or []],
            consent_form=(
                _to_part(consent_form, PartRole.DOCUMENT) if consent_form is not None else None
            ),
            image_ages_raw=image_ages,
        )

        logger.info(f"Submission accepted: student_id={student_id}")

        return SubmissionResponse(student_id=student_id)

    except SubmissionServiceError as e:
        if e.status_code >= 500:
            logger.error(f"Submission failed: {e.message}")
        else:
            logger.warning(f"Submission rejected: {e.message}")
        raise HTTPException(
            status_code=e.status_code,
            detail={
                "error": e.error_code,
                "message": e.message,
            },
        ) from e
    except Exception as e:
        logger.exception(f"Unexpected error during submission: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "INTERNAL_ERROR",
                "message": "An error occurred during submission.",
            },
        ) from e
