"""
Submission Service Layer

Accepts a consent submission: student details, up to 10 images with their
per-image ages, and the signed consent form.

The flow has two phases linked only by the submission identity:

1. Storage (UploadReceiver):
   - All fields and parts are validated before anything is written
   - Files are written under directories named by a fresh submission id

2. Persistence (persist_submission):
   - One transaction inserts the student (id = submission id) and one image
     row per stored file, then commits
   - Any failure rolls back and schedules deletion of the submission's files
     without waiting for it

A student row therefore exists only if all of its files were written first.
Files without a student are a transient state cleaned up after rollback; a
crash between the two phases leaves them in place.
"""

import contextlib
import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from consent_portal.modules.submissions import repository
from consent_portal.modules.submissions.errors import (
    InvalidSubmissionError,
    SubmissionFailedError,
)
from consent_portal.modules.submissions.helpers import parse_image_ages
from consent_portal.modules.submissions.schemas import StudentSubmission
from consent_portal.modules.submissions.storage import (
    IncomingPart,
    StoredSubmission,
    UploadReceiver,
)
from consent_portal.modules.verification.helpers import normalize_email

logger = logging.getLogger(__name__)


def _validate_fields(data: StudentSubmission) -> StudentSubmission:
    """Check the consent flag and required text fields; normalize the email."""
    if not data.consent_given:
        raise InvalidSubmissionError("Consent must be given to submit images.")

    name = data.name.strip()
    email = normalize_email(data.email)
    if not name or not email:
        raise InvalidSubmissionError()

    return data.model_copy(update={"name": name, "email": email})


async def persist_submission(
    db: AsyncSession,
    receiver: UploadReceiver,
    data: StudentSubmission,
    stored: StoredSubmission,
    image_ages: list[int | None],
) -> UUID:
    """
    Write the student and its image rows in one transaction.

    Args:
        db: Database session (no transaction work pending)
        receiver: Receiver that stored the files, used for cleanup
        data: Validated student fields
        stored: Result of the storage phase
        image_ages: One entry per stored image, same order

    Returns:
        The committed student id (equal to the submission id)

    Raises:
        SubmissionFailedError: On any failure. The transaction is rolled back
            and file removal is scheduled but not awaited.
    """
    try:
        student = await repository.create_student(db, stored.submission_id, data)

        for file_path, image_age in zip(stored.image_paths, image_ages, strict=True):
            await repository.add_image(db, student.id, file_path, image_age)

        await db.commit()
    except Exception as e:
        logger.error(f"Submission {stored.submission_id} failed, rolling back: {e}")
        with contextlib.suppress(Exception):
            await db.rollback()
        receiver.discard(stored.submission_id)
        raise SubmissionFailedError() from e

    logger.info(
        f"Committed submission {student.id} with {len(stored.image_paths)} image(s)"
    )
    return student.id


async def submit(
    db: AsyncSession,
    receiver: UploadReceiver,
    data: StudentSubmission,
    images: list[IncomingPart],
    consent_form: IncomingPart | None,
    image_ages_raw: str,
) -> UUID:
    """
    Validate, store and persist a submission.

    Args:
        db: Database session
        receiver: Upload receiver bound to the storage roots
        data: Student fields from the form
        images: Image parts in upload order
        consent_form: The consent PDF part
        image_ages_raw: JSON array of ages aligned with ``images``

    Returns:
        The new student id

    Raises:
        InvalidSubmissionError: Missing/invalid fields, no consent, no images,
            no consent form, or misaligned image ages (nothing is written)
        InvalidUploadError: A part has the wrong type or size (nothing is written)
        StorageError: Writing the files failed
        SubmissionFailedError: The database transaction failed
    """
    data = _validate_fields(data)

    if not images:
        raise InvalidSubmissionError("Please upload at least one image.")
    if consent_form is None:
        raise InvalidSubmissionError("The signed consent form is required.")

    image_ages = parse_image_ages(image_ages_raw, len(images))

    stored = await receiver.receive(images, consent_form)

    return await persist_submission(db, receiver, data, stored, image_ages)
