"""
Submission File Storage

Receives the file parts of a submission and writes them under two storage
roots, one sub-directory per submission identity:

    <storage_root>/<images_dir>/<submission_id>/1.jpg, 2.png, ...
    <storage_root>/<documents_dir>/<submission_id>/__consent_form.pdf

Every part is checked (role/MIME pairing, size ceiling, counts) before the
first byte is written. Paths handed to the coordinator are relative to the
storage root.

Cleanup after a failed submission is fire-and-forget: ``discard`` schedules a
task that removes both directories and returns immediately. Completion is not
awaited or retried by the request; a crash before the task runs leaves orphaned
files behind.
"""

import asyncio
import enum
import logging
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import BinaryIO
from uuid import UUID, uuid4

from consent_portal.core.config import settings
from consent_portal.modules.submissions.errors import InvalidUploadError, StorageError

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
IMAGE_MIME_PREFIX = "image/"

_SAFE_EXTENSION = re.compile(r"\.[A-Za-z0-9]{1,10}")


class PartRole(str, enum.Enum):
    """Declared role of a file part."""

    IMAGE = "image"
    DOCUMENT = "document"


@dataclass
class IncomingPart:
    """A file part as received from the multipart request."""

    role: PartRole
    filename: str
    content_type: str
    file: BinaryIO
    size: int | None = None

    @property
    def mime_type(self) -> str:
        return self.content_type.split(";", 1)[0].strip().lower()


@dataclass
class SubmissionContext:
    """Per-request state threaded through the receiver while files are routed."""

    submission_id: UUID = field(default_factory=uuid4)
    image_count: int = 0

    def next_image_name(self, original_filename: str) -> str:
        """Sequential name (1, 2, ...) in arrival order, keeping the original extension."""
        self.image_count += 1
        return f"{self.image_count}{_extension_of(original_filename)}"


@dataclass(frozen=True)
class StoredSubmission:
    """Result of a completed storage phase."""

    submission_id: UUID
    image_paths: list[str]
    document_path: str


def _extension_of(filename: str) -> str:
    suffix = PurePosixPath(filename.replace("\\", "/")).suffix
    return suffix if _SAFE_EXTENSION.fullmatch(suffix) else ""


def _part_size(part: IncomingPart) -> int:
    if part.size is not None:
        return part.size
    part.file.seek(0, 2)
    size = part.file.tell()
    part.file.seek(0)
    return size


def _copy_to(source: BinaryIO, destination: Path) -> None:
    source.seek(0)
    with destination.open("wb") as out:
        shutil.copyfileobj(source, out)


class UploadReceiver:
    """
    Validates and durably stores the file parts of one submission.

    One instance is shared by the process; all per-request state lives in a
    SubmissionContext.
    """

    def __init__(
        self,
        storage_root: Path,
        images_dir_name: str = "student_uploads",
        documents_dir_name: str = "consent_form",
        document_filename: str = "__consent_form.pdf",
        max_file_bytes: int = 5 * 1024 * 1024,
        max_images: int = 10,
    ):
        self.storage_root = Path(storage_root)
        self.images_dir_name = images_dir_name
        self.documents_dir_name = documents_dir_name
        self.document_filename = document_filename
        self.max_file_bytes = max_file_bytes
        self.max_images = max_images
        self._pending_cleanups: set[asyncio.Task] = set()

    def image_dir(self, submission_id: UUID) -> Path:
        return self.storage_root / self.images_dir_name / str(submission_id)

    def document_dir(self, submission_id: UUID) -> Path:
        return self.storage_root / self.documents_dir_name / str(submission_id)

    def relative_path(self, path: Path) -> str:
        """Path relative to the storage root, with forward slashes."""
        return path.relative_to(self.storage_root).as_posix()

    def validate(self, images: list[IncomingPart], document: IncomingPart) -> None:
        """
        Check counts, role/MIME pairing and sizes of every part.

        Raises:
            InvalidUploadError: On the first violation found
        """
        if len(images) > self.max_images:
            raise InvalidUploadError(f"You can upload a maximum of {self.max_images} images.")

        for part in [*images, document]:
            if part.role is PartRole.IMAGE and not part.mime_type.startswith(IMAGE_MIME_PREFIX):
                raise InvalidUploadError("Invalid file type.")
            if part.role is PartRole.DOCUMENT and part.mime_type != PDF_MIME_TYPE:
                raise InvalidUploadError("Invalid file type.")
            if _part_size(part) > self.max_file_bytes:
                limit_mb = self.max_file_bytes // (1024 * 1024)
                raise InvalidUploadError(f"File too large. Maximum size is {limit_mb} MB per file.")

    async def receive(
        self,
        images: list[IncomingPart],
        document: IncomingPart,
    ) -> StoredSubmission:
        """
        Validate all parts, then write them under a fresh submission identity.

        Raises:
            InvalidUploadError: If any part is rejected (nothing is written)
            StorageError: If a write fails (already written files are discarded)
        """
        self.validate(images, document)

        context = SubmissionContext()
        image_dir = self.image_dir(context.submission_id)
        document_dir = self.document_dir(context.submission_id)

        try:
            await asyncio.to_thread(image_dir.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(document_dir.mkdir, parents=True, exist_ok=True)

            image_paths = []
            for part in images:
                destination = image_dir / context.next_image_name(part.filename)
                await asyncio.to_thread(_copy_to, part.file, destination)
                image_paths.append(self.relative_path(destination))

            document_path = document_dir / self.document_filename
            await asyncio.to_thread(_copy_to, document.file, document_path)
        except OSError as e:
            logger.error(f"Failed to store files for submission {context.submission_id}: {e}")
            self.discard(context.submission_id)
            raise StorageError() from e

        logger.info(
            f"Stored {len(image_paths)} image(s) and consent form "
            f"for submission {context.submission_id}"
        )
        return StoredSubmission(
            submission_id=context.submission_id,
            image_paths=image_paths,
            document_path=self.relative_path(document_path),
        )

    def remove_submission_files(self, submission_id: UUID) -> None:
        """Recursively delete both directories of a submission, ignoring errors."""
        shutil.rmtree(self.image_dir(submission_id), ignore_errors=True)
        shutil.rmtree(self.document_dir(submission_id), ignore_errors=True)

    def discard(self, submission_id: UUID) -> asyncio.Task:
        """
        Schedule removal of a submission's files without waiting for it.

        Must be called from a running event loop.
        """
        task = asyncio.create_task(
            asyncio.to_thread(self.remove_submission_files, submission_id),
            name=f"discard-submission-{submission_id}",
        )
        # The loop only keeps weak references to tasks
        self._pending_cleanups.add(task)
        task.add_done_callback(self._pending_cleanups.discard)
        logger.info(f"Scheduled cleanup of files for submission {submission_id}")
        return task

    async def wait_for_cleanups(self) -> None:
        """Wait until every scheduled cleanup has finished."""
        if self._pending_cleanups:
            await asyncio.gather(*list(self._pending_cleanups))


upload_receiver = UploadReceiver(
    storage_root=settings.storage_root,
    images_dir_name=settings.images_dir_name,
    documents_dir_name=settings.documents_dir_name,
    document_filename=settings.consent_form_filename,
    max_file_bytes=settings.max_upload_bytes,
    max_images=settings.max_images,
)


def get_upload_receiver() -> UploadReceiver:
    """FastAPI dependency returning the process-scoped upload receiver."""
    return upload_receiver
