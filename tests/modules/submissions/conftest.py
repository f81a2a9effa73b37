"""
Fixtures for submission tests.
"""

import io

import pytest

from consent_portal.modules.submissions.schemas import StudentSubmission
from consent_portal.modules.submissions.storage import IncomingPart, PartRole, UploadReceiver


@pytest.fixture
def storage_root(tmp_path):
    root = tmp_path / "data"
    root.mkdir()
    return root


@pytest.fixture
def receiver(storage_root):
    """Upload receiver writing under a temporary storage root, 1 KiB per file."""
    return UploadReceiver(
        storage_root=storage_root,
        images_dir_name="student_uploads",
        documents_dir_name="consent_form",
        document_filename="__consent_form.pdf",
        max_file_bytes=1024,
        max_images=10,
    )


@pytest.fixture
def make_image():
    """Factory for image parts."""

    def _make(filename="photo.jpg", content=b"\xff\xd8fake-jpeg", content_type="image/jpeg"):
        return IncomingPart(
            role=PartRole.IMAGE,
            filename=filename,
            content_type=content_type,
            file=io.BytesIO(content),
            size=len(content),
        )

    return _make


@pytest.fixture
def make_document():
    """Factory for consent form parts."""

    def _make(content=b"%PDF-1.4 consent", content_type="application/pdf"):
        return IncomingPart(
            role=PartRole.DOCUMENT,
            filename="__consent_form.pdf",
            content_type=content_type,
            file=io.BytesIO(content),
            size=len(content),
        )

    return _make


@pytest.fixture
def sample_submission():
    """Valid student fields with consent given."""
    return StudentSubmission(
        name="Asha Verma",
        age=21,
        gender="female",
        email="asha@iitk.ac.in",
        consent_given=True,
    )


@pytest.fixture
def stored_files():
    """Lists all files below a directory as sorted relative posix paths."""

    def _list(root):
        return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())

    return _list
