"""
Endpoint tests for POST /api/submit.

Files are written to a temporary storage root; the database session is mocked.
"""

import json
import time
from unittest.mock import AsyncMock
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from consent_portal.core.database import get_db
from consent_portal.main import app
from consent_portal.modules.submissions.models import StudentImage
from consent_portal.modules.submissions.storage import get_upload_receiver

JPEG = b"\xff\xd8fake-jpeg\xff\xd9"
PDF = b"%PDF-1.4 consent"


@pytest.fixture
def client(mock_db, receiver):
    async def override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_upload_receiver] = lambda: receiver
    yield TestClient(app)
    app.dependency_overrides.clear()


def _form(**overrides):
    data = {
        "name": "Asha Verma",
        "age": "21",
        "email": "asha@iitk.ac.in",
        "gender": "female",
        "consentGiven": "true",
        "imageAges": json.dumps([20, 21, 22]),
    }
    data.update(overrides)
    return data


def _files(images=3, image_content=JPEG, pdf_type="application/pdf"):
    files = [("images", (f"img{i}.jpg", image_content, "image/jpeg")) for i in range(images)]
    files.append(("consentForm", ("form.pdf", PDF, pdf_type)))
    return files


def _wait_until(predicate, timeout=2.0):
    """Poll for background cleanup running on the client's event loop."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


class TestSubmitEndpoint:
    def test_successful_submission(self, client, mock_db, storage_root, stored_files):
        response = client.post("/api/submit", data=_form(), files=_files())

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Submission successful!"
        student_id = UUID(body["studentId"])

        paths = [
            call.args[0].file_path
            for call in mock_db.add.call_args_list
            if isinstance(call.args[0], StudentImage)
        ]
        assert paths == [f"student_uploads/{student_id}/{n}.jpg" for n in (1, 2, 3)]
        assert stored_files(storage_root) == [
            f"consent_form/{student_id}/__consent_form.pdf",
            f"student_uploads/{student_id}/1.jpg",
            f"student_uploads/{student_id}/2.jpg",
            f"student_uploads/{student_id}/3.jpg",
        ]

    def test_consent_not_given(self, client, mock_db, storage_root):
        response = client.post("/api/submit", data=_form(consentGiven="false"), files=_files())

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "INVALID_SUBMISSION"
        assert list(storage_root.iterdir()) == []
        mock_db.add.assert_not_called()

    def test_oversized_image(self, client, mock_db, storage_root):
        files = _files(images=1)
        files.insert(1, ("images", ("big.jpg", b"x" * 4096, "image/jpeg")))

        response = client.post(
            "/api/submit", data=_form(imageAges=json.dumps([20, 21])), files=files
        )

        assert response.status_code == 400
        assert response.json()["detail"]["message"].startswith("File too large")
        assert list(storage_root.iterdir()) == []
        mock_db.add.assert_not_called()

    def test_consent_form_must_be_pdf(self, client, storage_root):
        response = client.post("/api/submit", data=_form(), files=_files(pdf_type="image/png"))

        assert response.status_code == 400
        assert response.json()["detail"] == {
            "error": "INVALID_UPLOAD",
            "message": "Invalid file type.",
        }
        assert list(storage_root.iterdir()) == []

    def test_missing_images(self, client):
        response = client.post(
            "/api/submit", data=_form(imageAges="[]"), files=_files(images=0)
        )

        assert response.status_code == 400

    def test_missing_field_is_validation_error(self, client):
        data = _form()
        del data["email"]

        response = client.post("/api/submit", data=data, files=_files())

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "VALIDATION_ERROR"

    def test_database_failure_removes_files(self, client, mock_db, receiver, storage_root):
        mock_db.commit = AsyncMock(side_effect=RuntimeError("duplicate key value"))

        response = client.post("/api/submit", data=_form(), files=_files())

        assert response.status_code == 500
        assert response.json()["detail"] == {
            "error": "SUBMISSION_FAILED",
            "message": "An error occurred during submission.",
        }
        assert "duplicate" not in response.text
        mock_db.rollback.assert_awaited_once()

        images_root = storage_root / "student_uploads"
        documents_root = storage_root / "consent_form"
        assert _wait_until(
            lambda: not any(images_root.iterdir()) and not any(documents_root.iterdir())
        )
