"""
Tests for the application-level health and debug endpoints.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from consent_portal.main import app


@pytest.fixture
def client():
    return TestClient(app)


class TestHealthEndpoints:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_ready_when_database_answers(self, client):
        with patch(
            "consent_portal.main._ping_database",
            AsyncMock(return_value={"database": "connected"}),
        ):
            response = client.get("/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready"}

    def test_not_ready_without_database(self, client):
        with patch(
            "consent_portal.main._ping_database",
            AsyncMock(return_value={"database": "error", "message": "refused"}),
        ):
            response = client.get("/ready")

        assert response.status_code == 503


class TestDebugJobs:
    def test_unknown_job_is_not_found(self, client):
        response = client.post("/debug/jobs/does_not_exist/trigger")

        assert response.status_code == 404
