"""
Shared fixtures for the Consent Portal tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from consent_portal.core.config import settings


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    """Use the minimum bcrypt cost so hashing tests stay fast."""
    monkeypatch.setattr(settings, "otp_hash_rounds", 4)


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.flush = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db
