"""
Fixtures for verification tests.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from consent_portal.core.email import EmailSender
from consent_portal.modules.verification.models import VerificationCode


@pytest.fixture
def mock_sender():
    """Create a mock email sender that accepts every message."""
    sender = MagicMock(spec=EmailSender)
    sender.send_verification_code = AsyncMock(return_value=True)
    return sender


@pytest.fixture
def sample_code():
    """An active verification code row."""
    code = MagicMock(spec=VerificationCode)
    code.id = uuid4()
    code.email = "a@iitk.ac.in"
    code.otp_hash = "hashed_code_value"
    code.expires_at = datetime.now(UTC) + timedelta(minutes=10)
    code.created_at = datetime.now(UTC)
    return code
