"""
Unit tests for the Resend email sender.
"""

from unittest.mock import patch

import pytest

from consent_portal.core.config import settings
from consent_portal.core.email import OTP_EMAIL_SUBJECT, EmailSender


class TestSendEmail:
    """Tests for EmailSender.send_email."""

    @pytest.mark.asyncio
    async def test_without_api_key_in_development_logs_and_succeeds(self, monkeypatch):
        monkeypatch.setattr(settings, "python_env", "development")
        sender = EmailSender(api_key=None, from_address="portal@example.com")

        with patch("consent_portal.core.email.resend.Emails.send") as mock_send:
            assert await sender.send_email("a@iitk.ac.in", "Hi", "<p>Hi</p>") is True
            mock_send.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("environment", ["production", "staging"])
    async def test_without_api_key_outside_development_fails(self, monkeypatch, environment):
        monkeypatch.setattr(settings, "python_env", environment)
        sender = EmailSender(api_key=None, from_address="portal@example.com")

        with patch("consent_portal.core.email.resend.Emails.send") as mock_send:
            assert await sender.send_email("a@iitk.ac.in", "Hi", "<p>Hi</p>") is False
            mock_send.assert_not_called()

    @pytest.mark.asyncio
    async def test_sends_through_resend(self):
        sender = EmailSender(api_key="re_test", from_address="portal@example.com")

        with patch(
            "consent_portal.core.email.resend.Emails.send", return_value={"id": "email_1"}
        ) as mock_send:
            assert await sender.send_email("a@iitk.ac.in", "Hi", "<p>Hi</p>") is True

        params = mock_send.call_args.args[0]
        assert params["to"] == ["a@iitk.ac.in"]
        assert params["from"] == "portal@example.com"

    @pytest.mark.asyncio
    async def test_provider_error_returns_false(self):
        sender = EmailSender(api_key="re_test", from_address="portal@example.com")

        with patch(
            "consent_portal.core.email.resend.Emails.send", side_effect=RuntimeError("rejected")
        ):
            assert await sender.send_email("a@iitk.ac.in", "Hi", "<p>Hi</p>") is False


class TestSendVerificationCode:
    @pytest.mark.asyncio
    async def test_body_contains_code_and_expiry(self):
        sender = EmailSender(api_key="re_test", from_address="portal@example.com")

        with patch(
            "consent_portal.core.email.resend.Emails.send", return_value={"id": "email_1"}
        ) as mock_send:
            await sender.send_verification_code("a@iitk.ac.in", "482913", 10)

        params = mock_send.call_args.args[0]
        assert params["subject"] == OTP_EMAIL_SUBJECT
        assert "482913" in params["html"]
        assert "10 minutes" in params["html"]
