"""
Email Service using Resend

Sends the one-time verification code for the image collection portal.
The sender is a process-scoped capability: one instance is created from the
settings and handed to the services through the ``get_email_sender`` dependency.
"""

import asyncio
import logging

import resend

from consent_portal.core.config import settings

logger = logging.getLogger(__name__)

OTP_EMAIL_SUBJECT = "[Smart Search] Verify email for Image Collection Portal"


class EmailSender:
    """
    Thin wrapper around the Resend API.

    When no API key is configured, development logs the email instead of
    sending it and reports success; any other environment reports failure.
    """

    def __init__(self, api_key: str | None, from_address: str):
        self.api_key = api_key
        self.from_address = from_address

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
    ) -> bool:
        """
        Send an email using Resend.

        Args:
            to_email: Recipient email address
            subject: Email subject line
            html_content: HTML content of the email

        Returns:
            True if the email was accepted for delivery
        """
        if not self.api_key:
            if not settings.is_development:
                logger.error(f"RESEND_API_KEY not set - cannot send email to {to_email}")
                return False
            logger.warning("RESEND_API_KEY not set - logging email instead of sending")
            logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
            return True

        resend.api_key = self.api_key

        try:
            params: resend.Emails.SendParams = {
                "from": self.from_address,
                "reply_to": self.from_address,
                "to": [to_email],
                "subject": subject,
                "html": html_content,
            }

            # Run sync Resend call in thread pool to avoid blocking event loop
            email = await asyncio.to_thread(resend.Emails.send, params)
            logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
            return True
        except Exception as e:
            logger.error(f"Failed to send email to {to_email}: {e}")
            return False

    async def send_verification_code(
        self,
        to_email: str,
        code: str,
        expiry_minutes: int,
    ) -> bool:
        """Send the one-time verification code."""
        html_content = f"""
    <!DOCTYPE html>
    <html>
    <body style="font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937;">
        <p><b>Your OTP to verify email for consent form on image collection portal is: {code}</b></p>
        <p>It will expire in {expiry_minutes} minutes.</p>
        <br>
        <p>This is an automated message. Please do not reply to this email.</p>
    </body>
    </html>
    """
        return await self.send_email(
            to_email=to_email,
            subject=OTP_EMAIL_SUBJECT,
            html_content=html_content,
        )


email_sender = EmailSender(settings.resend_api_key, settings.email_from)


def get_email_sender() -> EmailSender:
    """FastAPI dependency returning the process-scoped email sender."""
    return email_sender


__all__ = ["EmailSender", "OTP_EMAIL_SUBJECT", "email_sender", "get_email_sender"]
