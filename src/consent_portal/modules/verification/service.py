"""
Verification Service Layer

Issues and validates one-time codes proving control of an institutional
email address.

1. Issuance:
   - Reject addresses outside the institutional domain
   - Generate a 6 digit code, store its bcrypt hash with a 10 minute expiry
   - Email the plain code (the row is committed before the send attempt)

2. Validation:
   - Look up the newest unexpired code for the email
   - Compare with bcrypt (constant time)
   - On match, delete the matched row; if it is already gone a concurrent
     validation won and this one fails
   - Then delete every other code for the email (single use, no replay)

Security considerations:
- Codes come from the ``secrets`` CSPRNG
- Only salted hashes are stored; plain codes are never logged
- No attempt counting: each wrong guess is an independent comparison until the
  code expires or matches
"""

import asyncio
import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from consent_portal.core.config import settings
from consent_portal.core.email import EmailSender
from consent_portal.core.security import generate_numeric_code, hash_secret, verify_secret
from consent_portal.modules.verification import repository
from consent_portal.modules.verification.helpers import is_institutional_email, normalize_email

logger = logging.getLogger(__name__)


class VerificationServiceError(Exception):
    """Base exception for verification service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class InvalidEmailError(VerificationServiceError):
    """Raised when the email is not on the institutional domain."""

    def __init__(self, domain: str | None = None):
        domain = domain or settings.allowed_email_domain
        super().__init__(
            message=f"A valid @{domain} email is required.",
            error_code="INVALID_EMAIL",
            status_code=400,
        )


class CodeExpiredError(VerificationServiceError):
    """Raised when no active code exists for the email (expired, consumed or never issued)."""

    def __init__(self):
        super().__init__(
            message="OTP Expired, Please try again.",
            error_code="OTP_EXPIRED",
            status_code=400,
        )


class InvalidCodeError(VerificationServiceError):
    """Raised when the candidate code does not match the active code."""

    def __init__(self):
        super().__init__(
            message="Invalid OTP, Please enter correct OTP.",
            error_code="INVALID_OTP",
            status_code=400,
        )


class DeliveryFailedError(VerificationServiceError):
    """Raised when the mail collaborator rejects the send request."""

    def __init__(self):
        super().__init__(
            message="Failed to send OTP.",
            error_code="DELIVERY_FAILED",
            status_code=500,
        )


def _calculate_code_expiry(now: datetime | None = None) -> datetime:
    """Expiry instant for a code issued now."""
    return (now or datetime.now(UTC)) + timedelta(minutes=settings.otp_expiry_minutes)


async def issue_code(
    db: AsyncSession,
    sender: EmailSender,
    email: str,
) -> datetime:
    """
    Issue a new one-time code and email it.

    Args:
        db: Database session
        sender: Mail collaborator
        email: Target address (normalized here)

    Returns:
        The expiry instant of the issued code

    Raises:
        InvalidEmailError: If the address is not institutional
        DeliveryFailedError: If the email could not be sent. The stored code
            is left in place; only the newest code is ever consulted.
    """
    email = normalize_email(email)

    if not is_institutional_email(email, settings.allowed_email_domain):
        logger.warning("OTP requested for non-institutional email")
        raise InvalidEmailError()

    code = generate_numeric_code(settings.otp_length)
    otp_hash = await asyncio.to_thread(hash_secret, code)
    expires_at = _calculate_code_expiry()

    await repository.create_code(db, email=email, otp_hash=otp_hash, expires_at=expires_at)
    logger.info(f"Issued verification code for {email}, expires at {expires_at.isoformat()}")

    sent = await sender.send_verification_code(
        to_email=email,
        code=code,
        expiry_minutes=settings.otp_expiry_minutes,
    )
    if not sent:
        logger.error(f"Failed to deliver verification code to {email}")
        raise DeliveryFailedError()

    return expires_at


async def validate_code(
    db: AsyncSession,
    email: str,
    candidate: str,
) -> None:
    """
    Validate a candidate code and consume it.

    Args:
        db: Database session
        email: Address the code was issued to
        candidate: Code entered by the user

    Raises:
        CodeExpiredError: If there is no active code for the email, or a
            concurrent validation consumed it first
        InvalidCodeError: If the candidate does not match the newest active code
    """
    email = normalize_email(email)

    active = await repository.get_latest_active_code(db, email)
    if active is None:
        logger.info(f"No active verification code for {email}")
        raise CodeExpiredError()

    matches = await asyncio.to_thread(verify_secret, candidate.strip(), active.otp_hash)
    if not matches:
        logger.warning(f"Invalid verification code entered for {email}")
        raise InvalidCodeError()

    # Another validation consumed this code while we were comparing
    if await repository.delete_code(db, active.id) == 0:
        logger.warning(f"Verification code for {email} was already used")
        raise CodeExpiredError()

    deleted = await repository.delete_codes_for_email(db, email)
    logger.info(f"Email {email} verified, removed {deleted + 1} code(s)")
