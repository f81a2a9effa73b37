"""
Verification Router

Public endpoints for proving control of an institutional email address.

Endpoints:
- POST /send-otp - Issue a one-time code and email it
- POST /verify-otp - Validate and consume a one-time code
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from consent_portal.core.database import get_db
from consent_portal.core.email import EmailSender, get_email_sender
from consent_portal.modules.verification import service
from consent_portal.modules.verification.schemas import (
    MessageResponse,
    SendCodeRequest,
    VerifyCodeRequest,
)
from consent_portal.modules.verification.service import VerificationServiceError

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_http_exception(e: VerificationServiceError) -> HTTPException:
    return HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    )


@router.post(
    "/send-otp",
    response_model=MessageResponse,
    summary="Send Verification Code",
    description="""
Email a 6 digit one-time code to an institutional address.

The code expires after 10 minutes. Requesting a new code does not invalidate
older ones, but only the newest unexpired code is accepted.
""",
    responses={
        200: {"description": "Code sent", "model": MessageResponse},
        400: {
            "description": "Email missing or not institutional",
            "content": {
                "application/json": {
                    "example": {
                        "detail": {
                            "error": "INVALID_EMAIL",
                            "message": "A valid @iitk.ac.in email is required.",
                        }
                    }
                }
            },
        },
        500: {"description": "Code could not be issued or delivered"},
    },
)
async def send_otp(
    data: SendCodeRequest,
    db: AsyncSession = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
) -> MessageResponse:
    try:
        await service.issue_code(db, sender, data.email)
        return MessageResponse(message="OTP sent successfully.")

    except VerificationServiceError as e:
        if e.status_code >= 500:
            logger.error(f"OTP issuance failed: {e.message}")
        else:
            logger.warning(f"OTP request rejected: {e.message}")
        raise _to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Unexpected error sending OTP: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "INTERNAL_ERROR",
                "message": "Failed to send OTP.",
            },
        ) from e


@router.post(
    "/verify-otp",
    response_model=MessageResponse,
    summary="Verify Code",
    description="""
Validate a one-time code against the newest unexpired code for the email.

On success every outstanding code for the email is deleted, so a code can be
used only once.
""",
    responses={
        200: {"description": "Email verified", "model": MessageResponse},
        400: {
            "description": "Missing fields, expired code or wrong code",
            "content": {
                "application/json": {
                    "example": {
                        "detail": {
                            "error": "OTP_EXPIRED",
                            "message": "OTP Expired, Please try again.",
                        }
                    }
                }
            },
        },
        500: {"description": "Internal error"},
    },
)
async def verify_otp(
    data: VerifyCodeRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    try:
        await service.validate_code(db, data.email, data.otp)
        return MessageResponse(message="Email verified successfully.")

    except VerificationServiceError as e:
        logger.warning(f"OTP validation failed: {e.message}")
        raise _to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Unexpected error verifying OTP: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "INTERNAL_ERROR",
                "message": "Internal server error.",
            },
        ) from e
