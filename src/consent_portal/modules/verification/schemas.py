"""
Verification Schemas

Pydantic schemas for the one-time code endpoints.
"""

from pydantic import BaseModel, Field


class SendCodeRequest(BaseModel):
    """Request body for POST /send-otp."""

    email: str = Field(..., min_length=1, max_length=255)


class VerifyCodeRequest(BaseModel):
    """Request body for POST /verify-otp."""

    email: str = Field(..., min_length=1, max_length=255)
    otp: str = Field(..., min_length=1, max_length=32)


class MessageResponse(BaseModel):
    message: str
