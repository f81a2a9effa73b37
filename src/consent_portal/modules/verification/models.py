"""
Verification Models

One-time verification codes sent to institutional email addresses.
Codes are independent of students: they exist before any submission.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from consent_portal.core.database import Base


class VerificationCode(Base):
    """
    A one-time code issued to an email address.

    Only the bcrypt hash of the code is stored. The email is not unique:
    every issuance creates a new row and validation consults the newest
    unexpired one.
    """

    __tablename__ = "otps"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    otp_hash: Mapped[str] = mapped_column(Text, nullable=False)

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("idx_otps_email", "email"),
        Index("idx_otps_expires_at", "expires_at"),
    )
