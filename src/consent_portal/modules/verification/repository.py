"""
Verification Code Repository

Database operations for one-time verification codes (the code store).

Design Principles:
- Single responsibility - only database operations, no business logic
- Timezone-aware datetime handling (UTC)
- Expired codes are filtered at read time; deleting them is optional housekeeping
"""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import VerificationCode


async def create_code(
    db: AsyncSession,
    email: str,
    otp_hash: str,
    expires_at: datetime,
) -> VerificationCode:
    """Persist a newly issued code."""

    new_code = VerificationCode(
        email=email,
        otp_hash=otp_hash,
        expires_at=expires_at,
    )

    db.add(new_code)
    await db.commit()
    await db.refresh(new_code)

    return new_code


async def get_latest_active_code(
    db: AsyncSession,
    email: str,
    now: datetime | None = None,
) -> VerificationCode | None:
    """
    Get the most recently created unexpired code for an email.

    Older outstanding codes for the same email are never consulted.
    """
    now = now or datetime.now(UTC)

    result = await db.execute(
        select(VerificationCode)
        .where(
            VerificationCode.email == email,
            VerificationCode.expires_at > now,
        )
        .order_by(VerificationCode.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def delete_code(db: AsyncSession, code_id: UUID) -> int:
    """
    Delete one code by id without committing.

    Concurrent deletes of the same row serialize on the row lock, so only one
    caller sees a rowcount of 1.

    Returns:
        Number of rows deleted (0 if another request already consumed it)
    """
    result = await db.execute(delete(VerificationCode).where(VerificationCode.id == code_id))
    return result.rowcount or 0


async def delete_codes_for_email(db: AsyncSession, email: str) -> int:
    """
    Delete every code issued to an email.

    Used after a successful validation so neither the consumed code nor any
    other outstanding code for the address can be replayed.

    Returns:
        Number of rows deleted
    """
    result = await db.execute(delete(VerificationCode).where(VerificationCode.email == email))
    await db.commit()
    return result.rowcount or 0


async def delete_expired_codes(db: AsyncSession, before: datetime | None = None) -> int:
    """Delete codes that expired before the given instant (defaults to now)."""
    before = before or datetime.now(UTC)

    result = await db.execute(
        delete(VerificationCode).where(VerificationCode.expires_at <= before)
    )
    await db.commit()
    return result.rowcount or 0
