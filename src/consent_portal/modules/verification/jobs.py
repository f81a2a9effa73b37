"""
Verification Background Jobs

Hourly purge of expired one-time codes. Expired codes are already ignored by
validation, so the purge only keeps the table small.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from apscheduler.triggers.interval import IntervalTrigger

from consent_portal.core.config import settings
from consent_portal.core.database import async_session_maker
from consent_portal.core.scheduler import register_job
from consent_portal.modules.verification import repository

logger = logging.getLogger(__name__)

JOB_ID_PURGE_EXPIRED_CODES = "verification_purge_expired_codes"


async def purge_expired_codes() -> dict[str, Any]:
    """Delete verification codes whose expiry has passed."""
    now = datetime.now(UTC)

    async with async_session_maker() as db:
        deleted = await repository.delete_expired_codes(db, before=now)

    logger.info(f"Purged {deleted} expired verification code(s)")
    return {"deleted": deleted, "before": now.isoformat()}


def register_verification_jobs() -> None:
    """Register the verification jobs with the scheduler."""
    register_job(
        job_id=JOB_ID_PURGE_EXPIRED_CODES,
        func=purge_expired_codes,
        trigger=IntervalTrigger(minutes=settings.purge_interval_minutes),
    )
    logger.info(
        f"Registered job: {JOB_ID_PURGE_EXPIRED_CODES} "
        f"(interval: {settings.purge_interval_minutes} minutes)"
    )
