"""
Background Job Scheduler

Periodic housekeeping (currently the purge of expired verification codes)
runs on an APScheduler AsyncIOScheduler inside the API process.

Modules register their jobs at startup, before or after the scheduler is
running. Any registered job can also be run on demand from the debug endpoints.
"""

import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.base import BaseTrigger

logger = logging.getLogger(__name__)

JobFunc = Callable[[], Coroutine[Any, Any, Any]]

SCHEDULER_TIMEZONE = "UTC"

JOB_DEFAULTS = {
    "coalesce": True,  # one run after downtime, not one per missed interval
    "max_instances": 1,
    "misfire_grace_time": 300,
}


@dataclass(frozen=True)
class RegisteredJob:
    job_id: str
    func: JobFunc
    trigger: BaseTrigger


_scheduler: AsyncIOScheduler | None = None
_job_registry: dict[str, RegisteredJob] = {}


def _on_job_event(event: JobExecutionEvent) -> None:
    if event.exception:
        logger.error(
            f"Scheduled job {event.job_id} raised: {event.exception}", exc_info=event.exception
        )
    else:
        logger.info(f"Scheduled job {event.job_id} finished")


def _schedule(scheduler: AsyncIOScheduler, job: RegisteredJob) -> None:
    scheduler.add_job(job.func, trigger=job.trigger, id=job.job_id, replace_existing=True)
    logger.info(f"Scheduled job {job.job_id} ({job.trigger})")


def get_scheduler() -> AsyncIOScheduler | None:
    return _scheduler


def register_job(job_id: str, func: JobFunc, trigger: BaseTrigger) -> None:
    """
    Add a job to the registry.

    A running scheduler picks it up immediately; otherwise it is scheduled by
    ``start_scheduler``.
    """
    job = RegisteredJob(job_id=job_id, func=func, trigger=trigger)
    _job_registry[job_id] = job

    if _scheduler is not None:
        _schedule(_scheduler, job)


async def start_scheduler() -> AsyncIOScheduler:
    """Start the scheduler with every registered job. Idempotent."""
    global _scheduler

    if _scheduler is not None and _scheduler.running:
        return _scheduler

    scheduler = AsyncIOScheduler(timezone=SCHEDULER_TIMEZONE, job_defaults=JOB_DEFAULTS)
    scheduler.add_listener(_on_job_event, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    for job in _job_registry.values():
        _schedule(scheduler, job)

    scheduler.start()
    _scheduler = scheduler

    logger.info(f"Scheduler started with {len(_job_registry)} job(s)")
    return scheduler


async def stop_scheduler() -> None:
    """Shut the scheduler down, letting running jobs finish."""
    global _scheduler

    if _scheduler is None:
        return

    if _scheduler.running:
        _scheduler.shutdown(wait=True)
        logger.info("Scheduler stopped")

    _scheduler = None


async def trigger_job_manually(job_id: str) -> dict[str, Any]:
    """
    Run a registered job now, outside its schedule.

    Failures of the job are reported in the returned dict, not raised.

    Raises:
        ValueError: If no job is registered under job_id
    """
    job = _job_registry.get(job_id)
    if job is None:
        raise ValueError(f"Job {job_id} not found. Registered jobs: {sorted(_job_registry)}")

    run: dict[str, Any] = {"job_id": job_id, "executed_at": datetime.now(UTC).isoformat()}

    try:
        run["result"] = await job.func()
        run["status"] = "success"
    except Exception as e:
        logger.error(f"On-demand run of {job_id} failed: {e}", exc_info=True)
        run["status"] = "error"
        run["error"] = str(e)

    return run


def list_registered_jobs() -> list[dict[str, Any]]:
    """Registered job ids with their next run time (None when not scheduled)."""
    jobs = []

    for job_id in _job_registry:
        scheduled = _scheduler.get_job(job_id) if _scheduler is not None else None
        next_run = scheduled.next_run_time if scheduled is not None else None
        jobs.append(
            {"job_id": job_id, "next_run_time": next_run.isoformat() if next_run else None}
        )

    return jobs
