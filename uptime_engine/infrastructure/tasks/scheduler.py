"""Background task scheduler using APScheduler.

This module configures and manages the periodic service status recalculation.

Uses APScheduler's AsyncIOScheduler for in-process scheduling. Running several
workers is safe: recalculation of a service is serialized by its row lock.
"""

from datetime import datetime, timezone

import structlog
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED, JobExecutionEvent
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from uptime_engine.infrastructure.config.settings import Settings, get_settings

logger = structlog.get_logger(__name__)

RECALCULATION_JOB_ID = "recalculate_service_statuses"

# Global scheduler instance
_scheduler: AsyncIOScheduler | None = None


def get_scheduler() -> AsyncIOScheduler:
    """Get or create the global scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = _create_scheduler()
    return _scheduler


def _create_scheduler() -> AsyncIOScheduler:
    """Create and configure the APScheduler instance."""
    settings = get_settings()

    scheduler = AsyncIOScheduler(
        timezone="UTC",
        job_defaults={
            "coalesce": True,  # Combine missed runs into one
            "max_instances": 1,  # Prevent concurrent runs of the same job
            "misfire_grace_time": 300,
        },
    )
    scheduler.add_listener(_log_job_event, EVENT_JOB_ERROR | EVENT_JOB_MISSED)

    _register_jobs(scheduler, settings)

    logger.info("Background task scheduler created")
    return scheduler


def _log_job_event(event: JobExecutionEvent) -> None:
    """Log runs that were skipped or escaped the task's own error handling."""
    if event.code == EVENT_JOB_MISSED:
        logger.warning(
            "Scheduled job run missed",
            job_id=event.job_id,
            scheduled_run_time=event.scheduled_run_time,
        )
    else:
        logger.error(
            "Scheduled job raised",
            job_id=event.job_id,
            error=str(event.exception),
            error_type=type(event.exception).__name__,
        )


def _register_jobs(scheduler: AsyncIOScheduler, settings: Settings) -> None:
    """Register all scheduled jobs.

    With STATUS_RECALCULATION_ON_STARTUP the first recalculation runs as soon
    as the scheduler starts instead of one interval later.

    Args:
        scheduler: APScheduler instance
        settings: Application settings
    """
    # Imported here to avoid circular imports
    from uptime_engine.infrastructure.tasks.recalculate_statuses import (
        recalculate_service_statuses,
    )

    task_settings = settings.background_tasks
    interval_minutes = task_settings.status_recalculation_interval_minutes
    extra = {}
    if task_settings.status_recalculation_on_startup:
        extra["next_run_time"] = datetime.now(timezone.utc)

    scheduler.add_job(
        recalculate_service_statuses,
        trigger=IntervalTrigger(minutes=interval_minutes),
        id=RECALCULATION_JOB_ID,
        name="Recalculate service statuses from active incidents",
        replace_existing=True,
        **extra,
    )
    logger.info(
        "Registered service status recalculation job",
        interval_minutes=interval_minutes,
        run_on_startup=task_settings.status_recalculation_on_startup,
    )


async def start_scheduler() -> None:
    """Start the background task scheduler."""
    scheduler = get_scheduler()

    if scheduler.running:
        logger.warning("Scheduler already running, skipping start")
        return

    scheduler.start()
    logger.info("Background task scheduler started")


async def shutdown_scheduler() -> None:
    """Gracefully shutdown the background task scheduler.

    Waits for currently executing jobs to complete.
    """
    global _scheduler

    if _scheduler is None:
        logger.warning("Scheduler not initialized, skipping shutdown")
        return

    if not _scheduler.running:
        logger.warning("Scheduler not running, skipping shutdown")
        _scheduler = None
        return

    logger.info("Shutting down background task scheduler...")
    _scheduler.shutdown(wait=True)

    logger.info("Background task scheduler shut down successfully")
    _scheduler = None


def trigger_job_now(job_id: str = RECALCULATION_JOB_ID) -> None:
    """Manually trigger a scheduled job immediately.

    Raises:
        ValueError: If job_id not found
    """
    scheduler = get_scheduler()
    job = scheduler.get_job(job_id)

    if job is None:
        raise ValueError(f"Job not found: {job_id}")

    job.modify(next_run_time=None)
    logger.info("Manually triggered job", job_id=job_id)
