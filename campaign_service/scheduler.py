# campaign_service/scheduler.py
"""
Background housekeeping scheduler.

Uses APScheduler to expire optimal time analysis jobs that never
finished, so a crashed worker does not block new analysis requests.
"""

import logging

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from campaign_service.db.session import SessionLocal
from campaign_service.services.optimal_time_analyzer import optimal_time_analyzer

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None


def expire_stale_analysis_jobs():
    db = SessionLocal()
    try:
        expired = optimal_time_analyzer.expire_stale_jobs(db)
        if expired:
            logger.info("Expired %d stale analysis jobs", expired)
    finally:
        db.close()


def _on_job_error(event):
    exc = event.exception
    logger.error(
        "Scheduled job FAILED: job_id=%s error=%s",
        event.job_id,
        exc,
        exc_info=(type(exc), exc, None) if exc else None,
    )
    if event.traceback:
        logger.error("Traceback for job %s:\n%s", event.job_id, event.traceback)


def _on_job_missed(event):
    logger.warning(
        "Scheduled job MISSED: job_id=%s scheduled_run_time=%s",
        event.job_id,
        event.scheduled_run_time,
    )


def init_scheduler():
    """Start the scheduler once per process."""
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already initialized")
        return scheduler

    scheduler = BackgroundScheduler(
        timezone="UTC",
        job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": 60},
    )
    scheduler.add_job(
        func=expire_stale_analysis_jobs,
        trigger=IntervalTrigger(minutes=1),
        id="expire_stale_analysis_jobs",
        name="Expire Stale Analysis Jobs",
        replace_existing=True,
    )
    scheduler.add_listener(_on_job_error, EVENT_JOB_ERROR)
    scheduler.add_listener(_on_job_missed, EVENT_JOB_MISSED)

    scheduler.start()
    logger.info("Background scheduler started")
    return scheduler


def shutdown_scheduler():
    global scheduler

    if scheduler is not None:
        scheduler.shutdown(wait=True)
        logger.info("Background scheduler shutdown complete")
        scheduler = None


def get_scheduler_status():
    if scheduler is None:
        return {"status": "not_initialized", "jobs": []}

    jobs = [
        {
            "id": job.id,
            "name": job.name,
            "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
        }
        for job in scheduler.get_jobs()
    ]
    return {"status": "running" if scheduler.running else "stopped", "jobs": jobs}
