"""
Background scheduler - runs periodic jobs inside the FastAPI process.

Jobs:
  - Credential rotation check (daily, ROTATION_CHECK_HOUR_UTC)
"""
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from app.config import get_settings

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler(daemon=True)


def _run_rotation_check():
    from app.infrastructure.db.session import session_scope
    from app.application.rotation_check import check_credential_rotation

    try:
        with session_scope() as db:
            check_credential_rotation(db)
    except Exception:
        logger.exception("Credential rotation check job failed")


def start_scheduler():
    """Start the background scheduler with all periodic jobs."""
    hour = get_settings().ROTATION_CHECK_HOUR_UTC
    scheduler.add_job(
        _run_rotation_check,
        CronTrigger(hour=hour, minute=0),
        id="credential_rotation_check",
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Scheduler started: credential_rotation_check (%02d:00 UTC)", hour)


def shutdown_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
