import logging

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.orm import Session

from studio.config import settings
from studio.db import SessionLocal
from studio.domain.jobs import lesson_reminders


scheduler = BackgroundScheduler(timezone=settings.app_timezone)
logger = logging.getLogger(__name__)


def lesson_reminders_job():
    db: Session = SessionLocal()
    try:
        lesson_reminders.execute(lesson_reminders.build_dispatcher(db))
    except lesson_reminders.ReminderRunInProgress:
        logger.info('lesson_reminders_job_skipped reason=run_in_progress')
    finally:
        db.close()


def start_scheduler():
    if not settings.enable_scheduler:
        logger.info('scheduler_disabled')
        return
    scheduler.add_job(
        lesson_reminders_job,
        'interval',
        minutes=max(1, int(settings.reminder_interval_minutes)),
        id=lesson_reminders.JOB_LABEL,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )

    if not scheduler.running:
        scheduler.start()


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
