from __future__ import annotations

import logging
from datetime import timedelta
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from studio.communication.client_factory import build_messaging_gateway
from studio.config import Settings, settings
from studio.core.time_provider import TimeProvider, default_time_provider
from studio.domain.jobs.job_lock import acquire_job_lock, release_job_lock
from studio.domain.reminder_dispatcher import ReminderDispatcher
from studio.domain.reminder_types import DispatchReport
from studio.metrics import run_timed_job
from studio.request_context import current_operation
from studio.services.lesson_repository import SqlLessonRepository


logger = logging.getLogger(__name__)

JOB_LABEL = 'lesson_reminders'


class ReminderRunInProgress(Exception):
    pass


def build_dispatcher(db: Session, config: Settings = settings) -> ReminderDispatcher:
    return ReminderDispatcher(
        SqlLessonRepository(db),
        build_messaging_gateway(config),
        default_zone=ZoneInfo(config.app_timezone or 'UTC'),
        lookahead=timedelta(minutes=max(1, int(config.reminder_lookahead_minutes))),
    )


def execute(
    dispatcher: ReminderDispatcher,
    *,
    time_provider: TimeProvider = default_time_provider,
    lock_ttl_seconds: int = settings.reminder_job_lock_ttl_seconds,
) -> DispatchReport:
    """Run one reminder pass unless another pass in this process still holds the lock."""
    lock_token = acquire_job_lock(JOB_LABEL, ttl_seconds=lock_ttl_seconds)
    if not lock_token:
        logger.info('job_lock_skipped_concurrent job=%s', JOB_LABEL)
        raise ReminderRunInProgress(JOB_LABEL)
    context_token = current_operation.set(JOB_LABEL)
    try:
        return run_timed_job(JOB_LABEL, lambda: dispatcher.run(time_provider.now()))
    finally:
        current_operation.reset(context_token)
        release_job_lock(JOB_LABEL, lock_token)
