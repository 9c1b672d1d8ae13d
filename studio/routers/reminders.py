import hmac
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from studio.config import settings
from studio.db import get_db
from studio.domain.jobs import lesson_reminders
from studio.domain.reminder_dispatcher import ReminderDispatcher
from studio.domain.reminder_types import RepositoryError
from studio.schemas import ReminderRunOut


router = APIRouter(prefix='/api/notifications', tags=['Notifications'])
logger = logging.getLogger(__name__)


def _require_cron_secret(
    secret: str | None = Query(default=None),
    x_cron_secret: str | None = Header(default=None),
) -> None:
    expected = str(settings.cron_secret or '').strip()
    provided = str(secret or x_cron_secret or '').strip()
    if not expected or not hmac.compare_digest(expected.encode(), provided.encode()):
        raise HTTPException(status_code=401, detail='Unauthorized')


def get_reminder_dispatcher(db: Session = Depends(get_db)) -> ReminderDispatcher:
    return lesson_reminders.build_dispatcher(db)


@router.api_route(
    '/reminders',
    methods=['GET', 'POST'],
    response_model=ReminderRunOut,
    response_model_exclude_none=True,
)
def run_lesson_reminders(
    _: None = Depends(_require_cron_secret),
    dispatcher: ReminderDispatcher = Depends(get_reminder_dispatcher),
):
    try:
        report = lesson_reminders.execute(dispatcher)
    except lesson_reminders.ReminderRunInProgress:
        return JSONResponse({'ok': False, 'error': 'Reminder run already in progress'}, status_code=409)
    except RepositoryError as exc:
        logger.error('lesson_reminder_run_failed error=%s', exc)
        return JSONResponse({'ok': False, 'error': 'Reminder run failed'}, status_code=500)
    return {'ok': True, **report.to_dict()}
