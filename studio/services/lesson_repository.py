from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from studio.domain.reminder_types import RepositoryError, ScheduledLesson, StudentContact
from studio.models import Lesson, Student


logger = logging.getLogger(__name__)


def _to_scheduled_lesson(row: Lesson) -> ScheduledLesson:
    return ScheduledLesson(
        id=str(row.id),
        date=str(row.date or ''),
        time=str(row.time or ''),
        status=str(row.status or ''),
        student_ids=tuple(str(student_id) for student_id in (row.student_ids or [])),
        reminder_sent=bool(row.whatsapp_sent),
        subject=row.subject,
        timezone=row.timezone,
    )


def _to_student_contact(row: Student) -> StudentContact:
    return StudentContact(
        id=str(row.id),
        full_name=str(row.full_name or ''),
        messaging_address=row.contact_whatsapp,
    )


class SqlLessonRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_lessons(self) -> list[ScheduledLesson]:
        try:
            rows = self.db.query(Lesson).order_by(Lesson.date.desc(), Lesson.time.desc(), Lesson.id.asc()).all()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RepositoryError(f'failed to load lessons: {exc}') from exc
        return [_to_scheduled_lesson(row) for row in rows]

    def get_students(self) -> list[StudentContact]:
        try:
            rows = self.db.query(Student).order_by(Student.created_at.desc(), Student.id.asc()).all()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RepositoryError(f'failed to load students: {exc}') from exc
        return [_to_student_contact(row) for row in rows]

    def mark_reminder_sent(self, lesson_id: str) -> bool:
        """Set the lesson's reminder flag; returns False when it was already set."""
        try:
            result = self.db.execute(
                update(Lesson)
                .where(Lesson.id == lesson_id, Lesson.whatsapp_sent.is_(False))
                .values(whatsapp_sent=True)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RepositoryError(f'failed to mark lesson {lesson_id}: {exc}') from exc
        updated = int(result.rowcount or 0) > 0
        if not updated:
            logger.info('lesson_reminder_flag_already_set lesson_id=%s', lesson_id)
        return updated
