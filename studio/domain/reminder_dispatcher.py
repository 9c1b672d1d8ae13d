from __future__ import annotations

import logging
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from studio.domain.reminder_types import (
    DispatchReport,
    FailedOutcome,
    LessonRepository,
    MessagingGateway,
    RepositoryError,
    ScheduledLesson,
    SendResult,
    SentOutcome,
    StudentContact,
)
from studio.domain.reminder_window import DEFAULT_LOOKAHEAD, select_eligible_lessons


logger = logging.getLogger(__name__)
__all__ = ['ReminderDispatcher', 'build_reminder_text']

DEFAULT_SUBJECT_LABEL = 'lesson'


def build_reminder_text(student: StudentContact, lesson: ScheduledLesson) -> str:
    subject = (lesson.subject or '').strip() or DEFAULT_SUBJECT_LABEL
    return (
        f"Hello {student.full_name}! \U0001F393 This is a reminder that your {subject} "
        f"starts in 1 hour at {lesson.time}. See you there! \U0001F680"
    )


class ReminderDispatcher:
    """Scan lessons and message every reachable student of the ones starting soon.

    A lesson is marked notified in the repository after the first recipient
    send that succeeds; remaining recipients of the same lesson are still
    messaged. Lessons with no successful send stay unmarked so the next run
    picks them up again.
    """

    def __init__(
        self,
        repository: LessonRepository,
        gateway: MessagingGateway,
        *,
        default_zone: ZoneInfo,
        lookahead: timedelta = DEFAULT_LOOKAHEAD,
    ) -> None:
        self.repository = repository
        self.gateway = gateway
        self.default_zone = default_zone
        self.lookahead = lookahead

    def run(self, now: datetime) -> DispatchReport:
        # Read failures are fatal for the run and propagate to the caller.
        lessons = self.repository.get_lessons()
        students = self.repository.get_students()

        selection = select_eligible_lessons(
            lessons,
            now,
            default_zone=self.default_zone,
            lookahead=self.lookahead,
        )
        for lesson, reason in selection.malformed:
            logger.warning(
                'lesson_reminder_malformed_schedule lesson_id=%s date=%s time=%s reason=%s',
                lesson.id,
                lesson.date,
                lesson.time,
                reason,
            )

        report = DispatchReport(eligible_count=len(selection.eligible))
        students_by_id = {student.id: student for student in students}
        for lesson in selection.eligible:
            self._dispatch_lesson(lesson, students_by_id, report)

        logger.info(
            'lesson_reminder_run_complete eligible=%s sent=%s failed=%s marked=%s',
            report.eligible_count,
            report.sent_count,
            report.failed_count,
            report.lessons_marked,
        )
        return report

    def _dispatch_lesson(
        self,
        lesson: ScheduledLesson,
        students_by_id: dict[str, StudentContact],
        report: DispatchReport,
    ) -> None:
        marked = False
        for student_id in lesson.student_ids:
            student = students_by_id.get(student_id)
            if student is None:
                logger.warning('lesson_reminder_unknown_student lesson_id=%s student_id=%s', lesson.id, student_id)
                continue
            address = (student.messaging_address or '').strip()
            if not address:
                logger.info('lesson_reminder_skipped_no_address lesson_id=%s student_id=%s', lesson.id, student.id)
                continue

            result = self._send(address, build_reminder_text(student, lesson), lesson_id=lesson.id)
            if not result.ok:
                report.outcomes.append(
                    FailedOutcome(
                        student_name=student.full_name,
                        student_id=student.id,
                        lesson_id=lesson.id,
                        error=result.error,
                    )
                )
                continue

            report.outcomes.append(
                SentOutcome(student_name=student.full_name, student_id=student.id, lesson_id=lesson.id)
            )
            if not marked:
                marked = True
                if self._mark_notified(lesson):
                    report.lessons_marked += 1

    def _send(self, address: str, text: str, *, lesson_id: str) -> SendResult:
        try:
            return self.gateway.send(address, text)
        except Exception as exc:
            logger.exception('lesson_reminder_gateway_error lesson_id=%s', lesson_id)
            return SendResult(ok=False, error=str(exc))

    def _mark_notified(self, lesson: ScheduledLesson) -> bool:
        try:
            updated = bool(self.repository.mark_reminder_sent(lesson.id))
        except RepositoryError:
            # The message went out; the next run may send a duplicate.
            logger.exception('lesson_reminder_mark_failed lesson_id=%s', lesson.id)
            return False
        if not updated:
            logger.warning('lesson_reminder_mark_not_applied lesson_id=%s', lesson.id)
        return updated
