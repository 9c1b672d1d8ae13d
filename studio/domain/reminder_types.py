from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Protocol, Union


class LessonStatus(str, Enum):
    UPCOMING = 'upcoming'
    COMPLETED = 'completed'
    CANCELLED_STUDENT = 'cancelled-student'
    CANCELLED_TEACHER = 'cancelled-teacher'
    RESCHEDULED = 'rescheduled'
    NO_SHOW = 'no-show'
    RESCHEDULE_REQUESTED = 'reschedule-requested'


class RepositoryError(Exception):
    """Raised by a lesson repository when the backing store cannot be read or written."""


@dataclass(frozen=True)
class ScheduledLesson:
    id: str
    date: str
    time: str
    status: str
    student_ids: tuple[str, ...]
    reminder_sent: bool = False
    subject: str | None = None
    timezone: str | None = None


@dataclass(frozen=True)
class StudentContact:
    id: str
    full_name: str
    messaging_address: str | None = None


@dataclass(frozen=True)
class SendResult:
    ok: bool
    error: Any = None
    data: Any = None


@dataclass(frozen=True)
class SentOutcome:
    student_name: str
    student_id: str
    lesson_id: str
    status: Literal['sent'] = 'sent'


@dataclass(frozen=True)
class FailedOutcome:
    student_name: str
    student_id: str
    lesson_id: str
    error: Any = None
    status: Literal['failed'] = 'failed'


RecipientOutcome = Union[SentOutcome, FailedOutcome]


@dataclass
class DispatchReport:
    eligible_count: int = 0
    outcomes: list[RecipientOutcome] = field(default_factory=list)
    lessons_marked: int = 0

    @property
    def sent_count(self) -> int:
        return sum(1 for outcome in self.outcomes if isinstance(outcome, SentOutcome))

    @property
    def failed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if isinstance(outcome, FailedOutcome))

    def to_dict(self) -> dict[str, Any]:
        results: list[dict[str, Any]] = []
        for outcome in self.outcomes:
            match outcome:
                case SentOutcome(student_name=name):
                    results.append({'student': name, 'status': 'sent'})
                case FailedOutcome(student_name=name, error=error):
                    results.append({'student': name, 'status': 'failed', 'error': error})
        return {'processed': self.eligible_count, 'results': results}


class LessonRepository(Protocol):
    def get_lessons(self) -> list[ScheduledLesson]:
        ...

    def get_students(self) -> list[StudentContact]:
        ...

    def mark_reminder_sent(self, lesson_id: str) -> bool:
        ...


class MessagingGateway(Protocol):
    def send(self, address: str, text: str) -> SendResult:
        ...
