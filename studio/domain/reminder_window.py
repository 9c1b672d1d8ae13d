from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from studio.core.time_provider import ensure_aware
from studio.domain.reminder_types import LessonStatus, ScheduledLesson


DEFAULT_LOOKAHEAD = timedelta(hours=1)
_TIME_FORMATS = ('%H:%M', '%H:%M:%S')


class MalformedSchedule(ValueError):
    pass


@dataclass
class WindowSelection:
    eligible: list[ScheduledLesson] = field(default_factory=list)
    malformed: list[tuple[ScheduledLesson, str]] = field(default_factory=list)


def lesson_start(lesson: ScheduledLesson, default_zone: ZoneInfo) -> datetime:
    """Combine a lesson's wall-clock date and time into an aware instant.

    The lesson's own timezone wins over the studio default. Raises
    ``MalformedSchedule`` when either part cannot be parsed.
    """
    date_part = (lesson.date or '').strip()
    time_part = (lesson.time or '').strip()
    try:
        day = datetime.strptime(date_part, '%Y-%m-%d').date()
    except ValueError as exc:
        raise MalformedSchedule(f'invalid date {date_part!r}') from exc

    clock = None
    for fmt in _TIME_FORMATS:
        try:
            clock = datetime.strptime(time_part, fmt).time()
            break
        except ValueError:
            continue
    if clock is None:
        raise MalformedSchedule(f'invalid time {time_part!r}')

    zone = default_zone
    if lesson.timezone:
        try:
            zone = ZoneInfo(lesson.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise MalformedSchedule(f'unknown timezone {lesson.timezone!r}') from exc
    return datetime.combine(day, clock, tzinfo=zone)


def select_eligible_lessons(
    lessons: Iterable[ScheduledLesson],
    now: datetime,
    *,
    default_zone: ZoneInfo,
    lookahead: timedelta = DEFAULT_LOOKAHEAD,
) -> WindowSelection:
    """Pick upcoming, not yet notified lessons starting in ``(now, now + lookahead]``.

    Bounds are compared as UTC instants.
    """
    now_utc = ensure_aware(now).astimezone(timezone.utc)
    window_end = now_utc + lookahead
    selection = WindowSelection()
    for lesson in lessons:
        if lesson.status != LessonStatus.UPCOMING.value or lesson.reminder_sent:
            continue
        try:
            starts_at = lesson_start(lesson, default_zone)
        except MalformedSchedule as exc:
            selection.malformed.append((lesson, str(exc)))
            continue
        if now_utc < starts_at.astimezone(timezone.utc) <= window_end:
            selection.eligible.append(lesson)
    return selection
