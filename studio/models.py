import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from studio.db import Base
from studio.domain.reminder_types import LessonStatus


def _new_id() -> str:
    return str(uuid.uuid4())


class StudentStatus(str, Enum):
    ACTIVE = 'active'
    PAUSED = 'paused'
    FINISHED = 'finished'


class Student(Base):
    __tablename__ = 'students'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    full_name: Mapped[str] = mapped_column(String(180))
    contact_phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    contact_whatsapp: Mapped[str | None] = mapped_column(String(40), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(180), nullable=True)
    timezone: Mapped[str] = mapped_column(String(60), default='UTC')
    status: Mapped[str] = mapped_column(String(20), default=StudentStatus.ACTIVE.value, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)


class Lesson(Base):
    __tablename__ = 'lessons'
    __table_args__ = (
        Index('ix_lessons_status_whatsapp_sent', 'status', 'whatsapp_sent'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    student_ids: Mapped[list] = mapped_column(JSON, default=list)
    # Wall-clock values as entered in the dashboard; parsed by the reminder job.
    date: Mapped[str] = mapped_column(String(10), index=True)
    time: Mapped[str] = mapped_column(String(8))
    timezone: Mapped[str | None] = mapped_column(String(60), nullable=True)
    duration: Mapped[int] = mapped_column(Integer, default=60)
    status: Mapped[str] = mapped_column(String(30), default=LessonStatus.UPCOMING.value, index=True)
    subject: Mapped[str | None] = mapped_column(String(120), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    whatsapp_sent: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
