from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from studio.config import settings


STUDIO_TIMEZONE = settings.app_timezone or 'UTC'
STUDIO_ZONEINFO = ZoneInfo(STUDIO_TIMEZONE)


class TimeProvider:
    def __init__(self, zone: ZoneInfo = STUDIO_ZONEINFO) -> None:
        self.zone = zone

    def now(self) -> datetime:
        return datetime.now(self.zone)


def ensure_aware(dt: datetime) -> datetime:
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        raise ValueError('Naive datetime not allowed in business logic')
    return dt


default_time_provider = TimeProvider()
