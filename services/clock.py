"""Часы сервиса: текущее время в часовом поясе бота."""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from config import TIMEZONE


class Clock:
    """Источник текущего времени. В тестах подменяется на FixedClock."""

    def __init__(self, tz_name: str = TIMEZONE):
        self.tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()

    def current_year(self) -> int:
        return self.now().year

    def day_bounds(self, reference_date: date) -> Tuple[datetime, datetime]:
        """Начало и конец дня (включительно) в часовом поясе бота."""
        start = datetime.combine(reference_date, time.min, tzinfo=self.tz)
        end = datetime.combine(reference_date + timedelta(days=1), time.min, tzinfo=self.tz)
        return start, end - timedelta(microseconds=1)


class FixedClock(Clock):
    """Часы, которые всегда показывают одно и то же время."""

    def __init__(self, moment: datetime, tz_name: Optional[str] = None):
        super().__init__(tz_name or TIMEZONE)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=self.tz)
        self.moment = moment

    def now(self) -> datetime:
        return self.moment.astimezone(self.tz)


def to_utc_naive(moment: datetime) -> datetime:
    """Переводит aware-время в наивное UTC для хранения в базе."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def from_utc_naive(moment: datetime) -> datetime:
    """Обратное преобразование: наивное UTC из базы в aware UTC."""
    if moment.tzinfo is not None:
        return moment
    return moment.replace(tzinfo=timezone.utc)
