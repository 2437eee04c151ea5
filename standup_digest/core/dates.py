# dates.py
"""Business-day and week-boundary dates in the team's fixed timezone."""

import math
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Tuple, Union

import pytz

from .settings import settings

DateLike = Union[str, date, datetime]


def parse_date(value: DateLike) -> date:
    """Parse a YYYY-MM-DD string (or pass a date through)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, settings.DATE_FORMAT).date()


def format_date(value: date) -> str:
    return value.strftime(settings.DATE_FORMAT)


class StandupCalendar:
    """Date helpers pinned to one timezone.

    ``clock`` returns the current moment; inject a fixed clock in tests.
    Naive datetimes returned by the clock are read as local wall-clock time.
    """

    def __init__(self, timezone: str = settings.TIMEZONE, clock: Optional[Callable[[], datetime]] = None):
        self.tz = pytz.timezone(timezone)
        self._clock = clock

    def now(self) -> datetime:
        if self._clock is None:
            return datetime.now(self.tz)
        return self.to_local(self._clock())

    def to_local(self, moment: datetime) -> datetime:
        if moment.tzinfo is None:
            return self.tz.localize(moment)
        return moment.astimezone(self.tz)

    def local_date(self, timestamp: Union[str, datetime]) -> str:
        """Calendar date of a timestamp in the fixed timezone"""
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
        return format_date(self.to_local(timestamp).date())

    def today(self) -> str:
        return format_date(self.now().date())

    def previous_business_day(self) -> str:
        """Friday when today is Monday or Sunday, otherwise yesterday"""
        current = self.now().date()
        weekday = current.weekday()
        if weekday == 0:  # Monday
            delta = 3
        elif weekday == 6:  # Sunday
            delta = 2
        else:
            delta = 1
        return format_date(current - timedelta(days=delta))

    def current_week_start(self) -> str:
        current = self.now().date()
        # (dayOfWeek + 6) % 7 with Sunday = 0 is exactly date.weekday()
        return format_date(current - timedelta(days=current.weekday()))

    def current_week_end(self) -> str:
        current = self.now().date()
        return format_date(current + timedelta(days=6 - current.weekday()))

    def previous_week(self) -> Tuple[str, str]:
        """Monday and Sunday of the week before the current one"""
        monday = parse_date(self.current_week_start()) - timedelta(days=7)
        return format_date(monday), format_date(monday + timedelta(days=6))

    @staticmethod
    def days_between(start: DateLike, end: DateLike) -> int:
        """Day difference end - start, rounded up"""
        if isinstance(start, datetime) and isinstance(end, datetime):
            return math.ceil((end - start).total_seconds() / 86400)
        return (parse_date(end) - parse_date(start)).days
