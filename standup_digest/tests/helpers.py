# helpers.py
"""Builders shared by the test modules."""

from datetime import datetime

from standup_digest.core import StandupCalendar, UpdateRecord

# Monday 2024-06-03 .. Sunday 2024-06-09
WEEK_START = "2024-06-03"
WEEK_END = "2024-06-09"


def make_calendar(now: datetime) -> StandupCalendar:
    """Calendar frozen at a local wall-clock moment"""
    return StandupCalendar(clock=lambda: now)


def make_record(name, date, hour=9, yesterday="", today="", blockers="", role="Developer", member_id=None):
    year, month, day = (int(part) for part in date.split("-"))
    return UpdateRecord(
        person_name=name,
        role=role,
        timestamp=datetime(year, month, day, hour, 0),
        yesterday=yesterday,
        today=today,
        blockers=blockers,
        member_id=member_id,
    )
