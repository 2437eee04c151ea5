# standup_service.py
"""Standup submission, today's board and history use cases."""

import logging
from typing import List, Optional

from standup_digest.core import Entry, StandupCalendar, UpdateRecord, settings
from standup_digest.core.exceptions import InvalidUpdate
from standup_digest.data.base_repository import BaseStandupRepository

from .roster import TeamRoster

logger = logging.getLogger(__name__)


class StandupService:
    """Saves and reads daily updates through the repository"""

    def __init__(
        self,
        repository: BaseStandupRepository,
        roster: Optional[TeamRoster] = None,
        calendar: Optional[StandupCalendar] = None,
    ):
        self.repository = repository
        self.roster = roster or TeamRoster.from_settings()
        self.calendar = calendar or StandupCalendar()

    @staticmethod
    def validate_record(record: UpdateRecord) -> List[str]:
        errors = []
        if not record.person_name or not record.person_name.strip():
            errors.append("Team member name is required")
        if not record.role or not record.role.strip():
            errors.append("Team member role is required")
        if not record.has_update():
            errors.append("At least one update field (yesterday, today, or blockers) must be provided")
        return errors

    async def save_update(self, record: UpdateRecord) -> None:
        """Validate and store; a second save on the same day replaces the first"""
        errors = self.validate_record(record)
        if errors:
            raise InvalidUpdate(errors)

        await self.repository.save_update(record)
        logger.info(f"Saved standup update for {record.person_name}")

    async def submit_form(self, form_data: dict) -> UpdateRecord:
        """Validate raw form fields, stamp them with the current time and save"""
        errors = self.roster.validate_form_data(form_data)
        if errors:
            raise InvalidUpdate(errors)

        record = self.roster.create_record_from_form(form_data, self.calendar.now())
        await self.save_update(record)
        return record

    async def get_today_standup(self) -> List[UpdateRecord]:
        return await self.repository.get_updates_for_date(self.calendar.today())

    async def get_history(self, limit: int = settings.DEFAULT_HISTORY_LIMIT) -> List[Entry]:
        """Past days only, newest first"""
        return await self.repository.get_history(limit)

    async def get_previous_business_day_count(self) -> int:
        records = await self.repository.get_updates_for_date(self.calendar.previous_business_day())
        return len(records)

    async def get_team_engagement(self) -> int:
        """Number of different people who submitted since Monday"""
        records = await self.repository.get_updates_between(
            self.calendar.current_week_start(), self.calendar.today()
        )
        return len({record.person_name for record in records})

    def previous_business_day_label(self) -> str:
        if self.calendar.now().weekday() in (0, 6):
            return "What did you do on Friday?"
        return "What did you do yesterday?"
