# repository.py
"""In-memory repository, used for tests and for running without a database."""

from typing import Dict, List, Optional, Tuple

from standup_digest.core import (
    Entry,
    ReportSnapshot,
    StandupCalendar,
    UpdateRecord,
    WeeklyReport,
    settings,
)
from standup_digest.core.exceptions import DatabaseError
from standup_digest.services.aggregator import StandupAggregator

from .base_repository import BaseStandupRepository


class InMemoryStandupRepository(BaseStandupRepository):
    """Repository keeping records and snapshots in process memory"""

    def __init__(self, calendar: Optional[StandupCalendar] = None):
        self.calendar = calendar or StandupCalendar()
        self.aggregator = StandupAggregator(self.calendar)
        self._records: List[UpdateRecord] = []
        self._snapshots: Dict[Tuple[str, str], ReportSnapshot] = {}

    def _same_submission(self, existing: UpdateRecord, record: UpdateRecord) -> bool:
        if self.calendar.local_date(existing.timestamp) != self.calendar.local_date(record.timestamp):
            return False
        if record.member_id and existing.member_id:
            return existing.member_id == record.member_id
        return existing.person_name == record.person_name

    async def save_update(self, record: UpdateRecord) -> None:
        """Add an update, replacing the person's earlier one for that day"""
        try:
            self._records = [r for r in self._records if not self._same_submission(r, record)]
            self._records.append(record)
        except Exception as e:
            raise DatabaseError(f"Failed to save update: {str(e)}")

    async def add_many(self, records: List[UpdateRecord]) -> None:
        for record in records:
            await self.save_update(record)

    async def get_updates_for_date(self, date: str) -> List[UpdateRecord]:
        try:
            return self.aggregator.group_by_date(self._records).get(date, [])
        except Exception as e:
            raise DatabaseError(f"Failed to get updates for {date}: {str(e)}")

    async def get_updates_between(self, start_date: str, end_date: str) -> List[UpdateRecord]:
        try:
            return [
                record
                for record in self._records
                if start_date <= self.calendar.local_date(record.timestamp) <= end_date
            ]
        except Exception as e:
            raise DatabaseError(f"Failed to get updates by date range: {str(e)}")

    async def get_weekly_report(self, week_start: str, week_end: str) -> WeeklyReport:
        records = await self.get_updates_between(week_start, week_end)
        return self.aggregator.build_report(records, week_start, week_end)

    async def get_history(self, limit: int = 50) -> List[Entry]:
        """Entries before today, newest first, built from the latest ``limit`` records"""
        try:
            today = self.calendar.today()
            past = [r for r in self._records if self.calendar.local_date(r.timestamp) < today]
            past.sort(key=lambda r: self.calendar.to_local(r.timestamp), reverse=True)
            return self.aggregator.build_history(past[:limit], today, settings.HISTORY_DAYS)
        except Exception as e:
            raise DatabaseError(f"Failed to get history: {str(e)}")

    async def save_report_snapshot(self, snapshot: ReportSnapshot) -> None:
        self._snapshots[(snapshot.week_start, snapshot.week_end)] = snapshot

    async def list_report_snapshots(self, limit: int = 10) -> List[ReportSnapshot]:
        snapshots = sorted(
            self._snapshots.values(), key=lambda s: s.generated_at or "", reverse=True
        )
        return snapshots[:limit]

    async def clear(self) -> None:
        """Clear all records and snapshots"""
        self._records.clear()
        self._snapshots.clear()
