# base_repository.py
"""Abstract base repository interface for standup operations."""

from abc import ABC, abstractmethod
from typing import List

from standup_digest.core import Entry, ReportSnapshot, UpdateRecord, WeeklyReport


class BaseStandupRepository(ABC):
    """Abstract base class for standup repositories"""

    @abstractmethod
    async def get_weekly_report(self, week_start: str, week_end: str) -> WeeklyReport:
        """Aggregate stored records in [week_start, week_end] into a report"""
        pass

    @abstractmethod
    async def get_history(self, limit: int = 50) -> List[Entry]:
        """Get past entries (excluding today), newest first"""
        pass

    @abstractmethod
    async def save_update(self, record: UpdateRecord) -> None:
        """Save a person's update, replacing their earlier one for the same day"""
        pass

    @abstractmethod
    async def get_updates_for_date(self, date: str) -> List[UpdateRecord]:
        """Get all records submitted on one calendar day"""
        pass

    @abstractmethod
    async def get_updates_between(self, start_date: str, end_date: str) -> List[UpdateRecord]:
        """Get records whose day falls in [start_date, end_date]"""
        pass

    @abstractmethod
    async def save_report_snapshot(self, snapshot: ReportSnapshot) -> None:
        """Upsert a snapshot keyed by (week_start, week_end)"""
        pass

    @abstractmethod
    async def list_report_snapshots(self, limit: int = 10) -> List[ReportSnapshot]:
        """Get stored snapshots, most recently generated first"""
        pass
