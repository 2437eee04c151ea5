# sqlalchemy_repository.py
"""SQLAlchemy-based repository implementation."""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import List, Optional

import pytz
from sqlalchemy import and_, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

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
from .models import StandupUpdateModel, TeamMemberModel, WeeklyReportModel, db_manager

logger = logging.getLogger(__name__)


class SQLAlchemyStandupRepository(BaseStandupRepository):
    """Repository backed by a SQLAlchemy session.

    Session work is blocking, so every public coroutine hands it to a worker
    thread. Calls are awaited one at a time; the session is never shared by
    two threads at once.
    """

    def __init__(self, session: Optional[Session] = None, calendar: Optional[StandupCalendar] = None):
        self.session = session
        self._should_close_session = session is None
        self.calendar = calendar or StandupCalendar()
        self.aggregator = StandupAggregator(self.calendar)

        if not self.session:
            self.session = db_manager.get_session()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._should_close_session and self.session:
            self.session.close()

    # --- conversions -------------------------------------------------------

    def _to_utc_naive(self, timestamp: datetime) -> datetime:
        return self.calendar.to_local(timestamp).astimezone(pytz.utc).replace(tzinfo=None)

    def _to_record(self, db_update: StandupUpdateModel) -> UpdateRecord:
        """Convert SQLAlchemy model to domain model"""
        return UpdateRecord(
            person_name=db_update.member.name,
            role=db_update.member.role or "",
            timestamp=pytz.utc.localize(db_update.submitted_at),
            yesterday=db_update.yesterday or "",
            today=db_update.today or "",
            blockers=db_update.blockers or "",
            member_id=db_update.member.id,
        )

    def _to_snapshot(self, row: WeeklyReportModel) -> ReportSnapshot:
        return ReportSnapshot(
            week_start=row.week_start,
            week_end=row.week_end,
            total_updates=row.total_updates,
            unique_members=row.unique_members,
            report_data=row.report_data,
            status=row.status,
            error=row.error,
            generated_at=row.generated_at,
        )

    def _get_or_create_member(self, record: UpdateRecord) -> TeamMemberModel:
        """Get existing team member or create new one"""
        member = None
        if record.member_id:
            member = self.session.get(TeamMemberModel, record.member_id)
        if member is None:
            member = self.session.query(TeamMemberModel).filter(
                TeamMemberModel.name == record.person_name
            ).first()

        if not member:
            member = TeamMemberModel(
                id=record.member_id or uuid.uuid4().hex,
                name=record.person_name,
                role=record.role,
            )
            self.session.add(member)
            self.session.flush()
        else:
            if record.role and member.role != record.role:
                member.role = record.role
            if member.name != record.person_name:
                member.name = record.person_name

        return member

    # --- sync implementations ---------------------------------------------

    def _save_update_sync(self, record: UpdateRecord) -> None:
        try:
            member = self._get_or_create_member(record)
            date = self.calendar.local_date(record.timestamp)

            existing = self.session.query(StandupUpdateModel).filter(
                and_(
                    StandupUpdateModel.team_member_id == member.id,
                    StandupUpdateModel.date == date,
                )
            ).first()

            if existing:
                existing.yesterday = record.yesterday
                existing.today = record.today
                existing.blockers = record.blockers
                existing.submitted_at = self._to_utc_naive(record.timestamp)
            else:
                self.session.add(StandupUpdateModel(
                    team_member_id=member.id,
                    date=date,
                    yesterday=record.yesterday,
                    today=record.today,
                    blockers=record.blockers,
                    submitted_at=self._to_utc_naive(record.timestamp),
                ))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DatabaseError(f"Failed to save update: {str(e)}") from e

    def _get_updates_between_sync(self, start_date: str, end_date: str) -> List[UpdateRecord]:
        try:
            db_updates = self.session.query(StandupUpdateModel).options(
                joinedload(StandupUpdateModel.member)
            ).filter(
                and_(
                    StandupUpdateModel.date >= start_date,
                    StandupUpdateModel.date <= end_date,
                )
            ).order_by(StandupUpdateModel.submitted_at).all()

            return [self._to_record(db_update) for db_update in db_updates]
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to get updates by date range: {str(e)}") from e

    def _get_history_sync(self, before_date: str, limit: int) -> List[UpdateRecord]:
        try:
            db_updates = self.session.query(StandupUpdateModel).options(
                joinedload(StandupUpdateModel.member)
            ).filter(
                StandupUpdateModel.date < before_date
            ).order_by(
                desc(StandupUpdateModel.submitted_at)
            ).limit(limit).all()

            return [self._to_record(db_update) for db_update in db_updates]
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to get standup history: {str(e)}") from e

    def _save_snapshot_sync(self, snapshot: ReportSnapshot) -> None:
        try:
            row = self.session.query(WeeklyReportModel).filter(
                and_(
                    WeeklyReportModel.week_start == snapshot.week_start,
                    WeeklyReportModel.week_end == snapshot.week_end,
                )
            ).first()

            if row is None:
                row = WeeklyReportModel(week_start=snapshot.week_start, week_end=snapshot.week_end)
                self.session.add(row)

            row.total_updates = snapshot.total_updates
            row.unique_members = snapshot.unique_members
            row.report_data = snapshot.report_data
            row.status = snapshot.status
            row.error = snapshot.error
            row.generated_at = snapshot.generated_at
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DatabaseError(f"Failed to save weekly report: {str(e)}") from e

    def _list_snapshots_sync(self, limit: int) -> List[ReportSnapshot]:
        try:
            rows = self.session.query(WeeklyReportModel).order_by(
                desc(WeeklyReportModel.generated_at)
            ).limit(limit).all()
            return [self._to_snapshot(row) for row in rows]
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to get stored weekly reports: {str(e)}") from e

    # --- async interface ---------------------------------------------------

    async def save_update(self, record: UpdateRecord) -> None:
        await asyncio.to_thread(self._save_update_sync, record)

    async def add_many(self, records: List[UpdateRecord]) -> None:
        for record in records:
            await self.save_update(record)

    async def get_updates_for_date(self, date: str) -> List[UpdateRecord]:
        return await asyncio.to_thread(self._get_updates_between_sync, date, date)

    async def get_updates_between(self, start_date: str, end_date: str) -> List[UpdateRecord]:
        return await asyncio.to_thread(self._get_updates_between_sync, start_date, end_date)

    async def get_weekly_report(self, week_start: str, week_end: str) -> WeeklyReport:
        records = await self.get_updates_between(week_start, week_end)
        logger.info(f"Loaded {len(records)} updates for {week_start}..{week_end}")
        return self.aggregator.build_report(records, week_start, week_end)

    async def get_history(self, limit: int = 50) -> List[Entry]:
        today = self.calendar.today()
        records = await asyncio.to_thread(self._get_history_sync, today, limit)
        return self.aggregator.build_history(records, today, settings.HISTORY_DAYS)

    async def save_report_snapshot(self, snapshot: ReportSnapshot) -> None:
        await asyncio.to_thread(self._save_snapshot_sync, snapshot)

    async def list_report_snapshots(self, limit: int = 10) -> List[ReportSnapshot]:
        return await asyncio.to_thread(self._list_snapshots_sync, limit)
