# report_service.py
"""Weekly report use case: load, summarize (AI first, rules as fallback), store."""

import logging
from datetime import datetime
from typing import List, Optional

from standup_digest.core import ReportSnapshot, ReportSummary, StandupCalendar, WeeklyReport, settings
from standup_digest.core.exceptions import (
    AISummaryError,
    DatabaseError,
    InvalidDateRange,
    ReportingError,
    RepositoryFailure,
)
from standup_digest.data.base_repository import BaseStandupRepository

from .ai_summarizer import AISummarizer
from .rule_based_summarizer import RuleBasedSummarizer

logger = logging.getLogger(__name__)


class WeeklyReportService:
    """Orchestrates repository, AI summarizer and rule-based fallback"""

    def __init__(
        self,
        repository: BaseStandupRepository,
        ai_summarizer: Optional[AISummarizer] = None,
        fallback_summarizer: Optional[RuleBasedSummarizer] = None,
        calendar: Optional[StandupCalendar] = None,
    ):
        self.repository = repository
        self.fallback_summarizer = fallback_summarizer or RuleBasedSummarizer()
        self.ai_summarizer = ai_summarizer or AISummarizer(None, fallback=self.fallback_summarizer)
        self.calendar = calendar or StandupCalendar()

    @staticmethod
    def validate_range(week_start: str, week_end: str) -> None:
        """Reject unparseable, reversed or over-wide windows"""
        try:
            start = datetime.strptime(week_start, settings.DATE_FORMAT).date()
            end = datetime.strptime(week_end, settings.DATE_FORMAT).date()
        except (TypeError, ValueError) as e:
            raise InvalidDateRange(f"Dates must be YYYY-MM-DD: {week_start!r}, {week_end!r}") from e

        if start > end:
            raise InvalidDateRange(f"week_start {week_start} is after week_end {week_end}")

        span = StandupCalendar.days_between(start, end)
        if span > settings.MAX_REPORT_RANGE_DAYS:
            raise InvalidDateRange(
                f"Date range of {span} days exceeds the {settings.MAX_REPORT_RANGE_DAYS}-day limit"
            )

    async def generate_weekly_report(
        self,
        week_start: str,
        week_end: str,
        include_ai: bool = True,
        allow_fallback: bool = True,
    ) -> WeeklyReport:
        """Build the report for a window and attach exactly one summary.

        Raises:
            InvalidDateRange: before any repository or AI call.
            RepositoryFailure: the underlying updates could not be loaded.
            AISummaryError: only when ``allow_fallback`` is False.
        """
        self.validate_range(week_start, week_end)

        try:
            report = await self.repository.get_weekly_report(week_start, week_end)
        except Exception as e:
            logger.error(f"Loading updates for {week_start}..{week_end} failed: {e}")
            raise RepositoryFailure("Failed to generate weekly report") from e

        if not report.has_data():
            logger.info(f"No standup data for {week_start}..{week_end}")
            return report.with_summary(self.fallback_summarizer.no_data_summary())

        if not include_ai:
            return report.with_summary(self.fallback_summarizer.summarize(report))

        result = await self.ai_summarizer.try_generate_summary(report)
        if result.is_ok:
            return report.with_summary(result.summary)

        logger.warning(f"AI summary failed ({type(result.error).__name__}: {result.error}), using rule-based summary")
        if not allow_fallback:
            raise result.error
        return report.with_summary(self.fallback_summarizer.summarize(report))

    async def regenerate_summary(self, report: WeeklyReport, allow_fallback: bool = True) -> WeeklyReport:
        """Replace the summary of an existing report with a fresh one"""
        if not report.has_data():
            return report.with_summary(self.fallback_summarizer.no_data_summary())

        try:
            summary = await self.ai_summarizer.regenerate_summary(report)
        except AISummaryError as e:
            logger.warning(f"AI summary regeneration failed ({e}), using rule-based summary")
            if not allow_fallback:
                raise
            summary = self.fallback_summarizer.summarize(report)
        return report.with_summary(summary)

    async def save_report(
        self, report: WeeklyReport, status: str = "generated", error: Optional[str] = None
    ) -> ReportSnapshot:
        """Upsert the snapshot for the report's week pair"""
        snapshot = ReportSnapshot.from_report(report, status=status, error=error)
        await self.repository.save_report_snapshot(snapshot)
        logger.info(f"Stored {status} report for {report.week_start}..{report.week_end}")
        return snapshot

    async def list_reports(self, limit: int = 10) -> List[ReportSnapshot]:
        return await self.repository.list_report_snapshots(limit)

    async def generate_and_store(self, week_start: str, week_end: str, include_ai: bool = True) -> ReportSnapshot:
        """Generate and persist; a failed run leaves a ``failed`` snapshot behind"""
        try:
            report = await self.generate_weekly_report(week_start, week_end, include_ai=include_ai)
        except InvalidDateRange:
            raise
        except ReportingError as e:
            placeholder = WeeklyReport(week_start, week_end, [], ReportSummary())
            try:
                await self.save_report(placeholder, status="failed", error=str(e))
            except DatabaseError as save_error:
                logger.error(f"Could not record failed report for {week_start}..{week_end}: {save_error}")
            raise

        return await self.save_report(report)
