# scheduler.py
"""Friday-noon job that generates and stores the current week's report."""

import asyncio
import logging
from datetime import time
from typing import Optional, Tuple

from standup_digest.core import StandupCalendar
from standup_digest.core.exceptions import ReportingError

from .llm_calls import Sleep
from .report_service import WeeklyReportService

logger = logging.getLogger(__name__)

REPORT_WEEKDAY = 4  # Friday
WINDOW_START = time(11, 55)
WINDOW_END = time(12, 5)


class WeeklyReportScheduler:
    """Decides when the weekly report is due and runs it"""

    def __init__(self, report_service: WeeklyReportService, calendar: Optional[StandupCalendar] = None):
        self.report_service = report_service
        self.calendar = calendar or report_service.calendar
        self._last_stored_week: Optional[Tuple[str, str]] = None

    def is_report_window(self) -> bool:
        now = self.calendar.now()
        return now.weekday() == REPORT_WEEKDAY and WINDOW_START <= now.time() <= WINDOW_END

    def current_week_dates(self) -> Tuple[str, str]:
        """Monday of this week through today"""
        return self.calendar.current_week_start(), self.calendar.today()

    async def run_once(self, force: bool = False) -> Optional[str]:
        """Generate and store when due; returns the snapshot status, None when skipped"""
        if not force and not self.is_report_window():
            logger.debug("Outside the weekly report window, skipping")
            return None

        week = self.current_week_dates()
        if not force and week == self._last_stored_week:
            logger.debug(f"Weekly report for {week[0]}..{week[1]} already stored, skipping")
            return None

        logger.info(f"Generating scheduled weekly report for {week[0]}..{week[1]}")
        try:
            snapshot = await self.report_service.generate_and_store(*week)
        except ReportingError as e:
            logger.error(f"Scheduled weekly report failed: {e}")
            return "failed"

        self._last_stored_week = week
        return snapshot.status

    async def run_forever(self, poll_seconds: float = 60.0, sleep: Sleep = asyncio.sleep):
        """Poll the report window until cancelled"""
        logger.info(f"Weekly report scheduler started, polling every {poll_seconds}s")
        while True:
            try:
                await self.run_once()
            except Exception:
                logger.exception("Weekly report poll failed, will retry on the next poll")
            await sleep(poll_seconds)
