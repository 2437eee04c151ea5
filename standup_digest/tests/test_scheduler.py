# test_scheduler.py
"""Tests for the Friday-noon weekly report job."""

import asyncio
from datetime import datetime
from unittest.mock import AsyncMock, Mock

import pytest

from standup_digest.core.exceptions import RepositoryFailure
from standup_digest.data import InMemoryStandupRepository
from standup_digest.services import WeeklyReportScheduler, WeeklyReportService

from .helpers import make_calendar, make_record


def scheduler_at(now, service=None):
    calendar = make_calendar(now)
    service = service or Mock(calendar=calendar)
    return WeeklyReportScheduler(service, calendar=calendar)


class TestReportWindow:
    """Friday 11:55 to 12:05 local time."""

    @pytest.mark.parametrize("now, expected", [
        (datetime(2024, 6, 7, 12, 0), True),
        (datetime(2024, 6, 7, 11, 55), True),
        (datetime(2024, 6, 7, 12, 5), True),
        (datetime(2024, 6, 7, 11, 54), False),
        (datetime(2024, 6, 7, 12, 6), False),
        (datetime(2024, 6, 6, 12, 0), False),
    ])
    def test_is_report_window(self, now, expected):
        assert scheduler_at(now).is_report_window() is expected

    def test_current_week_dates(self):
        assert scheduler_at(datetime(2024, 6, 7, 12, 0)).current_week_dates() == ("2024-06-03", "2024-06-07")


class TestRunOnce:
    """Generating and storing when due."""

    @pytest.mark.asyncio
    async def test_skips_outside_window(self):
        service = Mock(generate_and_store=AsyncMock())
        scheduler = scheduler_at(datetime(2024, 6, 5, 12, 0), service)

        assert await scheduler.run_once() is None
        service.generate_and_store.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stores_current_week_in_window(self):
        calendar = make_calendar(datetime(2024, 6, 7, 12, 0))
        repository = InMemoryStandupRepository(calendar=calendar)
        await repository.add_many([
            make_record("Alice", "2024-06-04", yesterday="Shipped X"),
            make_record("Bob", "2024-06-07", today="Demo"),
        ])
        scheduler = WeeklyReportScheduler(WeeklyReportService(repository, calendar=calendar))

        assert await scheduler.run_once() == "generated"

        [snapshot] = await repository.list_report_snapshots()
        assert (snapshot.week_start, snapshot.week_end) == ("2024-06-03", "2024-06-07")
        assert snapshot.total_updates == 2

    @pytest.mark.asyncio
    async def test_force_runs_outside_window(self):
        service = Mock(generate_and_store=AsyncMock(return_value=Mock(status="generated")))
        scheduler = scheduler_at(datetime(2024, 6, 5, 9, 0), service)

        assert await scheduler.run_once(force=True) == "generated"
        service.generate_and_store.assert_awaited_once_with("2024-06-03", "2024-06-05")

    @pytest.mark.asyncio
    async def test_failure_reported(self):
        service = Mock(generate_and_store=AsyncMock(side_effect=RepositoryFailure("Failed to generate weekly report")))
        scheduler = scheduler_at(datetime(2024, 6, 7, 12, 0), service)

        assert await scheduler.run_once() == "failed"

    @pytest.mark.asyncio
    async def test_runs_once_per_window(self):
        service = Mock(generate_and_store=AsyncMock(return_value=Mock(status="generated")))
        scheduler = scheduler_at(datetime(2024, 6, 7, 12, 0), service)

        assert await scheduler.run_once() == "generated"
        assert await scheduler.run_once() is None
        service.generate_and_store.assert_awaited_once_with("2024-06-03", "2024-06-07")

    @pytest.mark.asyncio
    async def test_failed_run_is_retried_on_next_poll(self):
        service = Mock(generate_and_store=AsyncMock(
            side_effect=[RepositoryFailure("Failed to generate weekly report"), Mock(status="generated")]
        ))
        scheduler = scheduler_at(datetime(2024, 6, 7, 12, 0), service)

        assert await scheduler.run_once() == "failed"
        assert await scheduler.run_once() == "generated"


class TestRunForever:
    """Polling loop."""

    @pytest.mark.asyncio
    async def test_polls_until_cancelled(self):
        service = Mock(generate_and_store=AsyncMock(return_value=Mock(status="generated")))
        scheduler = scheduler_at(datetime(2024, 6, 7, 12, 0), service)
        sleep = AsyncMock(side_effect=[None, asyncio.CancelledError()])

        with pytest.raises(asyncio.CancelledError):
            await scheduler.run_forever(poll_seconds=30, sleep=sleep)

        assert sleep.await_count == 2
        sleep.assert_awaited_with(30)
        service.generate_and_store.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unexpected_error_does_not_stop_polling(self):
        service = Mock(generate_and_store=AsyncMock(
            side_effect=[RuntimeError("session closed"), Mock(status="generated")]
        ))
        scheduler = scheduler_at(datetime(2024, 6, 7, 12, 0), service)
        sleep = AsyncMock(side_effect=[None, asyncio.CancelledError()])

        with pytest.raises(asyncio.CancelledError):
            await scheduler.run_forever(poll_seconds=30, sleep=sleep)

        assert service.generate_and_store.await_count == 2
        assert sleep.await_count == 2
