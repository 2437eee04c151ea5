# test_report_service.py
"""Tests for the weekly report use case."""

import asyncio
import json
from unittest.mock import AsyncMock, Mock

import groq
import httpx
import pytest
import pytest_asyncio

from standup_digest.core.exceptions import (
    AIRequestFailed,
    DatabaseError,
    InvalidDateRange,
    LLMProviderError,
    RepositoryFailure,
)
from standup_digest.data import InMemoryStandupRepository
from standup_digest.providers.llm_providers import LangChainLLMWrapper
from standup_digest.services import AISummarizer, RuleBasedSummarizer, WeeklyReportService

from .helpers import WEEK_END, WEEK_START


class BrokenRepository(InMemoryStandupRepository):
    """Loads fail, snapshot writes still work"""

    async def get_weekly_report(self, week_start, week_end):
        raise DatabaseError("connection lost")


def make_service(repository, llm, calendar, sleep):
    fallback = RuleBasedSummarizer()
    return WeeklyReportService(
        repository,
        ai_summarizer=AISummarizer(llm, sleep=sleep, fallback=fallback),
        fallback_summarizer=fallback,
        calendar=calendar,
    )


@pytest_asyncio.fixture
async def filled_repository(memory_repository, sample_records):
    await memory_repository.add_many(sample_records)
    return memory_repository


@pytest.fixture
def service(memory_repository, mock_llm, calendar, no_sleep):
    return make_service(memory_repository, mock_llm, calendar, no_sleep)


class TestDateValidation:
    """Bad windows fail before any I/O."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("week_start, week_end", [
        ("2024-01-01", "2024-01-20"),  # 19 days
        ("2024-01-08", "2024-01-01"),  # reversed
        ("not-a-date", "2024-01-01"),
        ("2024-01-01", "2024-02-30"),
    ])
    async def test_invalid_ranges(self, mock_llm, calendar, no_sleep, week_start, week_end):
        repository = AsyncMock()
        service = make_service(repository, mock_llm, calendar, no_sleep)

        with pytest.raises(InvalidDateRange):
            await service.generate_weekly_report(week_start, week_end)

        repository.get_weekly_report.assert_not_awaited()
        mock_llm.complete.assert_not_awaited()

    def test_fourteen_days_is_allowed(self):
        WeeklyReportService.validate_range("2024-01-01", "2024-01-15")


class TestGenerateWeeklyReport:
    """Summary selection: no-data, AI, fallback."""

    @pytest.mark.asyncio
    async def test_no_data_never_calls_ai(self, service, mock_llm):
        report = await service.generate_weekly_report(WEEK_START, WEEK_END)

        assert report.entries == []
        assert report.summary.narrative == "No standup data available for this week."
        mock_llm.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ai_summary_used(self, filled_repository, mock_llm, calendar, no_sleep):
        mock_llm.complete.return_value = json.dumps({
            "teamInsights": "Great week",
            "memberSummaries": {"alice": {"progress": "good"}},
        })
        service = make_service(filled_repository, mock_llm, calendar, no_sleep)

        report = await service.generate_weekly_report(WEEK_START, WEEK_END)

        assert report.summary.narrative == "Great week"
        assert list(report.summary.member_summaries) == ["Alice"]
        assert len(report.entries) == 3

    @pytest.mark.asyncio
    async def test_ai_failure_falls_back(self, filled_repository, mock_llm, calendar, no_sleep):
        mock_llm.complete.side_effect = LLMProviderError("server error", status_code=500)
        service = make_service(filled_repository, mock_llm, calendar, no_sleep)

        report = await service.generate_weekly_report(WEEK_START, WEEK_END)

        expected = RuleBasedSummarizer().summarize(report)
        assert report.summary == expected
        assert report.summary.narrative.startswith("Generated basic summary for 3 days")

    @pytest.mark.asyncio
    async def test_fallback_can_be_disabled(self, filled_repository, mock_llm, calendar, no_sleep):
        mock_llm.complete.side_effect = LLMProviderError("server error", status_code=500)
        service = make_service(filled_repository, mock_llm, calendar, no_sleep)

        with pytest.raises(AIRequestFailed):
            await service.generate_weekly_report(WEEK_START, WEEK_END, allow_fallback=False)

    @pytest.mark.asyncio
    async def test_unexpected_llm_error_falls_back(self, filled_repository, mock_llm, calendar, no_sleep):
        mock_llm.complete.side_effect = asyncio.TimeoutError()
        service = make_service(filled_repository, mock_llm, calendar, no_sleep)

        report = await service.generate_weekly_report(WEEK_START, WEEK_END)

        assert report.summary == RuleBasedSummarizer().summarize(report)
        mock_llm.complete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_groq_response_falls_back(self, filled_repository, calendar, no_sleep):
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        chat_model = Mock(ainvoke=AsyncMock(side_effect=groq.APIResponseValidationError(
            response=httpx.Response(200, request=request), body=None
        )))
        service = make_service(filled_repository, LangChainLLMWrapper(chat_model), calendar, no_sleep)

        report = await service.generate_weekly_report(WEEK_START, WEEK_END)

        assert report.summary == RuleBasedSummarizer().summarize(report)

    @pytest.mark.asyncio
    async def test_unexpected_llm_error_with_fallback_disabled(self, filled_repository, mock_llm, calendar, no_sleep):
        mock_llm.complete.side_effect = RuntimeError("boom")
        service = make_service(filled_repository, mock_llm, calendar, no_sleep)

        with pytest.raises(AIRequestFailed):
            await service.generate_weekly_report(WEEK_START, WEEK_END, allow_fallback=False)

    @pytest.mark.asyncio
    async def test_without_ai_uses_rule_based(self, filled_repository, mock_llm, calendar, no_sleep):
        service = make_service(filled_repository, mock_llm, calendar, no_sleep)

        report = await service.generate_weekly_report(WEEK_START, WEEK_END, include_ai=False)

        assert report.summary.key_accomplishments[0] == "Alice: Shipped X"
        mock_llm.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_llm_configured_falls_back(self, filled_repository, calendar):
        service = WeeklyReportService(filled_repository, calendar=calendar)
        report = await service.generate_weekly_report(WEEK_START, WEEK_END)
        assert report.summary.narrative.startswith("Generated basic summary")

    @pytest.mark.asyncio
    async def test_repository_failure(self, mock_llm, calendar, no_sleep):
        service = make_service(BrokenRepository(calendar=calendar), mock_llm, calendar, no_sleep)

        with pytest.raises(RepositoryFailure, match="Failed to generate weekly report"):
            await service.generate_weekly_report(WEEK_START, WEEK_END)


class TestSnapshots:
    """Saving, listing and storing reports."""

    @pytest.mark.asyncio
    async def test_save_twice_keeps_one_snapshot(self, filled_repository, calendar):
        service = WeeklyReportService(filled_repository, calendar=calendar)
        report = await service.generate_weekly_report(WEEK_START, WEEK_END, include_ai=False)

        await service.save_report(report, status="pending")
        await service.save_report(report)

        snapshots = await service.list_reports()
        assert len(snapshots) == 1
        assert snapshots[0].status == "generated"
        assert snapshots[0].total_updates == 4

    @pytest.mark.asyncio
    async def test_generate_and_store(self, filled_repository, calendar):
        service = WeeklyReportService(filled_repository, calendar=calendar)

        snapshot = await service.generate_and_store(WEEK_START, WEEK_END)

        assert snapshot.status == "generated"
        assert snapshot.unique_members == 2
        assert snapshot.report_data["summary"]["narrative"].startswith("Generated basic summary")

    @pytest.mark.asyncio
    async def test_generate_and_store_records_failure(self, mock_llm, calendar, no_sleep):
        repository = BrokenRepository(calendar=calendar)
        service = make_service(repository, mock_llm, calendar, no_sleep)

        with pytest.raises(RepositoryFailure):
            await service.generate_and_store(WEEK_START, WEEK_END)

        [snapshot] = await repository.list_report_snapshots()
        assert snapshot.status == "failed"
        assert snapshot.error == "Failed to generate weekly report"

    @pytest.mark.asyncio
    async def test_invalid_range_stores_nothing(self, memory_repository, calendar):
        service = WeeklyReportService(memory_repository, calendar=calendar)

        with pytest.raises(InvalidDateRange):
            await service.generate_and_store("2024-01-08", "2024-01-01")

        assert await memory_repository.list_report_snapshots() == []

    @pytest.mark.asyncio
    async def test_regenerate_summary_falls_back(self, filled_repository, mock_llm, calendar, no_sleep):
        service = make_service(filled_repository, mock_llm, calendar, no_sleep)
        report = await service.generate_weekly_report(WEEK_START, WEEK_END, include_ai=False)
        mock_llm.complete.return_value = "garbage"

        regenerated = await service.regenerate_summary(report)

        assert regenerated.summary == report.summary
        mock_llm.complete.assert_awaited_once()
