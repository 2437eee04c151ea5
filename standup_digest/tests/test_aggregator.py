# test_aggregator.py
"""Tests for grouping records into entries and reports."""

from datetime import datetime, timezone

from standup_digest.core import Entry, UpdateRecord
from standup_digest.services import StandupAggregator

from .helpers import WEEK_END, WEEK_START, make_record


class TestBuildReport:
    """Records to WeeklyReport."""

    def test_one_entry_per_day_ascending(self, calendar, sample_records):
        report = StandupAggregator(calendar).build_report(list(reversed(sample_records)), WEEK_START, WEEK_END)

        dates = [entry.date for entry in report.entries]
        assert dates == ["2024-06-03", "2024-06-04", "2024-06-05"]
        assert len(dates) == len(set(dates))
        assert all(WEEK_START <= d <= WEEK_END for d in dates)

    def test_records_within_a_day_in_timestamp_order(self, calendar):
        records = [
            make_record("Late", "2024-06-03", hour=15, yesterday="b"),
            make_record("Early", "2024-06-03", hour=8, yesterday="a"),
        ]
        report = StandupAggregator(calendar).build_report(records, WEEK_START, WEEK_END)
        assert [r.person_name for r in report.entries[0].records] == ["Early", "Late"]

    def test_records_outside_window_dropped(self, calendar):
        records = [
            make_record("Alice", "2024-06-02", yesterday="before"),
            make_record("Alice", "2024-06-05", yesterday="inside"),
            make_record("Alice", "2024-06-10", yesterday="after"),
        ]
        report = StandupAggregator(calendar).build_report(records, WEEK_START, WEEK_END)
        assert [entry.date for entry in report.entries] == ["2024-06-05"]

    def test_no_records_gives_empty_report(self, calendar):
        report = StandupAggregator(calendar).build_report([], WEEK_START, WEEK_END)
        assert report.entries == []
        assert not report.has_data()

    def test_groups_by_local_date(self, calendar):
        # 05:00 UTC on the 4th is 22:00 on the 3rd in Vancouver
        record = UpdateRecord(
            person_name="Alice",
            role="Developer",
            timestamp=datetime(2024, 6, 4, 5, 0, tzinfo=timezone.utc),
            yesterday="late night push",
        )
        report = StandupAggregator(calendar).build_report([record], WEEK_START, WEEK_END)
        assert report.entries[0].date == "2024-06-03"


class TestBuildReportFromEntries:
    """Normalizing an existing per-day grouping."""

    def test_merges_duplicate_dates_and_drops_empty(self, calendar):
        first = Entry("a", "2024-06-04", [make_record("Alice", "2024-06-04", hour=11, yesterday="x")], "t")
        second = Entry("b", "2024-06-04", [make_record("Bob", "2024-06-04", hour=8, yesterday="y")], "t")
        empty = Entry("c", "2024-06-05", [], "t")
        outside = Entry("d", "2024-06-20", [make_record("Bob", "2024-06-20", yesterday="z")], "t")

        report = StandupAggregator(calendar).build_report_from_entries(
            [outside, first, empty, second], WEEK_START, WEEK_END
        )

        assert len(report.entries) == 1
        entry = report.entries[0]
        assert entry.id == "a"
        assert [r.person_name for r in entry.records] == ["Bob", "Alice"]


class TestBuildHistory:
    """Past days, newest first."""

    def test_history_excludes_before_date_and_caps_days(self, calendar):
        records = [make_record("Alice", f"2024-06-{day:02d}", yesterday="x") for day in range(1, 8)]
        history = StandupAggregator(calendar).build_history(records, "2024-06-07", max_days=3)

        assert [entry.date for entry in history] == ["2024-06-06", "2024-06-05", "2024-06-04"]
        assert history[0].id == "date-2024-06-06"
