# aggregator.py
"""Groups raw per-person update records into per-day entries and weekly reports."""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from standup_digest.core import Entry, ReportSummary, StandupCalendar, UpdateRecord, WeeklyReport


class StandupAggregator:
    """Builds the canonical Entry / WeeklyReport structure from records"""

    def __init__(self, calendar: Optional[StandupCalendar] = None):
        self.calendar = calendar or StandupCalendar()

    def group_by_date(self, records: Iterable[UpdateRecord]) -> Dict[str, List[UpdateRecord]]:
        """Bucket records by local calendar day, each bucket in timestamp order"""
        grouped = defaultdict(list)
        for record in records:
            grouped[self.calendar.local_date(record.timestamp)].append(record)

        for day_records in grouped.values():
            day_records.sort(key=lambda r: self.calendar.to_local(r.timestamp))
        return dict(grouped)

    def make_entry(self, date: str, records: List[UpdateRecord], entry_id: Optional[str] = None) -> Entry:
        return Entry(
            id=entry_id or f"entry-{date}",
            date=date,
            records=list(records),
            created_at=records[0].timestamp.isoformat() if records else date,
        )

    def build_report(
        self,
        records: Iterable[UpdateRecord],
        week_start: str,
        week_end: str,
        summary: Optional[ReportSummary] = None,
    ) -> WeeklyReport:
        """One entry per day in the window that has records, ascending by date"""
        grouped = self.group_by_date(records)
        entries = [
            self.make_entry(date, day_records)
            for date, day_records in sorted(grouped.items())
            if week_start <= date <= week_end
        ]
        return WeeklyReport(week_start, week_end, entries, summary or ReportSummary())

    def build_report_from_entries(
        self,
        entries: Iterable[Entry],
        week_start: str,
        week_end: str,
        summary: Optional[ReportSummary] = None,
    ) -> WeeklyReport:
        """Normalize an existing per-day grouping into a report for the window"""
        first_seen: Dict[str, Entry] = {}
        merged = defaultdict(list)
        for entry in entries:
            if not week_start <= entry.date <= week_end:
                continue
            first_seen.setdefault(entry.date, entry)
            merged[entry.date].extend(entry.records)

        normalized = []
        for date in sorted(merged):
            records = sorted(merged[date], key=lambda r: self.calendar.to_local(r.timestamp))
            if not records:
                continue
            normalized.append(self.make_entry(date, records, entry_id=first_seen[date].id))
        return WeeklyReport(week_start, week_end, normalized, summary or ReportSummary())

    def build_history(self, records: Iterable[UpdateRecord], before_date: str, max_days: int) -> List[Entry]:
        """Entries for days before ``before_date``, newest first, at most ``max_days``"""
        grouped = self.group_by_date(records)
        days = sorted((date for date in grouped if date < before_date), reverse=True)[:max_days]
        return [self.make_entry(date, grouped[date], entry_id=f"date-{date}") for date in days]
