# rule_based_summarizer.py
"""Deterministic weekly summary built straight from the report entries."""

from typing import Dict, List

from standup_digest.core import MemberSummary, ReportSummary, WeeklyReport, has_content, settings

NO_DATA_NARRATIVE = "No standup data available for this week."
DEFAULT_NEXT_FOCUS = "Continue current project work"


class RuleBasedSummarizer:
    """Fallback summarizer; always succeeds and never calls out"""

    def __init__(self, list_cap: int = settings.SUMMARY_LIST_CAP,
                 contribution_cap: int = settings.MEMBER_CONTRIBUTION_CAP):
        self.list_cap = list_cap
        self.contribution_cap = contribution_cap

    def summarize(self, report: WeeklyReport) -> ReportSummary:
        accomplishments: List[str] = []
        ongoing: List[str] = []
        blockers: List[str] = []

        for entry in report.entries:
            for record in entry.records:
                if has_content(record.yesterday):
                    accomplishments.append(f"{record.person_name}: {record.yesterday}")
                if has_content(record.today):
                    ongoing.append(f"{record.person_name}: {record.today}")
                if has_content(record.blockers):
                    blockers.append(f"{record.person_name}: {record.blockers}")

        narrative = (
            f"Generated basic summary for {len(report.entries)} days with "
            f"{len(accomplishments)} accomplishments, {len(ongoing)} ongoing tasks, "
            f"and {len(blockers)} blockers."
        )

        return ReportSummary(
            key_accomplishments=accomplishments[:self.list_cap],
            ongoing_work=ongoing[:self.list_cap],
            blockers=blockers[:self.list_cap],
            narrative=narrative,
            recommendations=[],
            member_summaries=self.summarize_members(report),
        )

    def summarize_members(self, report: WeeklyReport) -> Dict[str, MemberSummary]:
        """One MemberSummary per person, keyed by exact name"""
        summaries = {}
        for member in report.get_unique_team_members():
            entries = report.get_entries_for_member(member.name)
            records = [record for entry in entries for record in entry.records]

            contributions = [r.yesterday for r in records if has_content(r.yesterday)]
            concerns = [r.blockers for r in records if has_content(r.blockers)]

            summaries[member.name] = MemberSummary(
                role=member.role,
                key_contributions=contributions[:self.contribution_cap],
                progress_note=f"Completed work on {len(entries)} day(s)",
                concerns=concerns,
                next_focus=DEFAULT_NEXT_FOCUS,
            )
        return summaries

    def no_data_summary(self) -> ReportSummary:
        return ReportSummary(narrative=NO_DATA_NARRATIVE)
