# models.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

# Literal values a person types (or the editor wraps) to mean "nothing to report".
# Matching is exact on purpose: "none", "N/A" or " None " are kept as content.
NO_CONTENT_SENTINELS = ("None", "<p>None</p>")

SNAPSHOT_STATUSES = ("pending", "generated", "failed")


def has_content(text: Optional[str]) -> bool:
    """True when a rich-text field carries an actual update"""
    if not text or text.strip() == "":
        return False
    return text not in NO_CONTENT_SENTINELS


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass(frozen=True)
class TeamMember:
    """A person known to the team roster"""

    name: str
    role: str
    id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "role": self.role}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TeamMember":
        return cls(name=data["name"], role=data.get("role", ""), id=data.get("id"))


@dataclass(frozen=True)
class UpdateRecord:
    """One person's yesterday/today/blockers submission"""

    person_name: str
    role: str
    timestamp: datetime
    yesterday: str = ""
    today: str = ""
    blockers: str = ""
    member_id: Optional[str] = None

    def has_update(self) -> bool:
        return bool(self.yesterday or self.today or self.blockers)

    def get_update_summary(self) -> str:
        parts = []
        if self.yesterday:
            parts.append(f"Yesterday: {self.yesterday[:50]}...")
        if self.today:
            parts.append(f"Today: {self.today[:50]}...")
        if self.blockers:
            parts.append(f"Blockers: {self.blockers[:50]}...")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "person_name": self.person_name,
            "role": self.role,
            "yesterday": self.yesterday,
            "today": self.today,
            "blockers": self.blockers,
            "timestamp": self.timestamp.isoformat(),
            "member_id": self.member_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UpdateRecord":
        return cls(
            person_name=data["person_name"],
            role=data.get("role", ""),
            timestamp=_parse_timestamp(data["timestamp"]),
            yesterday=data.get("yesterday") or "",
            today=data.get("today") or "",
            blockers=data.get("blockers") or "",
            member_id=data.get("member_id"),
        )


@dataclass(frozen=True)
class Entry:
    """All update records submitted for one calendar day"""

    id: str
    date: str
    records: List[UpdateRecord]
    created_at: str

    def get_update_count(self) -> int:
        return sum(1 for record in self.records if record.has_update())

    def get_members_without_updates(self) -> List[UpdateRecord]:
        return [record for record in self.records if not record.has_update()]

    def get_all_accomplishments(self) -> List[str]:
        return [record.yesterday for record in self.records if has_content(record.yesterday)]

    def get_all_planned_work(self) -> List[str]:
        return [record.today for record in self.records if has_content(record.today)]

    def get_all_blockers(self) -> List[str]:
        return [record.blockers for record in self.records if has_content(record.blockers)]

    def has_blockers(self) -> bool:
        return len(self.get_all_blockers()) > 0

    def get_summary(self) -> str:
        return (
            f"{self.get_update_count()}/{len(self.records)} members updated. "
            f"{len(self.get_all_blockers())} blocker(s) reported."
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "records": [record.to_dict() for record in self.records],
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entry":
        return cls(
            id=data["id"],
            date=data["date"],
            records=[UpdateRecord.from_dict(record) for record in data.get("records", [])],
            created_at=data.get("created_at") or data["date"],
        )


@dataclass(frozen=True)
class MemberSummary:
    """Per-person slice of a weekly summary"""

    role: str
    key_contributions: List[str] = field(default_factory=list)
    progress_note: str = ""
    concerns: List[str] = field(default_factory=list)
    next_focus: str = ""

    def has_concerns(self) -> bool:
        return len(self.concerns) > 0

    def get_summary(self) -> str:
        parts = []
        if self.key_contributions:
            parts.append(f"{len(self.key_contributions)} contributions")
        if self.concerns:
            parts.append(f"{len(self.concerns)} concerns")
        if self.progress_note.strip():
            parts.append("progress noted")
        if self.next_focus.strip():
            parts.append("next week planned")
        return ", ".join(parts) if parts else "No summary data available"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "key_contributions": list(self.key_contributions),
            "progress_note": self.progress_note,
            "concerns": list(self.concerns),
            "next_focus": self.next_focus,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MemberSummary":
        return cls(
            role=data.get("role") or "",
            key_contributions=list(data.get("key_contributions") or []),
            progress_note=data.get("progress_note") or "",
            concerns=list(data.get("concerns") or []),
            next_focus=data.get("next_focus") or "",
        )


@dataclass(frozen=True)
class ReportSummary:
    """Structured summary attached to a weekly report"""

    key_accomplishments: List[str] = field(default_factory=list)
    ongoing_work: List[str] = field(default_factory=list)
    blockers: List[str] = field(default_factory=list)
    narrative: str = ""
    recommendations: List[str] = field(default_factory=list)
    member_summaries: Dict[str, MemberSummary] = field(default_factory=dict)

    def get_member_summary(self, name: str) -> Optional[MemberSummary]:
        return self.member_summaries.get(name)

    def get_member_names(self) -> List[str]:
        return list(self.member_summaries.keys())

    def has_blockers(self) -> bool:
        return len(self.blockers) > 0

    def has_content(self) -> bool:
        return bool(
            self.key_accomplishments
            or self.ongoing_work
            or self.blockers
            or self.narrative.strip()
            or self.recommendations
            or self.member_summaries
        )

    def get_meta_summary(self) -> str:
        parts = []
        if self.key_accomplishments:
            parts.append(f"{len(self.key_accomplishments)} accomplishments")
        if self.ongoing_work:
            parts.append(f"{len(self.ongoing_work)} ongoing items")
        if self.blockers:
            parts.append(f"{len(self.blockers)} blockers")
        if self.recommendations:
            parts.append(f"{len(self.recommendations)} recommendations")
        if self.member_summaries:
            parts.append(f"{len(self.member_summaries)} member summaries")
        return ", ".join(parts) if parts else "No summary data available"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key_accomplishments": list(self.key_accomplishments),
            "ongoing_work": list(self.ongoing_work),
            "blockers": list(self.blockers),
            "narrative": self.narrative,
            "recommendations": list(self.recommendations),
            "member_summaries": {
                name: summary.to_dict() for name, summary in self.member_summaries.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReportSummary":
        return cls(
            key_accomplishments=list(data.get("key_accomplishments") or []),
            ongoing_work=list(data.get("ongoing_work") or []),
            blockers=list(data.get("blockers") or []),
            narrative=data.get("narrative") or "",
            recommendations=list(data.get("recommendations") or []),
            member_summaries={
                name: MemberSummary.from_dict(summary)
                for name, summary in (data.get("member_summaries") or {}).items()
            },
        )


@dataclass(frozen=True)
class WeeklyReport:
    """Entries in a date window plus the summary derived from them"""

    week_start: str
    week_end: str
    entries: List[Entry]
    summary: ReportSummary = field(default_factory=ReportSummary)

    def __post_init__(self):
        if self.week_start > self.week_end:
            raise ValueError(f"week_start {self.week_start} is after week_end {self.week_end}")
        for entry in self.entries:
            if not self.week_start <= entry.date <= self.week_end:
                raise ValueError(f"Entry {entry.date} outside {self.week_start}..{self.week_end}")

    def with_summary(self, summary: ReportSummary) -> "WeeklyReport":
        return replace(self, summary=summary)

    def get_total_updates(self) -> int:
        return sum(entry.get_update_count() for entry in self.entries)

    def get_unique_members(self) -> int:
        return len({record.person_name for entry in self.entries for record in entry.records})

    def get_all_accomplishments(self) -> List[str]:
        return [item for entry in self.entries for item in entry.get_all_accomplishments()]

    def get_all_planned_work(self) -> List[str]:
        return [item for entry in self.entries for item in entry.get_all_planned_work()]

    def get_all_blockers(self) -> List[str]:
        return [item for entry in self.entries for item in entry.get_all_blockers()]

    def get_entries_for_member(self, name: str) -> List[Entry]:
        narrowed = []
        for entry in self.entries:
            records = [record for record in entry.records if record.person_name == name]
            if records:
                narrowed.append(replace(entry, records=records))
        return narrowed

    def get_unique_team_members(self) -> List[TeamMember]:
        """People seen in the window, first-seen role wins, sorted by name"""
        members: Dict[str, TeamMember] = {}
        for entry in self.entries:
            for record in entry.records:
                if record.person_name not in members:
                    members[record.person_name] = TeamMember(
                        name=record.person_name, role=record.role, id=record.member_id
                    )
        return sorted(members.values(), key=lambda m: (m.name.casefold(), m.name))

    def has_data(self) -> bool:
        return len(self.entries) > 0 and self.get_total_updates() > 0

    def get_report_summary(self) -> str:
        return (
            f"Week of {self.week_start} to {self.week_end}: {self.get_total_updates()} updates "
            f"from {self.get_unique_members()} members across {len(self.entries)} days. "
            f"{len(self.get_all_blockers())} blockers reported."
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_start": self.week_start,
            "week_end": self.week_end,
            "total_updates": self.get_total_updates(),
            "unique_members": self.get_unique_members(),
            "entries": [entry.to_dict() for entry in self.entries],
            "summary": self.summary.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeeklyReport":
        return cls(
            week_start=data["week_start"],
            week_end=data["week_end"],
            entries=[Entry.from_dict(entry) for entry in data.get("entries", [])],
            summary=ReportSummary.from_dict(data.get("summary") or {}),
        )


@dataclass(frozen=True)
class ReportSnapshot:
    """Persisted copy of a generated report, one per (week_start, week_end)"""

    week_start: str
    week_end: str
    total_updates: int
    unique_members: int
    report_data: Dict[str, Any]
    status: str = "generated"
    error: Optional[str] = None
    generated_at: Optional[str] = None

    def __post_init__(self):
        if self.status not in SNAPSHOT_STATUSES:
            raise ValueError(f"Unknown snapshot status: {self.status}")

    @classmethod
    def from_report(
        cls,
        report: WeeklyReport,
        status: str = "generated",
        error: Optional[str] = None,
        generated_at: Optional[datetime] = None,
    ) -> "ReportSnapshot":
        return cls(
            week_start=report.week_start,
            week_end=report.week_end,
            total_updates=report.get_total_updates(),
            unique_members=report.get_unique_members(),
            report_data=report.to_dict(),
            status=status,
            error=error,
            generated_at=(generated_at or datetime.now(timezone.utc)).isoformat(),
        )

    def get_report(self) -> WeeklyReport:
        return WeeklyReport.from_dict(self.report_data)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "week_start": self.week_start,
            "week_end": self.week_end,
            "total_updates": self.total_updates,
            "unique_members": self.unique_members,
            "report_data": self.report_data,
            "status": self.status,
            "generated_at": self.generated_at,
        }
        if self.error:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class SummaryResult:
    """Outcome of the AI summary step: a summary or the reason there is none"""

    summary: Optional[ReportSummary] = None
    error: Optional[Exception] = None

    @classmethod
    def ok(cls, summary: ReportSummary) -> "SummaryResult":
        return cls(summary=summary)

    @classmethod
    def err(cls, error: Exception) -> "SummaryResult":
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.summary is not None
