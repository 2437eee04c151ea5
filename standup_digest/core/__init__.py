# Core package
"""Core models, configuration and contracts for the standup reporting system."""

from .dates import StandupCalendar, format_date, parse_date
from .interfaces import LLMInterface
from .models import (
    Entry,
    MemberSummary,
    ReportSnapshot,
    ReportSummary,
    SummaryResult,
    TeamMember,
    UpdateRecord,
    WeeklyReport,
    has_content,
)
from .settings import settings

__all__ = [
    "LLMInterface",
    "StandupCalendar",
    "format_date",
    "parse_date",
    "Entry",
    "MemberSummary",
    "ReportSnapshot",
    "ReportSummary",
    "SummaryResult",
    "TeamMember",
    "UpdateRecord",
    "WeeklyReport",
    "has_content",
    "settings",
]
