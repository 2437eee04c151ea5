# Services package
"""Business logic services for the standup reporting system."""

from .aggregator import StandupAggregator
from .ai_summarizer import AISummarizer
from .draft_generator import DraftGenerator
from .llm_calls import complete_with_retry
from .report_service import WeeklyReportService
from .roster import TeamRoster
from .rule_based_summarizer import RuleBasedSummarizer
from .scheduler import WeeklyReportScheduler
from .standup_service import StandupService

__all__ = [
    "StandupAggregator",
    "AISummarizer",
    "DraftGenerator",
    "complete_with_retry",
    "WeeklyReportService",
    "TeamRoster",
    "RuleBasedSummarizer",
    "WeeklyReportScheduler",
    "StandupService",
]
