# draft_generator.py
"""AI-written drafts of a person's yesterday / today / blockers fields."""

import asyncio
import json
import logging
from datetime import timedelta
from typing import Dict, Iterable, List, Optional

from standup_digest.core import LLMInterface, StandupCalendar, UpdateRecord, settings
from standup_digest.core.exceptions import AIRequestFailed, AIUnavailable

from .llm_calls import Sleep, complete_with_retry

logger = logging.getLogger(__name__)

DRAFT_FIELDS = ("yesterday", "today", "blockers")
RECENT_CONTEXT_DAYS = 3
CONTEXT_RECORDS = 3

_FORMAT_RULES = """The response should be:
- HTML format with proper tags (use <p>, <ul>, <li>, <strong> tags)
- Relevant to their role
- Realistic for one day's work
- Use <strong> for bold text, not **markdown** syntax"""

SYSTEM_PROMPTS = {
    "yesterday": f"""You are an AI assistant helping a team member write the "What did you do yesterday?" part of their daily standup.
Generate a brief, direct summary of what they accomplished on the previous business day.
Start immediately with the content, no preamble.

{_FORMAT_RULES}""",
    "today": f"""You are an AI assistant helping a team member write the "What will you do today?" part of their daily standup.
Generate a professional, actionable plan that shows progression from previous work if applicable.

{_FORMAT_RULES}""",
    "blockers": f"""You are an AI assistant helping a team member write the "Any blockers or challenges?" part of their daily standup.
Generate specific, actionable blockers such as dependencies, technical issues or resource constraints.
If nothing is blocking them, say so.

{_FORMAT_RULES}""",
}

FIELD_REQUESTS = {
    "yesterday": 'Generate a brief "What did you do yesterday?" update',
    "today": 'Generate a "What will you do today?" update',
    "blockers": 'Generate potential "blockers or challenges"',
}


def _record_context(records: List[UpdateRecord]) -> str:
    return json.dumps(
        [
            {
                "date": record.timestamp.isoformat(),
                "yesterday": record.yesterday,
                "today": record.today,
                "blockers": record.blockers,
            }
            for record in records
        ],
        indent=2,
    )


class DraftGenerator:
    """Generates HTML standup drafts for one person"""

    def __init__(
        self,
        llm: Optional[LLMInterface],
        calendar: Optional[StandupCalendar] = None,
        max_tokens: int = settings.DRAFT_MAX_TOKENS,
        max_retries: int = settings.AI_MAX_RETRIES,
        retry_delay: float = settings.AI_RETRY_DELAY_SECONDS,
        sleep: Sleep = asyncio.sleep,
    ):
        self.llm = llm
        self.calendar = calendar or StandupCalendar()
        self.max_tokens = max_tokens
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.sleep = sleep

    def recent_records(self, records: Iterable[UpdateRecord]) -> List[UpdateRecord]:
        """The latest few records submitted within the last three days"""
        cutoff = self.calendar.now() - timedelta(days=RECENT_CONTEXT_DAYS)
        recent = [r for r in records if self.calendar.to_local(r.timestamp) >= cutoff]
        recent.sort(key=lambda r: self.calendar.to_local(r.timestamp))
        return recent[-CONTEXT_RECORDS:]

    def build_prompt(
        self,
        name: str,
        role: str,
        field: str,
        context: Optional[str] = None,
        previous_records: Iterable[UpdateRecord] = (),
    ) -> str:
        lines = [f"{FIELD_REQUESTS[field]} for:", f"- Name: {name}", f"- Role: {role}"]

        previous_records = list(previous_records)
        if field == "yesterday":
            lines.append(f"- Day being described: {self.calendar.previous_business_day()}")
            context_records = self.recent_records(previous_records)
            label = "Recent work context (last 3 days)"
        else:
            context_records = previous_records[-CONTEXT_RECORDS:]
            label = "Previous entries for context"

        if context:
            lines.append(f"- Additional context: {context}")
        if context_records:
            lines.append(f"- {label}: {_record_context(context_records)}")

        lines.append("")
        lines.append("Provide the content in HTML format only. No introductory text or explanations.")
        return "\n".join(lines)

    async def generate_field_content(
        self,
        name: str,
        role: str,
        field: str,
        context: Optional[str] = None,
        previous_records: Iterable[UpdateRecord] = (),
    ) -> str:
        if field not in DRAFT_FIELDS:
            raise ValueError(f"Unknown draft field: {field}")
        if self.llm is None:
            raise AIUnavailable("AI service is not configured")

        prompt = self.build_prompt(name, role, field, context, previous_records)
        text = await complete_with_retry(
            self.llm,
            prompt,
            self.max_tokens,
            system_prompt=SYSTEM_PROMPTS[field],
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            sleep=self.sleep,
        )
        return text.strip()

    async def generate_full_draft(
        self, name: str, role: str, previous_records: Iterable[UpdateRecord] = ()
    ) -> Dict[str, str]:
        """Draft all three fields concurrently; one failure fails the whole draft"""
        if self.llm is None:
            raise AIUnavailable("AI service is not configured")

        previous_records = list(previous_records)
        tasks = [
            asyncio.ensure_future(self.generate_field_content(name, role, field, None, previous_records))
            for field in DRAFT_FIELDS
        ]
        try:
            results = await asyncio.gather(*tasks)
        except Exception as e:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.error(f"Draft generation failed for {name}: {e}")
            if isinstance(e, AIRequestFailed):
                raise
            raise AIRequestFailed(f"Draft generation failed: {str(e)}") from e

        return dict(zip(DRAFT_FIELDS, results))
