# ai_summarizer.py
"""LLM-generated weekly summaries with parsing, repair and bounded retries."""

import asyncio
import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from standup_digest.core import (
    LLMInterface,
    MemberSummary,
    ReportSummary,
    SummaryResult,
    WeeklyReport,
    settings,
)
from standup_digest.core.exceptions import AIParseFailed, AISummaryError, AIUnavailable

from .llm_calls import Sleep, complete_with_retry
from .rule_based_summarizer import RuleBasedSummarizer

logger = logging.getLogger(__name__)

MISSING_PROGRESS = "No progress summary provided"
MISSING_FOCUS = "No focus specified"

# Accepted spellings for each summary field, camelCase first
SUMMARY_KEYS = {
    "key_accomplishments": ("keyAccomplishments", "key_accomplishments"),
    "ongoing_work": ("ongoingWork", "ongoing_work"),
    "blockers": ("blockers",),
    "narrative": ("teamInsights", "narrative", "team_insights"),
    "recommendations": ("recommendations",),
    "member_summaries": ("memberSummaries", "member_summaries"),
}

MEMBER_KEYS = {
    "role": ("role",),
    "key_contributions": ("keyContributions", "key_contributions"),
    "progress_note": ("progress", "progressNote", "progress_note"),
    "concerns": ("concerns",),
    "next_focus": ("nextWeekFocus", "nextFocus", "next_focus"),
}

SYSTEM_PROMPT = """You are a project manager creating a weekly standup summary.

CRITICAL RULES:
1. The memberSummaries object must use EXACT member names as keys (no quotes around the keys)
2. Do NOT use generic field names like "role", "concerns", "progress" as keys
3. Do NOT escape quotes in JSON keys - use clean member names directly
4. Return ONLY valid JSON without any markdown formatting or code blocks

Return ONLY valid JSON in this exact format:
{
  "keyAccomplishments": ["accomplishment 1", "accomplishment 2"],
  "ongoingWork": ["ongoing work 1", "ongoing work 2"],
  "blockers": ["blocker 1", "blocker 2"],
  "teamInsights": "Brief team observation",
  "recommendations": ["recommendation 1", "recommendation 2"],
  "memberSummaries": {
    "<member name>": {
      "role": "Developer",
      "keyContributions": ["contribution 1", "contribution 2"],
      "progress": "Brief progress summary",
      "concerns": ["concern 1"],
      "nextWeekFocus": "What they're focusing on next"
    }
  }
}"""

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text.strip())


def extract_json_object(text: str) -> Dict[str, Any]:
    """Parse the first balanced top-level ``{...}`` block in ``text``.

    Braces inside JSON strings are ignored while scanning.

    Raises:
        AIParseFailed: no block found, or it does not decode to an object.
    """
    if not text or not text.strip():
        raise AIParseFailed("AI response was empty")

    cleaned = strip_code_fences(text)
    start = cleaned.find("{")
    if start == -1:
        raise AIParseFailed("AI response contained no JSON object")

    depth = 0
    in_string = False
    escaped = False
    end = None
    for index in range(start, len(cleaned)):
        char = cleaned[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                end = index + 1
                break

    if end is None:
        raise AIParseFailed("AI response JSON object is not closed")

    try:
        parsed = json.loads(cleaned[start:end])
    except json.JSONDecodeError as e:
        raise AIParseFailed(f"AI response is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise AIParseFailed("AI response JSON is not an object")
    return parsed


def normalize_member_key(key: str) -> str:
    """Strip whitespace, quote characters and stray escapes from a model-written key"""
    return key.strip().strip("\"'\\` ").strip()


def _as_string(item: Any) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, (dict, list)):
        return json.dumps(item)
    return str(item)


def coerce_string_list(value: Any, cap: Optional[int] = None) -> List[str]:
    """Turn whatever the model wrote into a list of strings, optionally capped"""
    if value is None:
        return []
    if isinstance(value, str):
        items = [value] if value.strip() else []
    elif isinstance(value, (list, tuple)):
        items = [_as_string(item) for item in value if item is not None]
    else:
        items = [_as_string(value)]
    return items[:cap] if cap is not None else items


def _pick(data: Dict[str, Any], aliases: Tuple[str, ...]) -> Any:
    for alias in aliases:
        if alias in data:
            return data[alias]
    return None


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    if isinstance(value, list) and value:
        return " ".join(str(item) for item in value)
    return default


class AISummarizer:
    """Builds a ReportSummary from an LLM response.

    The LLM is optional; without one every call reports ``AIUnavailable`` and
    callers fall back to the rule-based summary.
    """

    def __init__(
        self,
        llm: Optional[LLMInterface],
        max_tokens: int = settings.SUMMARY_MAX_TOKENS,
        max_retries: int = settings.AI_MAX_RETRIES,
        retry_delay: float = settings.AI_RETRY_DELAY_SECONDS,
        sleep: Sleep = asyncio.sleep,
        fallback: Optional[RuleBasedSummarizer] = None,
    ):
        self.llm = llm
        self.max_tokens = max_tokens
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.sleep = sleep
        self.fallback = fallback or RuleBasedSummarizer()
        self.list_cap = self.fallback.list_cap
        self.contribution_cap = self.fallback.contribution_cap

    @property
    def is_available(self) -> bool:
        return self.llm is not None

    def build_prompt(self, report: WeeklyReport) -> str:
        week_data = [
            {
                "date": entry.date,
                "teamMembers": [
                    {
                        "name": record.person_name,
                        "role": record.role,
                        "yesterday": record.yesterday,
                        "today": record.today,
                        "blockers": record.blockers,
                    }
                    for record in entry.records
                ],
            }
            for entry in report.entries
        ]
        names = ", ".join(member.name for member in report.get_unique_team_members())

        return f"""Analyze this standup data for {report.week_start} to {report.week_end}:

{json.dumps(week_data, indent=2)}

IMPORTANT: The team members are: {names}

Create a summary with:
1. Team accomplishments, ongoing work, and blockers
2. Individual summaries for each team member

CRITICAL: In memberSummaries, use ONLY these exact names as keys: {names}
Do NOT use any other keys like "role", "concerns", "progress", etc.

Return only valid JSON."""

    async def generate_summary(self, report: WeeklyReport) -> ReportSummary:
        """Ask the LLM for a summary of ``report``.

        Raises:
            AIUnavailable: the report has no entries or no LLM is configured.
            AIRequestFailed: the call failed or retries ran out.
            AIParseFailed: the response holds no usable summary.
        """
        if not report.entries:
            raise AIUnavailable("No entries to summarize")
        if self.llm is None:
            raise AIUnavailable("AI service is not configured")

        prompt = self.build_prompt(report)
        text = await complete_with_retry(
            self.llm,
            prompt,
            self.max_tokens,
            system_prompt=SYSTEM_PROMPT,
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            sleep=self.sleep,
        )
        parsed = extract_json_object(text)
        return self.validate(parsed, report)

    async def try_generate_summary(self, report: WeeklyReport) -> SummaryResult:
        try:
            return SummaryResult.ok(await self.generate_summary(report))
        except AISummaryError as e:
            return SummaryResult.err(e)

    async def regenerate_summary(self, report: WeeklyReport) -> ReportSummary:
        """Produce a fresh summary for an already generated report"""
        logger.info(
            f"Regenerating AI summary for {report.week_start}..{report.week_end} "
            f"({len(report.entries)} entries)"
        )
        return await self.generate_summary(report)

    def validate(self, parsed: Dict[str, Any], report: WeeklyReport) -> ReportSummary:
        """Repair a parsed response into a ReportSummary bound to the report's people"""
        if not any(_pick(parsed, aliases) is not None for aliases in SUMMARY_KEYS.values()):
            raise AIParseFailed("AI response JSON has none of the expected summary fields")

        members = self._validate_members(_pick(parsed, SUMMARY_KEYS["member_summaries"]), report)
        if not members:
            logger.info("AI response had no usable member summaries, deriving them from the entries")
            members = self.fallback.summarize_members(report)

        return ReportSummary(
            key_accomplishments=coerce_string_list(_pick(parsed, SUMMARY_KEYS["key_accomplishments"]), self.list_cap),
            ongoing_work=coerce_string_list(_pick(parsed, SUMMARY_KEYS["ongoing_work"]), self.list_cap),
            blockers=coerce_string_list(_pick(parsed, SUMMARY_KEYS["blockers"]), self.list_cap),
            narrative=_text(_pick(parsed, SUMMARY_KEYS["narrative"]), ""),
            recommendations=coerce_string_list(_pick(parsed, SUMMARY_KEYS["recommendations"])),
            member_summaries=members,
        )

    def _validate_members(self, raw: Any, report: WeeklyReport) -> Dict[str, MemberSummary]:
        if not isinstance(raw, dict):
            return {}

        known = {member.name.casefold(): member for member in report.get_unique_team_members()}
        members: Dict[str, MemberSummary] = {}
        for key, value in raw.items():
            member = known.get(normalize_member_key(str(key)).casefold())
            if member is None:
                logger.debug(f"Dropping member summary for unknown key {key!r}")
                continue
            if not isinstance(value, dict):
                continue

            role = _pick(value, MEMBER_KEYS["role"])
            members[member.name] = MemberSummary(
                role=role if isinstance(role, str) and role.strip() else member.role,
                key_contributions=coerce_string_list(
                    _pick(value, MEMBER_KEYS["key_contributions"]), self.contribution_cap
                ),
                progress_note=_text(_pick(value, MEMBER_KEYS["progress_note"]), MISSING_PROGRESS),
                concerns=coerce_string_list(_pick(value, MEMBER_KEYS["concerns"])),
                next_focus=_text(_pick(value, MEMBER_KEYS["next_focus"]), MISSING_FOCUS),
            )
        return members
