# roster.py
"""Team roster: the closed set of people who submit standups."""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from standup_digest.core import TeamMember, UpdateRecord, settings


class TeamRoster:
    """Injected list of {id, name, role} team members"""

    def __init__(self, members: Iterable[Union[TeamMember, Dict[str, Any]]]):
        self._members = [
            member if isinstance(member, TeamMember) else TeamMember.from_dict(member)
            for member in members
        ]

    @classmethod
    def from_settings(cls) -> "TeamRoster":
        return cls(settings.TEAM_ROSTER)

    def members(self) -> List[TeamMember]:
        return list(self._members)

    def find_by_name(self, name: str) -> Optional[TeamMember]:
        """Exact, case-sensitive lookup"""
        for member in self._members:
            if member.name == name:
                return member
        return None

    @staticmethod
    def validate_form_data(form_data: Dict[str, Any]) -> List[str]:
        """Return the list of problems with a submitted form; empty when valid"""
        errors = []
        if not str(form_data.get("name") or "").strip():
            errors.append("Name is required")
        if not str(form_data.get("role") or "").strip():
            errors.append("Role is required")
        return errors

    def create_record_from_form(self, form_data: Dict[str, Any], timestamp: datetime) -> UpdateRecord:
        """Build an UpdateRecord, linking it to the roster entry when the name is known"""
        member = self.find_by_name(form_data.get("name", ""))
        return UpdateRecord(
            person_name=form_data.get("name", ""),
            role=form_data.get("role") or (member.role if member else ""),
            timestamp=timestamp,
            yesterday=form_data.get("yesterday") or "",
            today=form_data.get("today") or "",
            blockers=form_data.get("blockers") or "",
            member_id=form_data.get("member_id") or (member.id if member else None),
        )
