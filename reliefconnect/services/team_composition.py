# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Team composition, pure computation, no side effects.

Skill coverage answers "which of the required skills does at least one
selected volunteer hold?". Team validation gates every team write so a
rejected team never reaches the store.
"""

from typing import Any, Iterable, Mapping, Optional

from reliefconnect.models.domain import SkillCoverage


class TeamValidationError(ValueError):
    """A team draft that must not be persisted."""


def evaluate_coverage(
    required_skills: Iterable[str],
    members: Iterable[Mapping[str, Any]],
) -> SkillCoverage:
    """
    Partition ``required_skills`` into covered and missing.

    A skill is covered when any member's ``skills`` contains it. Members
    without a ``skills`` entry hold nothing. Never raises.
    """
    held: set[str] = set()
    for member in members:
        held.update(member.get("skills") or ())

    covered: set[str] = set()
    missing: set[str] = set()
    for skill_id in required_skills:
        if skill_id in held:
            covered.add(skill_id)
        else:
            missing.add(skill_id)
    return SkillCoverage(covered=frozenset(covered), missing=frozenset(missing))


def ordered_coverage(
    required_skills: list[str], coverage: SkillCoverage
) -> tuple[list[str], list[str]]:
    """Covered and missing skills in the order they were required."""
    seen: set[str] = set()
    covered: list[str] = []
    missing: list[str] = []
    for skill_id in required_skills:
        if skill_id in seen:
            continue
        seen.add(skill_id)
        if skill_id in coverage.covered:
            covered.append(skill_id)
        else:
            missing.append(skill_id)
    return covered, missing


def validate_team(
    name: Optional[str],
    member_ids: list[str],
    leader_id: Optional[str],
) -> None:
    """Raise TeamValidationError on the first violated precondition."""
    if not name or not name.strip():
        raise TeamValidationError("Team name is required")
    if not member_ids:
        raise TeamValidationError("Please select at least one volunteer")
    if not leader_id:
        raise TeamValidationError("Please designate a team leader")
    if leader_id not in member_ids:
        raise TeamValidationError("Team leader must be one of the team members")


class TeamComposition:
    """
    Mutable selection of members, leader and required skills.

    Mirrors the team builder workflow: members are added once, removing the
    leader clears the designation, and a new leader silently replaces the
    old one.
    """

    def __init__(
        self,
        member_ids: Optional[Iterable[str]] = None,
        leader_id: Optional[str] = None,
        required_skills: Optional[Iterable[str]] = None,
    ) -> None:
        self.member_ids: list[str] = []
        for member_id in member_ids or ():
            self.add_member(member_id)
        self.leader_id = leader_id
        self.required_skills: list[str] = []
        for skill_id in required_skills or ():
            if skill_id not in self.required_skills:
                self.required_skills.append(skill_id)

    @classmethod
    def from_record(cls, team: Mapping[str, Any]) -> "TeamComposition":
        return cls(
            member_ids=team.get("members") or [],
            leader_id=team.get("leader_id"),
            required_skills=team.get("skills_required") or [],
        )

    def add_member(self, volunteer_id: str) -> bool:
        if volunteer_id in self.member_ids:
            return False
        self.member_ids.append(volunteer_id)
        return True

    def remove_member(self, volunteer_id: str) -> bool:
        if volunteer_id not in self.member_ids:
            return False
        self.member_ids.remove(volunteer_id)
        if self.leader_id == volunteer_id:
            self.leader_id = None
        return True

    def set_leader(self, volunteer_id: str) -> Optional[str]:
        """Designate a leader from the current members; returns the previous one."""
        if volunteer_id not in self.member_ids:
            raise TeamValidationError("Team leader must be one of the team members")
        previous = self.leader_id
        self.leader_id = volunteer_id
        return previous

    def toggle_skill(self, skill_id: str) -> bool:
        """Flip a required skill; returns True when it is now required."""
        if skill_id in self.required_skills:
            self.required_skills.remove(skill_id)
            return False
        self.required_skills.append(skill_id)
        return True

    def coverage(self, directory: Mapping[str, Mapping[str, Any]]) -> SkillCoverage:
        members = [directory[m] for m in self.member_ids if m in directory]
        return evaluate_coverage(self.required_skills, members)

    def validate(self, name: Optional[str]) -> None:
        validate_team(name, self.member_ids, self.leader_id)
