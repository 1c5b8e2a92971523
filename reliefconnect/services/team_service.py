# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Team building. Composition checks, persistence, membership changes.
Every write goes through TeamComposition so a rejected team is never stored.
"""

import uuid
from typing import Any, Dict, List, Optional

from reliefconnect.core.logging import get_logger
from reliefconnect.metrics import (
    COVERAGE_EVALUATIONS,
    TEAM_VALIDATION_FAILURES,
    TEAMS_CREATED,
)
from reliefconnect.repositories.team_repository import TeamRepository
from reliefconnect.services.incident_service import IncidentService
from reliefconnect.services.notification_client import NotificationClient
from reliefconnect.services.skill_service import SkillService
from reliefconnect.services.team_composition import (
    TeamComposition,
    TeamValidationError,
    ordered_coverage,
)
from reliefconnect.services.volunteer_service import VolunteerService

logger = get_logger(__name__)

# Fields a PATCH may clear with an explicit null.
NULLABLE_FIELDS = frozenset({"description", "location"})


class TeamService:
    """Business logic for volunteer teams."""

    def __init__(
        self,
        repo: TeamRepository,
        volunteer_service: VolunteerService,
        skill_service: SkillService,
        incident_service: IncidentService,
        notification_client: NotificationClient,
    ) -> None:
        self._repo = repo
        self._volunteers = volunteer_service
        self._skills = skill_service
        self._incidents = incident_service
        self._notifications = notification_client

    # ── Coverage ──

    def evaluate_coverage(self, required_skills: List[str],
                          member_ids: List[str]) -> Dict[str, Any]:
        """Coverage of ``required_skills`` by the given volunteers. Raises KeyError."""
        composition = TeamComposition(member_ids=member_ids, required_skills=required_skills)
        directory = self._volunteers.directory(composition.member_ids)
        return self._describe_coverage(composition, directory)

    def _describe_coverage(self, composition: TeamComposition,
                           directory: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
        coverage = composition.coverage(directory)
        covered, missing = ordered_coverage(composition.required_skills, coverage)
        COVERAGE_EVALUATIONS.labels(result="complete" if coverage.complete else "partial").inc()
        return {
            "covered": covered,
            "missing": missing,
            "complete": coverage.complete,
            "skill_names": self._skills.names_for(composition.required_skills),
        }

    def _with_coverage(self, team: Dict[str, Any]) -> Dict[str, Any]:
        composition = TeamComposition.from_record(team)
        directory = self._volunteers.lookup(composition.member_ids)
        return {**team, "coverage": self._describe_coverage(composition, directory)}

    # ── Commands ──

    def create_team(
        self,
        name: str,
        member_ids: List[str],
        leader_id: Optional[str],
        required_skills: List[str],
        description: Optional[str] = None,
        incident_id: Optional[str] = None,
        location: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Validate and persist a new team.

        Raises TeamValidationError for composition problems, ValueError for
        unknown skills and KeyError for unknown volunteers or incidents.
        Nothing is written unless every check passes.
        """
        composition = TeamComposition(
            member_ids=member_ids, leader_id=leader_id, required_skills=required_skills,
        )
        try:
            composition.validate(name)
        except TeamValidationError as exc:
            TEAM_VALIDATION_FAILURES.inc()
            logger.info("Team rejected: %s", exc)
            raise

        directory = self._volunteers.directory(composition.member_ids)
        self._skills.ensure_known(composition.required_skills)
        if incident_id and not self._incidents.exists(incident_id):
            raise KeyError(f"Incident {incident_id} not found")

        record = self._repo.create_team({
            "id": str(uuid.uuid4()),
            "name": name.strip(),
            "description": description,
            "leader_id": composition.leader_id,
            "members": composition.member_ids,
            "skills_required": composition.required_skills,
            "incident_id": incident_id,
            "location": location,
        })
        TEAMS_CREATED.inc()
        logger.info("Team created id=%s members=%d leader=%s",
                    record["id"], len(composition.member_ids), composition.leader_id,
                    extra={"team_id": record["id"], "incident_id": incident_id})

        for member in directory.values():
            recipient = member["contact_info"].get("email") or member["name"]
            self._notifications.send(
                channel="mock",
                recipient=recipient,
                message=f"You have been added to team '{record['name']}'",
                reference=incident_id or record["id"],
            )
        return {**record, "coverage": self._describe_coverage(composition, directory)}

    def update_team(self, team_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        current = self._get(team_id)
        changes = {k: v for k, v in changes.items() if v is not None or k in NULLABLE_FIELDS}
        if "name" in changes:
            if not changes["name"].strip():
                TEAM_VALIDATION_FAILURES.inc()
                raise TeamValidationError("Team name is required")
            changes["name"] = changes["name"].strip()
        if "required_skills" in changes:
            skills = list(dict.fromkeys(changes.pop("required_skills")))
            self._skills.ensure_known(skills)
            changes["skills_required"] = skills
        if not changes:
            return self._with_coverage(current)
        updated = self._repo.update_team(team_id, changes)
        logger.info("Team updated id=%s fields=%s", team_id, sorted(changes))
        return self._with_coverage(updated)

    def assign_leader(self, team_id: str, volunteer_id: str) -> Dict[str, Any]:
        """Designate a member as leader, silently replacing the previous one."""
        composition = TeamComposition.from_record(self._get(team_id))
        try:
            previous = composition.set_leader(volunteer_id)
        except TeamValidationError:
            TEAM_VALIDATION_FAILURES.inc()
            raise
        updated = self._repo.update_team(team_id, {"leader_id": composition.leader_id})
        logger.info("Team leader changed id=%s from=%s to=%s", team_id, previous, volunteer_id)
        return self._with_coverage(updated)

    def add_member(self, team_id: str, volunteer_id: str) -> Dict[str, Any]:
        team = self._get(team_id)
        self._volunteers.get_volunteer(volunteer_id)
        composition = TeamComposition.from_record(team)
        if not composition.add_member(volunteer_id):
            return self._with_coverage(team)
        updated = self._repo.update_team(team_id, {"members": composition.member_ids})
        logger.info("Team member added id=%s volunteer=%s", team_id, volunteer_id)
        return self._with_coverage(updated)

    def toggle_skill(self, team_id: str, skill_id: str) -> Dict[str, Any]:
        """Add a required skill, or drop it when already required."""
        composition = TeamComposition.from_record(self._get(team_id))
        if composition.toggle_skill(skill_id):
            self._skills.ensure_known([skill_id])
        updated = self._repo.update_team(team_id, {"skills_required": composition.required_skills})
        logger.info("Team skill toggled id=%s skill=%s required=%s",
                    team_id, skill_id, skill_id in composition.required_skills,
                    extra={"team_id": team_id})
        return self._with_coverage(updated)

    def remove_member(self, team_id: str, volunteer_id: str) -> Dict[str, Any]:
        """Drop a member; removing the leader clears the designation."""
        composition = TeamComposition.from_record(self._get(team_id))
        if volunteer_id not in composition.member_ids:
            raise KeyError(f"Volunteer {volunteer_id} is not a member of team {team_id}")
        if len(composition.member_ids) == 1:
            TEAM_VALIDATION_FAILURES.inc()
            raise TeamValidationError("A team needs at least one volunteer")
        composition.remove_member(volunteer_id)
        updated = self._repo.update_team(
            team_id, {"members": composition.member_ids, "leader_id": composition.leader_id},
        )
        logger.info("Team member removed id=%s volunteer=%s", team_id, volunteer_id)
        return self._with_coverage(updated)

    # ── Queries ──

    def _get(self, team_id: str) -> Dict[str, Any]:
        team = self._repo.get_team(team_id)
        if team is None:
            raise KeyError(f"Team {team_id} not found")
        return team

    def get_team(self, team_id: str) -> Dict[str, Any]:
        return self._with_coverage(self._get(team_id))

    def list_teams(self, active: Optional[bool] = None,
                   incident_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return self._repo.list_teams(active, incident_id)

    def count_active(self) -> int:
        return self._repo.count_active()
