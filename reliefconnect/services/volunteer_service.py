# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Business logic for the volunteer directory and check-in codes."""
import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from reliefconnect.core.config import settings
from reliefconnect.core.logging import get_logger
from reliefconnect.metrics import VOLUNTEERS_REGISTERED
from reliefconnect.repositories.team_repository import TeamRepository
from reliefconnect.repositories.volunteer_repository import VolunteerRepository
from reliefconnect.services.skill_service import SkillService

logger = get_logger(__name__)

# Fields a PATCH may clear with an explicit null.
NULLABLE_FIELDS = frozenset({"current_task"})


class VolunteerOnTeamError(ValueError):
    """The volunteer still belongs to a team and cannot be removed."""


class VolunteerService:
    def __init__(self, repo: VolunteerRepository, skill_service: SkillService,
                 team_repo: TeamRepository):
        self._repo = repo
        self._skills = skill_service
        self._teams = team_repo

    # ── Commands ──

    def register_volunteer(self, volunteer: Dict[str, Any]) -> Dict[str, Any]:
        """Create a volunteer profile. Raises ValueError on unknown skills."""
        self._skills.ensure_known(volunteer.get("skills", []))
        record = {"id": str(uuid.uuid4()), **volunteer}
        result = self._repo.create_volunteer(record)
        VOLUNTEERS_REGISTERED.labels(experience_level=record["experience_level"]).inc()
        logger.info("Volunteer registered id=%s skills=%d",
                    record["id"], len(record.get("skills", [])))
        return result

    def update_volunteer(self, volunteer_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        current = self.get_volunteer(volunteer_id)
        changes = {k: v for k, v in changes.items() if v is not None or k in NULLABLE_FIELDS}
        if "skills" in changes:
            self._skills.ensure_known(changes["skills"])
        if not changes:
            return current
        logger.info("Volunteer updated id=%s fields=%s", volunteer_id, sorted(changes))
        return self._repo.update_volunteer(volunteer_id, changes)

    def delete_volunteer(self, volunteer_id: str) -> Dict[str, str]:
        """Remove a profile. Raises KeyError, or VolunteerOnTeamError while on a team."""
        self.get_volunteer(volunteer_id)
        teams = [t["name"] for t in self._teams.list_teams() if volunteer_id in t["members"]]
        if teams:
            raise VolunteerOnTeamError(
                f"Volunteer {volunteer_id} is a member of: {', '.join(teams)}. "
                "Remove them from those teams first"
            )
        if not self._repo.delete_volunteer(volunteer_id):
            raise KeyError(f"Volunteer {volunteer_id} not found")
        logger.info("Volunteer deleted id=%s", volunteer_id)
        return {"status": "deleted", "id": volunteer_id}

    def award_points(self, volunteer_id: str, points: int) -> None:
        if points > 0:
            self._repo.add_points(volunteer_id, points)

    # ── Queries ──

    def get_volunteer(self, volunteer_id: str) -> Dict[str, Any]:
        volunteer = self._repo.get_volunteer(volunteer_id)
        if volunteer is None:
            raise KeyError(f"Volunteer {volunteer_id} not found")
        return volunteer

    def lookup(self, volunteer_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        """Load volunteers by id, skipping ids no longer in the directory."""
        return self._repo.get_many(volunteer_ids)

    def directory(self, volunteer_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        """Load volunteers by id. Raises KeyError naming any unknown id."""
        found = self._repo.get_many(volunteer_ids)
        unknown = [v for v in dict.fromkeys(volunteer_ids) if v not in found]
        if unknown:
            raise KeyError(f"Volunteers not found: {', '.join(unknown)}")
        return found

    def list_volunteers(self, status: Optional[str] = None, skill: Optional[str] = None,
                        search: Optional[str] = None) -> List[Dict[str, Any]]:
        results = self._repo.list_volunteers(status)
        if skill:
            results = [v for v in results if skill in v["skills"]]
        if search:
            needle = search.lower()
            results = [
                v for v in results
                if needle in (v["name"] or "").lower()
                or needle in (v["contact_info"].get("email") or "").lower()
            ]
        return results

    def count_by_status(self, status: str) -> int:
        return self._repo.count_by_status(status)

    def check_in_code(self, volunteer_id: str, task_id: Optional[str] = None) -> Dict[str, Any]:
        """Build the payload a coordinator scans to check a volunteer in."""
        volunteer = self.get_volunteer(volunteer_id)
        payload = {
            "type": "volunteer_check_in",
            "volunteer_id": volunteer["id"],
            "volunteer_name": volunteer["name"],
            "task_id": task_id or "general",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        query = urlencode({"size": settings.QR_CODE_SIZE, "data": json.dumps(payload)})
        return {"payload": payload, "qr_code_url": f"{settings.QR_CODE_API_URL}?{query}"}
