# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Business logic for incident reporting and resolution."""
import uuid
from typing import Any, Dict, List, Optional, Tuple

from reliefconnect.core.logging import get_logger
from reliefconnect.metrics import INCIDENTS_ACTIVE, INCIDENTS_REPORTED
from reliefconnect.repositories._rows import utcnow_iso
from reliefconnect.repositories.incident_repository import IncidentRepository

logger = get_logger(__name__)

ALLOWED_TRANSITIONS = {
    "active":   {"resolved"},
    "resolved": {"active"},
}

# Fields a PATCH may clear with an explicit null.
NULLABLE_FIELDS = frozenset({"description"})


class IncidentService:
    def __init__(self, repo: IncidentRepository):
        self._repo = repo

    def seed_gauges(self):
        INCIDENTS_ACTIVE.set(self._repo.count_by_status("active"))
        logger.info("Prometheus gauges loaded from DB")

    def report_incident(self, title: str, incident_type: str, severity: str,
                        location: Dict[str, Any],
                        description: Optional[str] = None) -> Dict[str, Any]:
        incident_id = str(uuid.uuid4())
        result = self._repo.create_incident(
            incident_id, title, description, incident_type, severity, location,
        )
        INCIDENTS_REPORTED.labels(severity=severity).inc()
        INCIDENTS_ACTIVE.inc()
        logger.info("Incident reported id=%s type=%s severity=%s",
                    incident_id, incident_type, severity, extra={"incident_id": incident_id})
        return result

    def get_incident(self, incident_id: str) -> Dict[str, Any]:
        incident = self._repo.get_incident(incident_id)
        if incident is None:
            raise KeyError(f"Incident {incident_id} not found")
        return incident

    def list_incidents(self, status=None, severity=None, incident_type=None,
                       page=1, per_page=50) -> Tuple[int, List[Dict[str, Any]]]:
        return self._repo.list_incidents(status, severity, incident_type, page, per_page)

    def update_incident(self, incident_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a partial update. Raises KeyError / ValueError."""
        current = self.get_incident(incident_id)
        changes = {k: v for k, v in changes.items() if v is not None or k in NULLABLE_FIELDS}

        active_delta = 0
        status = changes.get("status")
        if status is None or status == current["status"]:
            changes.pop("status", None)
        else:
            allowed = ALLOWED_TRANSITIONS.get(current["status"], set())
            if status not in allowed:
                raise ValueError(
                    f"Cannot transition from '{current['status']}' to '{status}'"
                )
            if status == "resolved":
                changes["resolved_at"] = utcnow_iso()
                active_delta = -1
            else:
                changes["resolved_at"] = None
                active_delta = 1

        if not changes:
            return current
        updated = self._repo.update_incident(incident_id, changes)
        # Gauge moves only once the row is stored.
        if active_delta:
            if active_delta > 0:
                INCIDENTS_ACTIVE.inc()
            else:
                INCIDENTS_ACTIVE.dec()
            logger.info("Incident %s status %s -> %s", incident_id, current["status"], status,
                        extra={"incident_id": incident_id})
        return updated

    def resolve_incident(self, incident_id: str) -> Dict[str, Any]:
        return self.update_incident(incident_id, {"status": "resolved"})

    def map_markers(self) -> List[Dict[str, Any]]:
        return self._repo.list_map_markers()

    def recent_incidents(self, limit: int) -> List[Dict[str, Any]]:
        return self._repo.list_recent(limit)

    def count_by_status(self, status: str) -> int:
        return self._repo.count_by_status(status)

    def exists(self, incident_id: str) -> bool:
        return self._repo.exists(incident_id)
