# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Service: Dashboard aggregates across incidents, volunteers, resources and teams."""
from typing import Any, Dict, List

from reliefconnect.services.incident_service import IncidentService
from reliefconnect.services.resource_service import ResourceService
from reliefconnect.services.team_service import TeamService
from reliefconnect.services.volunteer_service import VolunteerService


class DashboardService:
    def __init__(self, incident_service: IncidentService, volunteer_service: VolunteerService,
                 resource_service: ResourceService, team_service: TeamService):
        self._incidents = incident_service
        self._volunteers = volunteer_service
        self._resources = resource_service
        self._teams = team_service

    def get_stats(self) -> Dict[str, int]:
        return {
            "active_incidents": self._incidents.count_by_status("active"),
            "resolved_incidents": self._incidents.count_by_status("resolved"),
            "active_volunteers": self._volunteers.count_by_status("active"),
            "available_resources": self._resources.count_by_status("available"),
            "active_teams": self._teams.count_active(),
        }

    def recent_incidents(self, limit: int) -> List[Dict[str, Any]]:
        return self._incidents.recent_incidents(limit)
