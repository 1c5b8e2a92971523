# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection: wire repositories and services.
"""

from reliefconnect.core.database import engine
from reliefconnect.repositories import (
    IncidentRepository,
    ResourceRepository,
    ShiftRepository,
    SkillRepository,
    TaskRepository,
    TeamRepository,
    VolunteerRepository,
)
from reliefconnect.services.dashboard_service import DashboardService
from reliefconnect.services.incident_service import IncidentService
from reliefconnect.services.notification_client import NotificationClient
from reliefconnect.services.resource_service import ResourceService
from reliefconnect.services.shift_service import ShiftService
from reliefconnect.services.skill_service import SkillService
from reliefconnect.services.team_service import TeamService
from reliefconnect.services.volunteer_service import VolunteerService

# ── Singleton repository instances ──
_incident_repo = IncidentRepository(engine)
_resource_repo = ResourceRepository(engine)
_skill_repo = SkillRepository(engine)
_volunteer_repo = VolunteerRepository(engine)
_team_repo = TeamRepository(engine)
_task_repo = TaskRepository(engine)
_shift_repo = ShiftRepository(engine)
_notification_client = NotificationClient()

# ── Service instances (with injected dependencies) ──
_skill_service = SkillService(_skill_repo)
_incident_service = IncidentService(_incident_repo)
_resource_service = ResourceService(_resource_repo)
_volunteer_service = VolunteerService(_volunteer_repo, _skill_service, _team_repo)
_team_service = TeamService(
    repo=_team_repo,
    volunteer_service=_volunteer_service,
    skill_service=_skill_service,
    incident_service=_incident_service,
    notification_client=_notification_client,
)
_shift_service = ShiftService(
    shift_repo=_shift_repo,
    task_repo=_task_repo,
    volunteer_service=_volunteer_service,
    skill_service=_skill_service,
    incident_service=_incident_service,
    notification_client=_notification_client,
)
_dashboard_service = DashboardService(
    _incident_service, _volunteer_service, _resource_service, _team_service,
)


# ── FastAPI dependency functions ──
def get_incident_repo() -> IncidentRepository:
    return _incident_repo


def get_incident_service() -> IncidentService:
    return _incident_service


def get_resource_service() -> ResourceService:
    return _resource_service


def get_skill_service() -> SkillService:
    return _skill_service


def get_volunteer_service() -> VolunteerService:
    return _volunteer_service


def get_team_service() -> TeamService:
    return _team_service


def get_shift_service() -> ShiftService:
    return _shift_service


def get_dashboard_service() -> DashboardService:
    return _dashboard_service


def get_notification_client() -> NotificationClient:
    return _notification_client
