# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package; re-exports every data-access class."""
from reliefconnect.repositories.incident_repository import IncidentRepository
from reliefconnect.repositories.resource_repository import ResourceRepository
from reliefconnect.repositories.shift_repository import ShiftRepository
from reliefconnect.repositories.skill_repository import SkillRepository
from reliefconnect.repositories.task_repository import TaskRepository
from reliefconnect.repositories.team_repository import TeamRepository
from reliefconnect.repositories.volunteer_repository import VolunteerRepository

__all__ = [
    "IncidentRepository",
    "ResourceRepository",
    "ShiftRepository",
    "SkillRepository",
    "TaskRepository",
    "TeamRepository",
    "VolunteerRepository",
]
