# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas: API contract definitions.
Pydantic models used ONLY at the controller (HTTP) boundary.
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from reliefconnect.models.domain import (
    EXPERIENCE_LEVELS,
    VOLUNTEER_STATUSES,
    Availability,
    ContactInfo,
    EmergencyContact,
    Location,
)

VALID_SEVERITIES = ("low", "medium", "high")
INCIDENT_STATUSES = ("active", "resolved")
RESOURCE_STATUSES = ("available", "allocated", "depleted")
TASK_STATUSES = ("open", "in_progress", "completed")
TASK_PRIORITIES = ("low", "medium", "high")


def _choice(value: Optional[str], allowed: tuple, field: str) -> Optional[str]:
    if value is None:
        return value
    value = value.lower().strip()
    if value not in allowed:
        raise ValueError(f"{field} must be one of {allowed}")
    return value


# ── Incidents ──

class IncidentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=5000)
    type: str = Field(..., min_length=1, max_length=255)
    severity: str = "medium"
    location: Location

    @field_validator("severity")
    @classmethod
    def normalise_severity(cls, v: str) -> str:
        return _choice(v, VALID_SEVERITIES, "severity")


class IncidentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=5000)
    type: Optional[str] = Field(default=None, min_length=1, max_length=255)
    severity: Optional[str] = None
    status: Optional[str] = None
    location: Optional[Location] = None

    @field_validator("severity")
    @classmethod
    def normalise_severity(cls, v: Optional[str]) -> Optional[str]:
        return _choice(v, VALID_SEVERITIES, "severity")

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: Optional[str]) -> Optional[str]:
        return _choice(v, INCIDENT_STATUSES, "status")


class IncidentOut(BaseModel):
    id: str
    title: str
    description: Optional[str]
    type: str
    severity: str
    status: str
    location: Dict[str, Any]
    created_at: str
    updated_at: Optional[str]
    resolved_at: Optional[str]


class PaginatedIncidents(BaseModel):
    total: int
    page: int
    per_page: int
    incidents: List[IncidentOut]


class MapMarker(BaseModel):
    id: str
    title: str
    severity: str
    status: str
    lat: Optional[float]
    lng: Optional[float]


# ── Resources ──

class ResourceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(default=0, ge=0)
    status: str = "available"
    location: Location

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: str) -> str:
        return _choice(v, RESOURCE_STATUSES, "status")


class ResourceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    type: Optional[str] = Field(default=None, min_length=1, max_length=255)
    quantity: Optional[int] = Field(default=None, ge=0)
    status: Optional[str] = None
    location: Optional[Location] = None

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: Optional[str]) -> Optional[str]:
        return _choice(v, RESOURCE_STATUSES, "status")


class ResourceOut(BaseModel):
    id: str
    name: str
    type: str
    quantity: int
    status: str
    location: Dict[str, Any]
    created_at: str
    updated_at: Optional[str]


# ── Volunteers ──

class VolunteerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    skills: List[str] = Field(default_factory=list)
    location: Location
    status: str = "active"
    experience_level: str = "beginner"
    availability: Availability = Field(default_factory=Availability)
    emergency_contact: EmergencyContact = Field(default_factory=EmergencyContact)

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: str) -> str:
        return _choice(v, VOLUNTEER_STATUSES, "status")

    @field_validator("experience_level")
    @classmethod
    def normalise_experience(cls, v: str) -> str:
        return _choice(v, EXPERIENCE_LEVELS, "experience_level")

    @field_validator("skills")
    @classmethod
    def dedupe_skills(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(v))


class VolunteerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    contact_info: Optional[ContactInfo] = None
    skills: Optional[List[str]] = None
    location: Optional[Location] = None
    status: Optional[str] = None
    experience_level: Optional[str] = None
    current_task: Optional[str] = None
    availability: Optional[Availability] = None
    emergency_contact: Optional[EmergencyContact] = None

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: Optional[str]) -> Optional[str]:
        return _choice(v, VOLUNTEER_STATUSES, "status")

    @field_validator("experience_level")
    @classmethod
    def normalise_experience(cls, v: Optional[str]) -> Optional[str]:
        return _choice(v, EXPERIENCE_LEVELS, "experience_level")

    @field_validator("skills")
    @classmethod
    def dedupe_skills(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return None if v is None else list(dict.fromkeys(v))


class VolunteerOut(BaseModel):
    id: str
    name: str
    contact_info: Dict[str, Any]
    skills: List[str]
    location: Dict[str, Any]
    status: str
    experience_level: str
    current_task: Optional[str] = None
    availability: Optional[Dict[str, Any]] = None
    emergency_contact: Optional[Dict[str, Any]] = None
    joined_date: str
    contribution_points: int = 0
    badges: List[str] = []
    created_at: str
    updated_at: Optional[str] = None


class CheckInCode(BaseModel):
    payload: Dict[str, Any]
    qr_code_url: str


# ── Skills ──

class SkillOut(BaseModel):
    id: str
    name: str
    category: str
    description: Optional[str]
    icon: Optional[str]


class SkillCategory(BaseModel):
    category: str
    skills: List[SkillOut]


# ── Teams ──

class CoverageRequest(BaseModel):
    required_skills: List[str] = Field(default_factory=list)
    member_ids: List[str] = Field(default_factory=list)


class CoverageOut(BaseModel):
    covered: List[str]
    missing: List[str]
    complete: bool
    skill_names: Dict[str, str] = {}


class TeamCreate(BaseModel):
    """Name, members and leader are checked by the team composition rules."""
    name: str = ""
    description: Optional[str] = Field(default=None, max_length=5000)
    leader_id: Optional[str] = None
    member_ids: List[str] = Field(default_factory=list)
    required_skills: List[str] = Field(default_factory=list)
    incident_id: Optional[str] = None
    location: Optional[str] = Field(default=None, max_length=500)


class TeamUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=5000)
    required_skills: Optional[List[str]] = None
    active: Optional[bool] = None
    location: Optional[str] = Field(default=None, max_length=500)


class LeaderAssign(BaseModel):
    volunteer_id: str = Field(..., min_length=1)


class MemberAdd(BaseModel):
    volunteer_id: str = Field(..., min_length=1)


class TeamOut(BaseModel):
    id: str
    name: str
    description: Optional[str]
    leader_id: Optional[str]
    members: List[str]
    skills_required: List[str]
    active: bool
    incident_id: Optional[str]
    location: Optional[str]
    created_at: str
    updated_at: Optional[str] = None
    coverage: Optional[CoverageOut] = None


# ── Tasks & Shifts ──

class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=5000)
    priority: str = "medium"
    skills_required: List[str] = Field(default_factory=list)
    incident_id: Optional[str] = None
    location: Optional[Location] = None
    estimated_duration: Optional[int] = Field(default=None, ge=1, description="Minutes")

    @field_validator("priority")
    @classmethod
    def normalise_priority(cls, v: str) -> str:
        return _choice(v, TASK_PRIORITIES, "priority")


class TaskStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: str) -> str:
        return _choice(v, TASK_STATUSES, "status")


class TaskOut(BaseModel):
    id: str
    title: str
    description: Optional[str]
    status: str
    priority: str
    skills_required: List[str]
    incident_id: Optional[str]
    location: Optional[Dict[str, Any]]
    estimated_duration: Optional[int]
    created_at: str


class ShiftCreate(BaseModel):
    """Either explicit start/end times or a named slot on a date."""
    volunteer_id: str = Field(..., min_length=1)
    task_id: str = Field(..., min_length=1)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    shift_date: Optional[date] = None
    slot: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def check_window(self) -> "ShiftCreate":
        explicit = self.start_time is not None and self.end_time is not None
        named = self.shift_date is not None and self.slot is not None
        if not explicit and not named:
            raise ValueError("Provide start_time and end_time, or shift_date and slot")
        return self


class ShiftOut(BaseModel):
    id: str
    volunteer_id: str
    task_id: Optional[str]
    start_time: str
    end_time: str
    status: str
    check_in_time: Optional[str]
    check_out_time: Optional[str]
    notes: Optional[str]
    created_at: str
    task: Optional[Dict[str, Any]] = None


class SlotAvailability(BaseModel):
    id: str
    label: str
    start_time: str
    end_time: str
    available: bool


# ── Dashboard ──

class DashboardStats(BaseModel):
    active_incidents: int
    resolved_incidents: int
    active_volunteers: int
    available_resources: int
    active_teams: int


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
