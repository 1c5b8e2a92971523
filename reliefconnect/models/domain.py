# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models: pure data structures, NO FastAPI dependency.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

EXPERIENCE_LEVELS = ("beginner", "intermediate", "expert")
VOLUNTEER_STATUSES = ("active", "inactive")


class Location(BaseModel):
    """A point on the map, optionally with a street address."""
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    address: Optional[str] = Field(default=None, max_length=500)


class ContactInfo(BaseModel):
    email: str = Field(default="", max_length=255)
    phone: str = Field(default="", max_length=64)
    address: str = Field(default="", max_length=500)


class AvailabilityHours(BaseModel):
    start: str = Field(default="09:00", pattern=r"^\d{2}:\d{2}$")
    end: str = Field(default="17:00", pattern=r"^\d{2}:\d{2}$")


class Availability(BaseModel):
    weekdays: list[str] = Field(default_factory=list)
    hours: AvailabilityHours = Field(default_factory=AvailabilityHours)
    notes: str = ""


class EmergencyContact(BaseModel):
    name: str = ""
    relationship: str = ""
    phone: str = ""


class SkillCoverage(BaseModel):
    """Partition of a team's required skills by whether any member holds them."""
    model_config = ConfigDict(frozen=True)

    covered: frozenset[str] = frozenset()
    missing: frozenset[str] = frozenset()

    @property
    def complete(self) -> bool:
        return not self.missing
