# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Volunteer directory, profiles, check-in codes and upcoming shifts."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from reliefconnect.core.config import settings
from reliefconnect.core.dependencies import get_shift_service, get_volunteer_service
from reliefconnect.schemas import (
    CheckInCode, ShiftOut, VolunteerCreate, VolunteerOut, VolunteerUpdate,
)
from reliefconnect.services.shift_service import ShiftService
from reliefconnect.services.volunteer_service import VolunteerOnTeamError, VolunteerService

router = APIRouter(prefix="/api/v1", tags=["Volunteers"])


@router.post("/volunteers", status_code=201, response_model=VolunteerOut)
def register_volunteer(body: VolunteerCreate,
                       service: VolunteerService = Depends(get_volunteer_service)):
    try:
        return service.register_volunteer(body.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/volunteers", response_model=List[VolunteerOut])
def list_volunteers(
    status: Optional[str] = None,
    skill: Optional[str] = None,
    search: Optional[str] = Query(default=None, max_length=255),
    service: VolunteerService = Depends(get_volunteer_service),
):
    return service.list_volunteers(status, skill, search)


@router.get("/volunteers/{volunteer_id}", response_model=VolunteerOut)
def get_volunteer(volunteer_id: str,
                  service: VolunteerService = Depends(get_volunteer_service)):
    try:
        return service.get_volunteer(volunteer_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Volunteer not found")


@router.patch("/volunteers/{volunteer_id}", response_model=VolunteerOut)
def update_volunteer(volunteer_id: str, body: VolunteerUpdate,
                     service: VolunteerService = Depends(get_volunteer_service)):
    try:
        return service.update_volunteer(volunteer_id, body.model_dump(exclude_unset=True))
    except KeyError:
        raise HTTPException(status_code=404, detail="Volunteer not found")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/volunteers/{volunteer_id}")
def delete_volunteer(volunteer_id: str,
                     service: VolunteerService = Depends(get_volunteer_service)):
    try:
        return service.delete_volunteer(volunteer_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Volunteer not found")
    except VolunteerOnTeamError as exc:
        raise HTTPException(status_code=409, detail=str(exc))


@router.get("/volunteers/{volunteer_id}/check-in", response_model=CheckInCode)
def volunteer_check_in_code(volunteer_id: str, task_id: Optional[str] = None,
                            service: VolunteerService = Depends(get_volunteer_service)):
    try:
        return service.check_in_code(volunteer_id, task_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Volunteer not found")


@router.get("/volunteers/{volunteer_id}/shifts/upcoming", response_model=List[ShiftOut])
def upcoming_shifts(
    volunteer_id: str,
    limit: int = Query(default=settings.UPCOMING_SHIFTS_LIMIT, ge=1, le=50),
    service: ShiftService = Depends(get_shift_service),
):
    try:
        return service.upcoming_shifts(volunteer_id, limit)
    except KeyError:
        raise HTTPException(status_code=404, detail="Volunteer not found")
