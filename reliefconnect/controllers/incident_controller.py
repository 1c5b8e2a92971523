# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Incident reporting, filtering, status changes and map markers."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from reliefconnect.core.config import settings
from reliefconnect.core.dependencies import get_incident_service
from reliefconnect.schemas import (
    IncidentCreate, IncidentUpdate, IncidentOut, MapMarker, PaginatedIncidents,
)
from reliefconnect.services.incident_service import IncidentService

router = APIRouter(prefix="/api/v1", tags=["Incidents"])


@router.post("/incidents", status_code=201, response_model=IncidentOut)
def report_incident(body: IncidentCreate,
                    service: IncidentService = Depends(get_incident_service)):
    return service.report_incident(
        title=body.title, incident_type=body.type, severity=body.severity,
        location=body.location.model_dump(), description=body.description,
    )


@router.get("/incidents/map", response_model=List[MapMarker])
def incident_map(service: IncidentService = Depends(get_incident_service)):
    """Markers for every active incident."""
    return service.map_markers()


@router.get("/incidents", response_model=PaginatedIncidents)
def list_incidents(
    status: Optional[str] = None,
    severity: Optional[str] = None,
    incident_type: Optional[str] = Query(default=None, alias="type"),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    service: IncidentService = Depends(get_incident_service),
):
    total, incidents = service.list_incidents(status, severity, incident_type, page, per_page)
    return PaginatedIncidents(
        total=total, page=page, per_page=per_page,
        incidents=[IncidentOut(**i) for i in incidents],
    )


@router.get("/incidents/{incident_id}", response_model=IncidentOut)
def get_incident(incident_id: str,
                 service: IncidentService = Depends(get_incident_service)):
    try:
        return service.get_incident(incident_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Incident not found")


@router.patch("/incidents/{incident_id}", response_model=IncidentOut)
def update_incident(incident_id: str, body: IncidentUpdate,
                    service: IncidentService = Depends(get_incident_service)):
    changes = body.model_dump(exclude_unset=True)
    if body.location is not None:
        changes["location"] = body.location.model_dump()
    try:
        return service.update_incident(incident_id, changes)
    except KeyError:
        raise HTTPException(status_code=404, detail="Incident not found")
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc))


@router.post("/incidents/{incident_id}/resolve", response_model=IncidentOut)
def resolve_incident(incident_id: str,
                     service: IncidentService = Depends(get_incident_service)):
    try:
        return service.resolve_incident(incident_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Incident not found")
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
