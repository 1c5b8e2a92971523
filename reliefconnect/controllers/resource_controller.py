# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Resource tracking CRUD."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from reliefconnect.core.dependencies import get_resource_service
from reliefconnect.schemas import ResourceCreate, ResourceOut, ResourceUpdate
from reliefconnect.services.resource_service import ResourceService

router = APIRouter(prefix="/api/v1", tags=["Resources"])


@router.post("/resources", status_code=201, response_model=ResourceOut)
def create_resource(body: ResourceCreate,
                    service: ResourceService = Depends(get_resource_service)):
    return service.create_resource(
        name=body.name, resource_type=body.type, quantity=body.quantity,
        status=body.status, location=body.location.model_dump(),
    )


@router.get("/resources", response_model=List[ResourceOut])
def list_resources(
    resource_type: Optional[str] = Query(default=None, alias="type"),
    status: Optional[str] = None,
    service: ResourceService = Depends(get_resource_service),
):
    return service.list_resources(resource_type, status)


@router.get("/resources/{resource_id}", response_model=ResourceOut)
def get_resource(resource_id: str,
                 service: ResourceService = Depends(get_resource_service)):
    try:
        return service.get_resource(resource_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Resource not found")


@router.patch("/resources/{resource_id}", response_model=ResourceOut)
def update_resource(resource_id: str, body: ResourceUpdate,
                    service: ResourceService = Depends(get_resource_service)):
    changes = body.model_dump(exclude_unset=True)
    if body.location is not None:
        changes["location"] = body.location.model_dump()
    try:
        return service.update_resource(resource_id, changes)
    except KeyError:
        raise HTTPException(status_code=404, detail="Resource not found")


@router.delete("/resources/{resource_id}")
def delete_resource(resource_id: str,
                    service: ResourceService = Depends(get_resource_service)):
    try:
        return service.delete_resource(resource_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Resource not found")
