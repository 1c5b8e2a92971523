# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Tasks, shift scheduling and the shift status machine."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from reliefconnect.core.dependencies import get_shift_service
from reliefconnect.schemas import (
    ShiftCreate, ShiftOut, SlotAvailability, TaskCreate, TaskOut, TaskStatusUpdate,
)
from reliefconnect.services.shift_service import ShiftConflictError, ShiftService

router = APIRouter(prefix="/api/v1", tags=["Tasks & Shifts"])


# ── Tasks ──

@router.post("/tasks", status_code=201, response_model=TaskOut)
def create_task(body: TaskCreate, service: ShiftService = Depends(get_shift_service)):
    task = body.model_dump()
    if body.location is not None:
        task["location"] = body.location.model_dump()
    try:
        return service.create_task(task)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=exc.args[0])
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/tasks", response_model=List[TaskOut])
def list_tasks(status: Optional[str] = None,
               service: ShiftService = Depends(get_shift_service)):
    return service.list_tasks(status)


@router.get("/tasks/{task_id}", response_model=TaskOut)
def get_task(task_id: str, service: ShiftService = Depends(get_shift_service)):
    try:
        return service.get_task(task_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Task not found")


@router.patch("/tasks/{task_id}", response_model=TaskOut)
def set_task_status(task_id: str, body: TaskStatusUpdate,
                    service: ShiftService = Depends(get_shift_service)):
    try:
        return service.set_task_status(task_id, body.status)
    except KeyError:
        raise HTTPException(status_code=404, detail="Task not found")


# ── Shifts ──

@router.post("/shifts", status_code=201, response_model=ShiftOut)
def schedule_shift(body: ShiftCreate, service: ShiftService = Depends(get_shift_service)):
    try:
        return service.schedule_shift(
            volunteer_id=body.volunteer_id,
            task_id=body.task_id,
            start_time=body.start_time,
            end_time=body.end_time,
            shift_date=body.shift_date,
            slot=body.slot,
            notes=body.notes,
        )
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=exc.args[0])
    except ShiftConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/shifts/availability", response_model=List[SlotAvailability])
def slot_availability(volunteer_id: str, day: date = Query(..., alias="date"),
                      service: ShiftService = Depends(get_shift_service)):
    """Which named slots on ``day`` are still free for the volunteer."""
    try:
        return service.slot_availability(volunteer_id, day)
    except KeyError:
        raise HTTPException(status_code=404, detail="Volunteer not found")


@router.get("/shifts", response_model=List[ShiftOut])
def list_shifts(task_id: Optional[str] = None, status: Optional[str] = None,
                service: ShiftService = Depends(get_shift_service)):
    return service.list_shifts(task_id, status)


@router.get("/shifts/{shift_id}", response_model=ShiftOut)
def get_shift(shift_id: str, service: ShiftService = Depends(get_shift_service)):
    try:
        return service.get_shift(shift_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Shift not found")


def _transition(action, shift_id: str):
    try:
        return action(shift_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Shift not found")
    except ShiftConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc))


@router.post("/shifts/{shift_id}/check-in", response_model=ShiftOut)
def check_in(shift_id: str, service: ShiftService = Depends(get_shift_service)):
    return _transition(service.check_in, shift_id)


@router.post("/shifts/{shift_id}/check-out", response_model=ShiftOut)
def check_out(shift_id: str, service: ShiftService = Depends(get_shift_service)):
    return _transition(service.check_out, shift_id)


@router.post("/shifts/{shift_id}/cancel", response_model=ShiftOut)
def cancel_shift(shift_id: str, service: ShiftService = Depends(get_shift_service)):
    return _transition(service.cancel, shift_id)
