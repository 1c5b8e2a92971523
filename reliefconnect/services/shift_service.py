# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Tasks and volunteer shift scheduling.
Coordinates task lookups, overlap checks and the shift status machine.
"""

import math
import uuid
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional, Tuple

from reliefconnect.core.logging import get_logger
from reliefconnect.metrics import SHIFTS_SCHEDULED, SHIFT_TRANSITIONS
from reliefconnect.repositories.shift_repository import ShiftRepository
from reliefconnect.repositories.task_repository import TaskRepository
from reliefconnect.services.incident_service import IncidentService
from reliefconnect.services.notification_client import NotificationClient
from reliefconnect.services.skill_service import SkillService
from reliefconnect.services.volunteer_service import VolunteerService

logger = get_logger(__name__)

TIME_SLOTS: Dict[str, Dict[str, Any]] = {
    "morning":   {"label": "Morning (8am - 12pm)", "start": time(8, 0), "end": time(12, 0)},
    "afternoon": {"label": "Afternoon (12pm - 4pm)", "start": time(12, 0), "end": time(16, 0)},
    "evening":   {"label": "Evening (4pm - 8pm)", "start": time(16, 0), "end": time(20, 0)},
}

ALLOWED_TRANSITIONS = {
    "scheduled":  {"checked_in", "cancelled"},
    "checked_in": {"completed"},
    "completed":  set(),
    "cancelled":  set(),
}


class ShiftConflictError(ValueError):
    """The requested change clashes with existing shift state."""


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_ts(value: str) -> datetime:
    return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def slot_window(day: date, slot_id: str) -> Tuple[datetime, datetime]:
    slot = TIME_SLOTS.get(slot_id)
    if slot is None:
        raise ValueError(f"slot must be one of {tuple(TIME_SLOTS)}")
    return (
        datetime.combine(day, slot["start"], tzinfo=timezone.utc),
        datetime.combine(day, slot["end"], tzinfo=timezone.utc),
    )


def overlaps(start: datetime, end: datetime, shift: Dict[str, Any]) -> bool:
    """Half-open overlap; a shift ending exactly when another starts is fine."""
    return start < parse_ts(shift["end_time"]) and end > parse_ts(shift["start_time"])


class ShiftService:
    def __init__(
        self,
        shift_repo: ShiftRepository,
        task_repo: TaskRepository,
        volunteer_service: VolunteerService,
        skill_service: SkillService,
        incident_service: IncidentService,
        notification_client: NotificationClient,
    ) -> None:
        self._shifts = shift_repo
        self._tasks = task_repo
        self._volunteers = volunteer_service
        self._skills = skill_service
        self._incidents = incident_service
        self._notifications = notification_client

    # ── Tasks ──

    def create_task(self, task: Dict[str, Any]) -> Dict[str, Any]:
        self._skills.ensure_known(task.get("skills_required", []))
        incident_id = task.get("incident_id")
        if incident_id and not self._incidents.exists(incident_id):
            raise KeyError(f"Incident {incident_id} not found")
        result = self._tasks.create_task({"id": str(uuid.uuid4()), **task})
        logger.info("Task created id=%s priority=%s", result["id"], result["priority"])
        return result

    def get_task(self, task_id: str) -> Dict[str, Any]:
        task = self._tasks.get_task(task_id)
        if task is None:
            raise KeyError(f"Task {task_id} not found")
        return task

    def set_task_status(self, task_id: str, status: str) -> Dict[str, Any]:
        current = self.get_task(task_id)
        if status == current["status"]:
            return current
        logger.info("Task %s %s -> %s", task_id, current["status"], status)
        return self._tasks.set_status(task_id, status)

    def list_tasks(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        return self._tasks.list_tasks(status)

    # ── Scheduling ──

    def schedule_shift(
        self,
        volunteer_id: str,
        task_id: str,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
        shift_date: Optional[date] = None,
        slot: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Book a volunteer onto a task.

        Raises KeyError for an unknown volunteer or task, ValueError for a bad
        window or a task that is not open, ShiftConflictError on overlap.
        """
        if start_time is not None and end_time is not None:
            start, end = as_utc(start_time), as_utc(end_time)
        else:
            start, end = slot_window(shift_date, slot)
        if end <= start:
            raise ValueError("Shift end_time must be after start_time")

        volunteer = self._volunteers.get_volunteer(volunteer_id)
        task = self.get_task(task_id)
        if task["status"] != "open":
            raise ValueError(f"Task {task_id} is not open for scheduling")

        clash = next(
            (s for s in self._shifts.list_for_volunteer(volunteer_id) if overlaps(start, end, s)),
            None,
        )
        if clash is not None:
            raise ShiftConflictError(
                f"Volunteer already has shift {clash['id']} between "
                f"{clash['start_time']} and {clash['end_time']}"
            )

        shift = self._shifts.create_shift({
            "id": str(uuid.uuid4()),
            "volunteer_id": volunteer_id,
            "task_id": task_id,
            "start_time": start.isoformat(),
            "end_time": end.isoformat(),
            "notes": notes,
        })
        SHIFTS_SCHEDULED.inc()
        logger.info("Shift scheduled id=%s volunteer=%s task=%s start=%s",
                    shift["id"], volunteer_id, task_id, shift["start_time"])
        self._notifications.send(
            channel="mock",
            recipient=volunteer["contact_info"].get("email") or volunteer["name"],
            message=f"Shift scheduled for '{task['title']}' at {shift['start_time']}",
            reference=task.get("incident_id") or task_id,
        )
        return shift

    def _transition(self, shift_id: str, status: str, **stamps) -> Dict[str, Any]:
        shift = self.get_shift(shift_id)
        allowed = ALLOWED_TRANSITIONS.get(shift["status"], set())
        if status not in allowed:
            raise ShiftConflictError(
                f"Cannot transition shift from '{shift['status']}' to '{status}'. "
                f"Allowed: {sorted(allowed) if allowed else 'none (terminal state)'}"
            )
        updated = self._shifts.update_status(shift_id, status, **stamps)
        SHIFT_TRANSITIONS.labels(status=status).inc()
        logger.info("Shift %s %s -> %s", shift_id, shift["status"], status,
                    extra={"shift_id": shift_id, "volunteer_id": shift["volunteer_id"]})
        return updated

    def check_in(self, shift_id: str) -> Dict[str, Any]:
        now = datetime.now(timezone.utc).isoformat()
        return self._transition(shift_id, "checked_in", check_in_time=now)

    def check_out(self, shift_id: str) -> Dict[str, Any]:
        """Complete a shift and credit the volunteer one point per scheduled hour."""
        now = datetime.now(timezone.utc).isoformat()
        shift = self._transition(shift_id, "completed", check_out_time=now)
        hours = (parse_ts(shift["end_time"]) - parse_ts(shift["start_time"])).total_seconds() / 3600
        self._volunteers.award_points(shift["volunteer_id"], max(1, math.floor(hours)))
        return shift

    def cancel(self, shift_id: str) -> Dict[str, Any]:
        return self._transition(shift_id, "cancelled")

    # ── Queries ──

    def get_shift(self, shift_id: str) -> Dict[str, Any]:
        shift = self._shifts.get_shift(shift_id)
        if shift is None:
            raise KeyError(f"Shift {shift_id} not found")
        return shift

    def list_shifts(self, task_id=None, status=None) -> List[Dict[str, Any]]:
        return self._shifts.list_shifts(task_id, status)

    def upcoming_shifts(self, volunteer_id: str, limit: int) -> List[Dict[str, Any]]:
        """Future, non-cancelled shifts with a summary of their task."""
        self._volunteers.get_volunteer(volunteer_id)
        now = datetime.now(timezone.utc)
        upcoming = [
            s for s in self._shifts.list_for_volunteer(volunteer_id)
            if parse_ts(s["start_time"]) >= now
        ]
        upcoming.sort(key=lambda s: parse_ts(s["start_time"]))
        result = []
        for shift in upcoming[:limit]:
            task = self._tasks.get_task(shift["task_id"]) if shift["task_id"] else None
            summary = None
            if task:
                summary = {k: task[k] for k in ("id", "title", "description", "location", "priority")}
            result.append({**shift, "task": summary})
        return result

    def slot_availability(self, volunteer_id: str, day: date) -> List[Dict[str, Any]]:
        self._volunteers.get_volunteer(volunteer_id)
        booked = self._shifts.list_for_volunteer(volunteer_id)
        slots = []
        for slot_id, slot in TIME_SLOTS.items():
            start, end = slot_window(day, slot_id)
            slots.append({
                "id": slot_id,
                "label": slot["label"],
                "start_time": start.isoformat(),
                "end_time": end.isoformat(),
                "available": not any(overlaps(start, end, s) for s in booked),
            })
        return slots
