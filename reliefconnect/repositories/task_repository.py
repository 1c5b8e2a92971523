# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for relief tasks that shifts are booked against."""
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from reliefconnect.repositories._rows import dump_json, load_json, to_iso, utcnow_iso

TASK_COLS = (
    "id, title, description, status, priority, skills_required, incident_id, "
    "location, estimated_duration, created_at"
)


def _row_to_dict(row) -> Dict[str, Any]:
    return {
        "id": str(row[0]),
        "title": row[1],
        "description": row[2],
        "status": row[3],
        "priority": row[4],
        "skills_required": load_json(row[5], []),
        "incident_id": row[6],
        "location": load_json(row[7]),
        "estimated_duration": row[8],
        "created_at": to_iso(row[9]) or "",
    }


class TaskRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    def create_task(self, task: Dict[str, Any]) -> Dict[str, Any]:
        now_iso = utcnow_iso()
        record = {**task, "status": "open", "created_at": now_iso}
        with self._engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO tasks
                        (id, title, description, status, priority, skills_required,
                         incident_id, location, estimated_duration, created_at)
                    VALUES
                        (:id, :title, :description, :status, :priority, :skills_required,
                         :incident_id, :location, :estimated_duration, :created_at)
                """),
                {**record, "skills_required": dump_json(record["skills_required"]),
                 "location": dump_json(record.get("location"))},
            )
        return record

    def set_status(self, task_id: str, status: str) -> Optional[Dict[str, Any]]:
        with self._engine.begin() as conn:
            conn.execute(
                text("UPDATE tasks SET status = :status WHERE id = :id"),
                {"status": status, "id": task_id},
            )
        return self.get_task(task_id)

    def get_task(self, task_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {TASK_COLS} FROM tasks WHERE id = :id"), {"id": task_id}
            ).fetchone()
        return _row_to_dict(row) if row else None

    def list_tasks(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        where, params = "", {}
        if status:
            where, params = " WHERE status = :status", {"status": status}
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT {TASK_COLS} FROM tasks{where} ORDER BY created_at DESC"),
                params,
            ).fetchall()
        return [_row_to_dict(r) for r in rows]
