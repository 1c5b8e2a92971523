# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for volunteer shifts."""
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from reliefconnect.repositories._rows import to_iso, utcnow_iso, where_clause

SHIFT_COLS = (
    "id, volunteer_id, task_id, start_time, end_time, status, "
    "check_in_time, check_out_time, notes, created_at"
)


def _row_to_dict(row) -> Dict[str, Any]:
    return {
        "id": str(row[0]),
        "volunteer_id": row[1],
        "task_id": row[2],
        "start_time": to_iso(row[3]),
        "end_time": to_iso(row[4]),
        "status": row[5],
        "check_in_time": to_iso(row[6]),
        "check_out_time": to_iso(row[7]),
        "notes": row[8],
        "created_at": to_iso(row[9]) or "",
    }


class ShiftRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    def create_shift(self, shift: Dict[str, Any]) -> Dict[str, Any]:
        now_iso = utcnow_iso()
        record = {**shift, "status": "scheduled", "check_in_time": None,
                  "check_out_time": None, "created_at": now_iso}
        with self._engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO shifts
                        (id, volunteer_id, task_id, start_time, end_time, status, notes, created_at)
                    VALUES
                        (:id, :volunteer_id, :task_id, :start_time, :end_time, :status,
                         :notes, :created_at)
                """),
                record,
            )
        return record

    def update_status(self, shift_id: str, status: str,
                      check_in_time: Optional[str] = None,
                      check_out_time: Optional[str] = None) -> Optional[Dict[str, Any]]:
        sets = ["status = :status"]
        params: Dict[str, Any] = {"id": shift_id, "status": status}
        if check_in_time:
            sets.append("check_in_time = :check_in_time")
            params["check_in_time"] = check_in_time
        if check_out_time:
            sets.append("check_out_time = :check_out_time")
            params["check_out_time"] = check_out_time
        with self._engine.begin() as conn:
            conn.execute(text(f"UPDATE shifts SET {', '.join(sets)} WHERE id = :id"), params)
            row = conn.execute(
                text(f"SELECT {SHIFT_COLS} FROM shifts WHERE id = :id"), {"id": shift_id}
            ).fetchone()
        return _row_to_dict(row) if row else None

    def get_shift(self, shift_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {SHIFT_COLS} FROM shifts WHERE id = :id"), {"id": shift_id}
            ).fetchone()
        return _row_to_dict(row) if row else None

    def list_for_volunteer(self, volunteer_id: str) -> List[Dict[str, Any]]:
        """Every non-cancelled shift of one volunteer, earliest first."""
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT {SHIFT_COLS} FROM shifts "
                     "WHERE volunteer_id = :vid AND status <> 'cancelled' ORDER BY start_time"),
                {"vid": volunteer_id},
            ).fetchall()
        return [_row_to_dict(r) for r in rows]

    def list_shifts(self, task_id: Optional[str] = None,
                    status: Optional[str] = None) -> List[Dict[str, Any]]:
        where, params = where_clause(task_id=task_id, status=status)
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT {SHIFT_COLS} FROM shifts{where} ORDER BY start_time"),
                params,
            ).fetchall()
        return [_row_to_dict(r) for r in rows]
