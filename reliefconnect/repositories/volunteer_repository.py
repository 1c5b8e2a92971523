# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for the volunteer directory."""
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from reliefconnect.repositories._rows import dump_json, load_json, to_iso, utcnow_iso

VOLUNTEER_COLS = (
    "id, name, contact_info, skills, location, status, current_task, availability, "
    "emergency_contact, experience_level, joined_date, contribution_points, badges, "
    "created_at, updated_at"
)

UPDATABLE_COLS = ("name", "contact_info", "skills", "location", "status", "current_task",
                  "availability", "emergency_contact", "experience_level",
                  "contribution_points", "badges")
JSON_COLS = ("contact_info", "skills", "location", "availability",
             "emergency_contact", "badges")


def _row_to_dict(row) -> Dict[str, Any]:
    return {
        "id": str(row[0]),
        "name": row[1],
        "contact_info": load_json(row[2], {}),
        "skills": load_json(row[3], []),
        "location": load_json(row[4], {}),
        "status": row[5],
        "current_task": row[6],
        "availability": load_json(row[7]),
        "emergency_contact": load_json(row[8]),
        "experience_level": row[9],
        "joined_date": to_iso(row[10]) or "",
        "contribution_points": row[11] or 0,
        "badges": load_json(row[12], []),
        "created_at": to_iso(row[13]) or "",
        "updated_at": to_iso(row[14]),
    }


def _params(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: dump_json(v) if k in JSON_COLS else v for k, v in values.items()}


class VolunteerRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Write ──────────────────────────────────────────────────────────

    def create_volunteer(self, volunteer: Dict[str, Any]) -> Dict[str, Any]:
        now_iso = utcnow_iso()
        record = {
            "current_task": None, "contribution_points": 0, "badges": [],
            **volunteer, "joined_date": now_iso, "created_at": now_iso,
        }
        with self._engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO volunteers
                        (id, name, contact_info, skills, location, status, current_task,
                         availability, emergency_contact, experience_level, joined_date,
                         contribution_points, badges, created_at)
                    VALUES
                        (:id, :name, :contact_info, :skills, :location, :status, :current_task,
                         :availability, :emergency_contact, :experience_level, :joined_date,
                         :contribution_points, :badges, :created_at)
                """),
                _params(record),
            )
        return {**record, "updated_at": None}

    def update_volunteer(self, volunteer_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        values = {col: changes[col] for col in UPDATABLE_COLS if col in changes}
        sets = [f"{col} = :{col}" for col in values]
        params = _params(values)
        params.update(id=volunteer_id, updated_at=utcnow_iso())
        sets.append("updated_at = :updated_at")
        with self._engine.begin() as conn:
            conn.execute(text(f"UPDATE volunteers SET {', '.join(sets)} WHERE id = :id"), params)
            row = conn.execute(
                text(f"SELECT {VOLUNTEER_COLS} FROM volunteers WHERE id = :id"),
                {"id": volunteer_id},
            ).fetchone()
        return _row_to_dict(row) if row else None

    def add_points(self, volunteer_id: str, points: int) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                text("UPDATE volunteers SET contribution_points = contribution_points + :p "
                     "WHERE id = :id"),
                {"p": points, "id": volunteer_id},
            )

    def delete_volunteer(self, volunteer_id: str) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(
                text("DELETE FROM volunteers WHERE id = :id"), {"id": volunteer_id}
            )
        return result.rowcount > 0

    # ── Read ───────────────────────────────────────────────────────────

    def get_volunteer(self, volunteer_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {VOLUNTEER_COLS} FROM volunteers WHERE id = :id"),
                {"id": volunteer_id},
            ).fetchone()
        return _row_to_dict(row) if row else None

    def get_many(self, volunteer_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Directory lookup keyed by id; unknown ids are simply absent."""
        wanted = set(volunteer_ids)
        if not wanted:
            return {}
        return {v["id"]: v for v in self.list_volunteers() if v["id"] in wanted}

    def list_volunteers(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        where, params = "", {}
        if status:
            where, params = " WHERE status = :status", {"status": status}
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT {VOLUNTEER_COLS} FROM volunteers{where} ORDER BY name"),
                params,
            ).fetchall()
        return [_row_to_dict(r) for r in rows]

    def count_by_status(self, status: str) -> int:
        with self._engine.connect() as conn:
            return conn.execute(
                text("SELECT COUNT(*) FROM volunteers WHERE status = :s"), {"s": status}
            ).scalar() or 0
