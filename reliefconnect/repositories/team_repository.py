# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for volunteer teams."""
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from reliefconnect.repositories._rows import dump_json, load_json, to_iso, utcnow_iso, where_clause

TEAM_COLS = (
    "id, name, description, leader_id, members, skills_required, active, "
    "incident_id, location, created_at, updated_at"
)
UPDATABLE_COLS = ("name", "description", "leader_id", "members", "skills_required",
                  "active", "location")
JSON_COLS = ("members", "skills_required")


def _row_to_dict(row) -> Dict[str, Any]:
    return {
        "id": str(row[0]),
        "name": row[1],
        "description": row[2],
        "leader_id": row[3],
        "members": load_json(row[4], []),
        "skills_required": load_json(row[5], []),
        "active": bool(row[6]),
        "incident_id": row[7],
        "location": row[8],
        "created_at": to_iso(row[9]) or "",
        "updated_at": to_iso(row[10]),
    }


class TeamRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    def create_team(self, team: Dict[str, Any]) -> Dict[str, Any]:
        """Single insert; the record is either fully written or not at all."""
        now_iso = utcnow_iso()
        record = {**team, "active": True, "created_at": now_iso}
        with self._engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO teams
                        (id, name, description, leader_id, members, skills_required,
                         active, incident_id, location, created_at)
                    VALUES
                        (:id, :name, :description, :leader_id, :members, :skills_required,
                         :active, :incident_id, :location, :created_at)
                """),
                {**record, "members": dump_json(record["members"]),
                 "skills_required": dump_json(record["skills_required"])},
            )
        return {**record, "updated_at": None}

    def update_team(self, team_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        sets = [f"{col} = :{col}" for col in UPDATABLE_COLS if col in changes]
        params: Dict[str, Any] = {
            col: dump_json(changes[col]) if col in JSON_COLS else changes[col]
            for col in UPDATABLE_COLS if col in changes
        }
        params.update(id=team_id, updated_at=utcnow_iso())
        sets.append("updated_at = :updated_at")
        with self._engine.begin() as conn:
            conn.execute(text(f"UPDATE teams SET {', '.join(sets)} WHERE id = :id"), params)
            row = conn.execute(
                text(f"SELECT {TEAM_COLS} FROM teams WHERE id = :id"), {"id": team_id}
            ).fetchone()
        return _row_to_dict(row) if row else None

    def get_team(self, team_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {TEAM_COLS} FROM teams WHERE id = :id"), {"id": team_id}
            ).fetchone()
        return _row_to_dict(row) if row else None

    def list_teams(self, active: Optional[bool] = None,
                   incident_id: Optional[str] = None) -> List[Dict[str, Any]]:
        where, params = where_clause(active=active, incident_id=incident_id)
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT {TEAM_COLS} FROM teams{where} ORDER BY created_at DESC"),
                params,
            ).fetchall()
        return [_row_to_dict(r) for r in rows]

    def count_active(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(
                text("SELECT COUNT(*) FROM teams WHERE active = :active"), {"active": True}
            ).scalar() or 0
