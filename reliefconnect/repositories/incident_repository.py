# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for incidents."""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Engine

from reliefconnect.repositories._rows import dump_json, load_json, to_iso, utcnow_iso, where_clause

INCIDENT_COLS = (
    "id, title, description, type, severity, status, location, "
    "created_at, updated_at, resolved_at"
)

UPDATABLE_COLS = ("title", "description", "type", "severity", "status",
                  "location", "resolved_at")
JSON_COLS = ("location",)


def _row_to_dict(row) -> Dict[str, Any]:
    return {
        "id": str(row[0]),
        "title": row[1],
        "description": row[2],
        "type": row[3],
        "severity": row[4],
        "status": row[5],
        "location": load_json(row[6], {}),
        "created_at": to_iso(row[7]) or "",
        "updated_at": to_iso(row[8]),
        "resolved_at": to_iso(row[9]),
    }


class IncidentRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Write ──────────────────────────────────────────────────────────

    def create_incident(self, incident_id: str, title: str, description: Optional[str],
                        incident_type: str, severity: str,
                        location: Dict[str, Any]) -> Dict[str, Any]:
        now_iso = utcnow_iso()
        with self._engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO incidents
                        (id, title, description, type, severity, status, location, created_at)
                    VALUES
                        (:id, :title, :description, :type, :severity, 'active', :location, :ts)
                """),
                {"id": incident_id, "title": title, "description": description,
                 "type": incident_type, "severity": severity,
                 "location": dump_json(location), "ts": now_iso},
            )
        return {
            "id": incident_id, "title": title, "description": description,
            "type": incident_type, "severity": severity, "status": "active",
            "location": location, "created_at": now_iso, "updated_at": None,
            "resolved_at": None,
        }

    def update_incident(self, incident_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        sets = [f"{col} = :{col}" for col in UPDATABLE_COLS if col in changes]
        params: Dict[str, Any] = {
            col: dump_json(changes[col]) if col in JSON_COLS else changes[col]
            for col in UPDATABLE_COLS if col in changes
        }
        params["id"] = incident_id
        params["updated_at"] = utcnow_iso()
        sets.append("updated_at = :updated_at")
        with self._engine.begin() as conn:
            conn.execute(
                text(f"UPDATE incidents SET {', '.join(sets)} WHERE id = :id"),
                params,
            )
            row = conn.execute(
                text(f"SELECT {INCIDENT_COLS} FROM incidents WHERE id = :id"),
                {"id": incident_id},
            ).fetchone()
        return _row_to_dict(row) if row else None

    # ── Read ───────────────────────────────────────────────────────────

    def get_incident(self, incident_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {INCIDENT_COLS} FROM incidents WHERE id = :id"),
                {"id": incident_id},
            ).fetchone()
        return _row_to_dict(row) if row else None

    def exists(self, incident_id: str) -> bool:
        with self._engine.connect() as conn:
            return conn.execute(
                text("SELECT 1 FROM incidents WHERE id = :id"), {"id": incident_id}
            ).fetchone() is not None

    def list_incidents(self, status: Optional[str] = None, severity: Optional[str] = None,
                       incident_type: Optional[str] = None, page: int = 1,
                       per_page: int = 50) -> Tuple[int, List[Dict[str, Any]]]:
        """Newest first; returns ``(total matching, page of rows)``."""
        where, params = where_clause(
            status=status and status.lower(),
            severity=severity and severity.lower(),
            type=incident_type,
        )
        with self._engine.connect() as conn:
            total = conn.execute(text(f"SELECT COUNT(*) FROM incidents{where}"), params).scalar()
            rows = conn.execute(
                text(f"SELECT {INCIDENT_COLS} FROM incidents{where} "
                     "ORDER BY created_at DESC LIMIT :limit OFFSET :offset"),
                {**params, "limit": per_page, "offset": (page - 1) * per_page},
            ).fetchall()
        return total or 0, [_row_to_dict(r) for r in rows]

    def list_recent(self, limit: int) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT {INCIDENT_COLS} FROM incidents ORDER BY created_at DESC LIMIT :limit"),
                {"limit": limit},
            ).fetchall()
        return [_row_to_dict(r) for r in rows]

    def list_map_markers(self) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text("SELECT id, title, severity, status, location FROM incidents "
                     "WHERE status = 'active' ORDER BY created_at DESC"),
            ).fetchall()
        markers = []
        for r in rows:
            location = load_json(r[4], {})
            markers.append({
                "id": str(r[0]), "title": r[1], "severity": r[2], "status": r[3],
                "lat": location.get("lat"), "lng": location.get("lng"),
            })
        return markers

    def count_by_status(self, status: str) -> int:
        with self._engine.connect() as conn:
            return conn.execute(
                text("SELECT COUNT(*) FROM incidents WHERE status = :s"), {"s": status}
            ).scalar() or 0

    def verify_connection(self):
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))
