# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for relief resources (supplies, shelters, vehicles)."""
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from reliefconnect.repositories._rows import dump_json, load_json, to_iso, utcnow_iso, where_clause

RESOURCE_COLS = "id, name, type, quantity, status, location, created_at, updated_at"
UPDATABLE_COLS = ("name", "type", "quantity", "status", "location")


def _row_to_dict(row) -> Dict[str, Any]:
    return {
        "id": str(row[0]),
        "name": row[1],
        "type": row[2],
        "quantity": row[3] or 0,
        "status": row[4],
        "location": load_json(row[5], {}),
        "created_at": to_iso(row[6]) or "",
        "updated_at": to_iso(row[7]),
    }


class ResourceRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    def create_resource(self, resource_id: str, name: str, resource_type: str,
                        quantity: int, status: str,
                        location: Dict[str, Any]) -> Dict[str, Any]:
        now_iso = utcnow_iso()
        with self._engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO resources (id, name, type, quantity, status, location, created_at)
                    VALUES (:id, :name, :type, :quantity, :status, :location, :ts)
                """),
                {"id": resource_id, "name": name, "type": resource_type,
                 "quantity": quantity, "status": status,
                 "location": dump_json(location), "ts": now_iso},
            )
        return {
            "id": resource_id, "name": name, "type": resource_type,
            "quantity": quantity, "status": status, "location": location,
            "created_at": now_iso, "updated_at": None,
        }

    def update_resource(self, resource_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        sets = [f"{col} = :{col}" for col in UPDATABLE_COLS if col in changes]
        params: Dict[str, Any] = {
            col: dump_json(changes[col]) if col == "location" else changes[col]
            for col in UPDATABLE_COLS if col in changes
        }
        params.update(id=resource_id, updated_at=utcnow_iso())
        sets.append("updated_at = :updated_at")
        with self._engine.begin() as conn:
            conn.execute(text(f"UPDATE resources SET {', '.join(sets)} WHERE id = :id"), params)
            row = conn.execute(
                text(f"SELECT {RESOURCE_COLS} FROM resources WHERE id = :id"),
                {"id": resource_id},
            ).fetchone()
        return _row_to_dict(row) if row else None

    def delete_resource(self, resource_id: str) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(
                text("DELETE FROM resources WHERE id = :id"), {"id": resource_id}
            )
        return result.rowcount > 0

    def get_resource(self, resource_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {RESOURCE_COLS} FROM resources WHERE id = :id"),
                {"id": resource_id},
            ).fetchone()
        return _row_to_dict(row) if row else None

    def list_resources(self, resource_type: Optional[str] = None,
                       status: Optional[str] = None) -> List[Dict[str, Any]]:
        where, params = where_clause(type=resource_type, status=status)
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT {RESOURCE_COLS} FROM resources{where} ORDER BY created_at DESC"),
                params,
            ).fetchall()
        return [_row_to_dict(r) for r in rows]

    def count_by_status(self, status: str) -> int:
        with self._engine.connect() as conn:
            return conn.execute(
                text("SELECT COUNT(*) FROM resources WHERE status = :s"), {"s": status}
            ).scalar() or 0
