# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for the skill catalog (read-mostly reference data)."""
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from reliefconnect.repositories._rows import to_iso, utcnow_iso

SKILL_COLS = "id, name, category, description, icon, created_at"


def _row_to_dict(row) -> Dict[str, Any]:
    return {
        "id": str(row[0]),
        "name": row[1],
        "category": row[2],
        "description": row[3],
        "icon": row[4],
        "created_at": to_iso(row[5]) or "",
    }


class SkillRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    def insert_many(self, skills: List[Dict[str, Any]]) -> int:
        now_iso = utcnow_iso()
        with self._engine.begin() as conn:
            for skill in skills:
                conn.execute(
                    text("""
                        INSERT INTO skills (id, name, category, description, icon, created_at)
                        VALUES (:id, :name, :category, :description, :icon, :ts)
                    """),
                    {**skill, "ts": now_iso},
                )
        return len(skills)

    def get_skill(self, skill_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {SKILL_COLS} FROM skills WHERE id = :id"), {"id": skill_id}
            ).fetchone()
        return _row_to_dict(row) if row else None

    def list_skills(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        where, params = "", {}
        if category:
            where, params = " WHERE category = :category", {"category": category}
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"SELECT {SKILL_COLS} FROM skills{where} ORDER BY category, name"),
                params,
            ).fetchall()
        return [_row_to_dict(r) for r in rows]

    def find_missing(self, skill_ids: Iterable[str]) -> List[str]:
        """Return the ids from ``skill_ids`` that are not in the catalog."""
        wanted = list(dict.fromkeys(skill_ids))
        if not wanted:
            return []
        known = {s["id"] for s in self.list_skills()}
        return [s for s in wanted if s not in known]

    def count(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(text("SELECT COUNT(*) FROM skills")).scalar() or 0
