# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Row conversion helpers shared by every repository."""
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def to_iso(value: Any) -> Optional[str]:
    """Timestamps come back as datetime from Postgres and as text from SQLite."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def dump_json(value: Any) -> Optional[str]:
    return None if value is None else json.dumps(value)


def load_json(value: Any, default: Any = None) -> Any:
    if value is None:
        return default
    if isinstance(value, (dict, list)):
        return value
    return json.loads(value)


def where_clause(**criteria: Any) -> Tuple[str, Dict[str, Any]]:
    """
    AND together ``column = :column`` for every criterion that was given.

    Returns the SQL fragment (empty, or starting with `` WHERE``) and its
    bind parameters. ``None`` and empty-string criteria are skipped.
    """
    params = {col: value for col, value in criteria.items() if value not in (None, "")}
    if not params:
        return "", {}
    return " WHERE " + " AND ".join(f"{col} = :{col}" for col in params), params
