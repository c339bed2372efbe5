"""Response envelope, pagination and lookup helpers shared by the routers."""
import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Type

from fastapi import HTTPException
from sqlalchemy.orm import Query, Session

from agency_crm.schemas.common import is_uuid

MAX_PAGE_SIZE = 100
# Longest look-ahead window, in days
MAX_WINDOW_DAYS = 3650


def ok(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return body


def clamp_limit(limit: int, maximum: int = MAX_PAGE_SIZE) -> int:
    return max(1, min(limit, maximum))


def is_ascending(sort_order: Optional[str]) -> bool:
    return (sort_order or "").lower() == "asc"


def sort_column(sort_by: Optional[str], allowed: Dict[str, Any], default: str):
    """Map a user-supplied sortBy onto a whitelisted column."""
    return allowed.get(sort_by or default, allowed[default])


def ordered(column, ascending: bool, nulls_last: bool = False):
    clause = column.asc() if ascending else column.desc()
    return clause.nulls_last() if nulls_last else clause


def paginate(query: Query, page: int, limit: int, serialize) -> Dict[str, Any]:
    """Count, slice and serialize; returns the paginated payload."""
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    return {
        "data": [serialize(r) for r in rows],
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }


def require_uuid(value: str, label: str) -> str:
    if not is_uuid(value):
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID format")
    return value.lower()


def get_owned_or_404(db: Session, model: Type, record_id: str, agency_id: str, label: str):
    """Fetch a tenant-scoped row by id; other agencies' rows look missing."""
    record_id = require_uuid(record_id, label.lower())
    row = db.query(model).filter(model.id == record_id, model.agency_id == agency_id).first()
    if not row:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return row


def iso(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime) and value.tzinfo is None:
        # SQLite hands back naive values; everything is stored as UTC
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def money(value) -> float:
    return float(value) if value is not None else 0.0
