"""Validators shared by the request schemas."""
import re
from datetime import datetime, timezone
from typing import Optional

# Hyphenated 8-4-4-4-12 form only; ids are stored lower-case
_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)


def is_uuid(value: str) -> bool:
    return isinstance(value, str) and _UUID_RE.fullmatch(value) is not None


def check_uuid(value: Optional[str], message: str) -> Optional[str]:
    if value is None:
        return None
    if not is_uuid(value):
        raise ValueError(message)
    return value.lower()


def blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
