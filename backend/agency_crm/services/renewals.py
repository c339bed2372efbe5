"""Renewal-window arithmetic.

A renewal window is the number of whole days between the agency's local
"today" and a policy's expiration date. Dashboard widgets and the expiring
policies list all go through these helpers so they agree on the boundary
days.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Optional

import pytz
from sqlalchemy.orm import Query

from agency_crm.core.config import settings
from agency_crm.models.policy import Policy, PolicyStatus

logger = logging.getLogger(__name__)

URGENT_DAYS = 7
SOON_DAYS = 14


def agency_today(tz_name: Optional[str] = None) -> date:
    """Current calendar date in the agency's timezone."""
    name = tz_name or settings.DEFAULT_TIMEZONE
    try:
        tz = pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone '{name}', falling back to {settings.DEFAULT_TIMEZONE}")
        tz = pytz.timezone(settings.DEFAULT_TIMEZONE)
    return datetime.now(tz).date()


def days_until_expiration(expiration_date, today: Optional[date] = None) -> Optional[int]:
    """Days from today to expiration; 0 on the day itself, negative once lapsed."""
    if expiration_date is None:
        return None
    if isinstance(expiration_date, datetime):
        expiration_date = expiration_date.date()
    elif isinstance(expiration_date, str):
        expiration_date = date.fromisoformat(expiration_date[:10])
    today = today or agency_today()
    return (expiration_date - today).days


def renewal_urgency(days: Optional[int]) -> Optional[str]:
    if days is None:
        return None
    if days < 0:
        return "expired"
    if days <= URGENT_DAYS:
        return "urgent"
    if days <= SOON_DAYS:
        return "soon"
    return "upcoming"


def expiring_window(query: Query, days: int, today: date) -> Query:
    """Restrict a Policy query to active policies expiring in [today, today + days]."""
    return query.filter(
        Policy.status == PolicyStatus.ACTIVE.value,
        Policy.expiration_date >= today,
        Policy.expiration_date <= today + timedelta(days=days),
    )
