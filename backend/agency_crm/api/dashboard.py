"""Dashboard API: renewal pipeline, headline stats, and the open-activity queue."""
import logging
from datetime import datetime, timedelta, timezone
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, or_

from agency_crm.api.deps import MAX_WINDOW_DAYS, ok, money
from agency_crm.api.serializers import activity_to_dict, client_brief, policy_to_dict
from agency_crm.core.database import get_db
from agency_crm.core.security import get_current_user
from agency_crm.models.user import User
from agency_crm.models.activity import Activity
from agency_crm.models.client import Client
from agency_crm.models.policy import Policy, PolicyStatus
from agency_crm.services.renewals import (
    agency_today, days_until_expiration, expiring_window, renewal_urgency,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

EXPIRING_SOON_DAYS = 30
DEFAULT_RENEWAL_DAYS = 30


# ── Renewals ─────────────────────────────────────────────────────

@router.get("/renewals")
def upcoming_renewals(
    days: int = Query(DEFAULT_RENEWAL_DAYS, description="0 means the default window"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Active policies expiring in the next N days (1-365), flattened with client contact info."""
    days_to_check = min(max(days or DEFAULT_RENEWAL_DAYS, 1), 365)
    today = agency_today(current_user.agency.timezone)

    query = expiring_window(
        db.query(Policy)
        .options(joinedload(Policy.client))
        .filter(Policy.agency_id == current_user.agency_id),
        days_to_check,
        today,
    )
    renewals = []
    for p in query.order_by(Policy.expiration_date.asc(), Policy.id).all():
        client = p.client
        remaining = days_until_expiration(p.expiration_date, today)
        d = policy_to_dict(p)
        renewals.append({
            "id": p.id,
            "client_id": p.client_id,
            "carrier": p.carrier,
            "policy_number": p.policy_number,
            "type": p.type,
            "effective_date": d["effective_date"],
            "expiration_date": d["expiration_date"],
            "premium": d["premium"],
            "status": p.status,
            "client_first_name": client.first_name if client else "",
            "client_last_name": client.last_name if client else "",
            "client_email": client.email if client else None,
            "client_phone": client.phone if client else None,
            "days_until_expiration": remaining,
            "urgency": renewal_urgency(remaining),
        })

    return ok(
        renewals,
        f"Found {len(renewals)} policies expiring in the next {days_to_check} days",
    )


# ── Stats ────────────────────────────────────────────────────────

@router.get("/stats")
def dashboard_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    agency_id = current_user.agency_id
    today = agency_today(current_user.agency.timezone)
    active = Policy.status == PolicyStatus.ACTIVE.value

    total_clients = db.query(func.count(Client.id)).filter(Client.agency_id == agency_id).scalar() or 0
    total_policies = db.query(func.count(Policy.id)).filter(Policy.agency_id == agency_id).scalar() or 0
    active_policies = db.query(func.count(Policy.id)).filter(Policy.agency_id == agency_id, active).scalar() or 0
    pending_activities = db.query(func.count(Activity.id)).filter(
        Activity.agency_id == agency_id,
        Activity.completed.is_(False),
    ).scalar() or 0
    total_premium = db.query(func.sum(Policy.premium)).filter(Policy.agency_id == agency_id, active).scalar()
    expiring_soon = expiring_window(
        db.query(func.count(Policy.id)).filter(Policy.agency_id == agency_id),
        EXPIRING_SOON_DAYS,
        today,
    ).scalar() or 0

    return ok({
        "total_clients": total_clients,
        "total_policies": total_policies,
        "active_policies": active_policies,
        "pending_activities": pending_activities,
        "total_premium": money(total_premium),
        "expiring_soon": expiring_soon,
    })


# ── Activity queue ───────────────────────────────────────────────

@router.get("/upcoming-activities")
def upcoming_activities(
    limit: int = Query(10, ge=1),
    days: int = Query(7, ge=0, le=MAX_WINDOW_DAYS),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Open activities due within N days or with no due date at all."""
    limit = min(limit, 50)
    horizon = datetime.now(timezone.utc) + timedelta(days=days)

    activities = (
        db.query(Activity)
        .options(joinedload(Activity.client), joinedload(Activity.policy))
        .filter(
            Activity.agency_id == current_user.agency_id,
            Activity.completed.is_(False),
            or_(Activity.due_date.is_(None), Activity.due_date <= horizon),
        )
        .order_by(Activity.due_date.asc().nulls_last(), Activity.id)
        .limit(limit)
        .all()
    )

    results = []
    for a in activities:
        d = activity_to_dict(a)
        results.append({
            "id": a.id,
            "type": a.type,
            "description": a.description,
            "due_date": d["due_date"],
            "completed": d["completed"],
            "client_id": a.client_id,
            "policy_id": a.policy_id,
            "clients": client_brief(a.client),
            "policies": (
                {"policy_number": a.policy.policy_number, "carrier": a.policy.carrier}
                if a.policy else None
            ),
        })
    return ok(results)
