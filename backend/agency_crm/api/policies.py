"""Policies API."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, joinedload

from agency_crm.api.deps import (
    ok, clamp_limit, is_ascending, sort_column, ordered, paginate,
    get_owned_or_404, require_uuid, MAX_WINDOW_DAYS,
)
from agency_crm.api.serializers import policy_to_dict, client_brief, client_name
from agency_crm.core.database import get_db
from agency_crm.core.security import get_current_user
from agency_crm.models.user import User
from agency_crm.models.client import Client
from agency_crm.models.policy import Policy
from agency_crm.schemas.policy import PolicyCreate, PolicyUpdate
from agency_crm.services.records import delete_policy as _delete_policy
from agency_crm.services.renewals import agency_today, days_until_expiration, expiring_window

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/policies", tags=["policies"])

SORTABLE = {
    "created_at": Policy.created_at,
    "expiration_date": Policy.expiration_date,
    "effective_date": Policy.effective_date,
    "premium": Policy.premium,
    "carrier": Policy.carrier,
    "policy_number": Policy.policy_number,
    "status": Policy.status,
    "type": Policy.type,
}


def _policy_with_client(p: Policy) -> dict:
    return {
        **policy_to_dict(p),
        "clients": client_brief(p.client),
        "client_name": client_name(p.client),
    }


@router.get("")
def list_policies(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    client_id: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    type_filter: Optional[str] = Query(None, alias="type"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query("desc", alias="sortOrder"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    limit = clamp_limit(limit)
    query = (
        db.query(Policy)
        .options(joinedload(Policy.client))
        .filter(Policy.agency_id == current_user.agency_id)
    )
    if client_id:
        client_id = require_uuid(client_id, "client")
        query = query.filter(Policy.client_id == client_id)
    if status_filter:
        query = query.filter(Policy.status == status_filter)
    if type_filter:
        query = query.filter(Policy.type == type_filter)

    column = sort_column(sort_by, SORTABLE, "created_at")
    query = query.order_by(ordered(column, is_ascending(sort_order)), Policy.id)
    return ok(paginate(query, page, limit, _policy_with_client))


# Static routes must come before /{policy_id}

@router.get("/expiring")
def expiring_policies(
    days: int = Query(30, ge=0, le=MAX_WINDOW_DAYS),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Active policies expiring within the next N days, soonest first."""
    today = agency_today(current_user.agency.timezone)
    query = expiring_window(
        db.query(Policy).filter(Policy.agency_id == current_user.agency_id), days, today
    )
    policies = query.order_by(Policy.expiration_date.asc(), Policy.id).all()
    return ok([
        {**policy_to_dict(p), "days_until_expiration": days_until_expiration(p.expiration_date, today)}
        for p in policies
    ])


@router.get("/{policy_id}")
def get_policy(
    policy_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    policy = get_owned_or_404(db, Policy, policy_id, current_user.agency_id, "Policy")
    return ok(policy_to_dict(policy))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_policy(
    payload: PolicyCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    client = db.query(Client).filter(
        Client.id == payload.client_id,
        Client.agency_id == current_user.agency_id,
    ).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    data = payload.model_dump(exclude_none=True)
    policy = Policy(agency_id=current_user.agency_id, **data)
    db.add(policy)
    db.commit()
    db.refresh(policy)
    logger.info(f"Policy {policy.policy_number} created for client {client.id}")
    return ok(policy_to_dict(policy), "Policy created successfully")


@router.put("/{policy_id}")
def update_policy(
    policy_id: str,
    payload: PolicyUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    policy = get_owned_or_404(db, Policy, policy_id, current_user.agency_id, "Policy")
    data = payload.model_dump(exclude_unset=True)

    effective = data.get("effective_date", policy.effective_date)
    expiration = data.get("expiration_date", policy.expiration_date)
    if effective and expiration and expiration < effective:
        raise HTTPException(status_code=400, detail="Expiration date cannot be before effective date")

    for field, value in data.items():
        if value is None and field != "details":
            continue
        setattr(policy, field, value)
    db.commit()
    db.refresh(policy)
    return ok(policy_to_dict(policy), "Policy updated successfully")


@router.delete("/{policy_id}")
def delete_policy(
    policy_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    policy = get_owned_or_404(db, Policy, policy_id, current_user.agency_id, "Policy")
    _delete_policy(db, policy)
    return ok(message="Policy deleted successfully")
