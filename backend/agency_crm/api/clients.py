"""Clients API: the agency's contact directory."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_, func, case

from agency_crm.api.deps import (
    ok, clamp_limit, is_ascending, sort_column, ordered, paginate,
    get_owned_or_404, money,
)
from agency_crm.api.serializers import client_to_dict, policy_to_dict
from agency_crm.core.database import get_db
from agency_crm.core.security import get_current_user
from agency_crm.models.user import User
from agency_crm.models.client import Client
from agency_crm.models.policy import Policy, PolicyStatus
from agency_crm.schemas.client import ClientCreate, ClientUpdate
from agency_crm.services.records import delete_client as _delete_client
from agency_crm.services.search import like_pattern

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/clients", tags=["clients"])

DUPLICATE_EMAIL = "A client with this email already exists"


def _email_taken(db: Session, agency_id: str, email: str, exclude_id: Optional[str] = None) -> bool:
    query = db.query(Client.id).filter(
        Client.agency_id == agency_id,
        func.lower(Client.email) == email.lower(),
    )
    if exclude_id:
        query = query.filter(Client.id != exclude_id)
    return query.first() is not None


# ── Search / List ──────────────────────────────────────────────────

@router.get("")
def list_clients(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    search: Optional[str] = Query(None, description="Match first/last name, email or phone"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query("desc", alias="sortOrder"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List clients with per-client policy counts and active premium."""
    limit = clamp_limit(limit)
    is_active = Policy.status == PolicyStatus.ACTIVE.value

    stats = (
        db.query(
            Policy.client_id.label("client_id"),
            func.count(Policy.id).label("policy_count"),
            func.sum(case((is_active, 1), else_=0)).label("active_policies"),
            func.sum(case((is_active, Policy.premium), else_=0)).label("total_premium"),
        )
        .filter(Policy.agency_id == current_user.agency_id)
        .group_by(Policy.client_id)
        .subquery()
    )
    policy_count = func.coalesce(stats.c.policy_count, 0)
    active_policies = func.coalesce(stats.c.active_policies, 0)
    total_premium = func.coalesce(stats.c.total_premium, 0)

    query = (
        db.query(
            Client,
            policy_count.label("policy_count"),
            active_policies.label("active_policies"),
            total_premium.label("total_premium"),
        )
        .outerjoin(stats, stats.c.client_id == Client.id)
        .filter(Client.agency_id == current_user.agency_id)
    )

    if search and search.strip():
        pattern = like_pattern(search.strip())
        query = query.filter(
            or_(
                Client.first_name.ilike(pattern, escape="\\"),
                Client.last_name.ilike(pattern, escape="\\"),
                Client.email.ilike(pattern, escape="\\"),
                Client.phone.ilike(pattern, escape="\\"),
            )
        )

    column = sort_column(sort_by, {
        "created_at": Client.created_at,
        "first_name": Client.first_name,
        "last_name": Client.last_name,
        "email": Client.email,
        "policy_count": policy_count,
        "total_premium": total_premium,
    }, "created_at")
    query = query.order_by(ordered(column, is_ascending(sort_order)), Client.id)

    def _row(row):
        client, pc, ap, tp = row
        return {
            **client_to_dict(client),
            "policy_count": int(pc or 0),
            "active_policies": int(ap or 0),
            "total_premium": money(tp),
        }

    return ok(paginate(query, page, limit, _row))


# ── Detail ─────────────────────────────────────────────────────────

@router.get("/{client_id}")
def get_client(
    client_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get a single client with their policies."""
    client = get_owned_or_404(db, Client, client_id, current_user.agency_id, "Client")
    policies = []
    for p in client.policies:
        d = policy_to_dict(p)
        policies.append({k: d[k] for k in (
            "id", "carrier", "policy_number", "type", "effective_date",
            "expiration_date", "premium", "status", "created_at",
        )})
    return ok({**client_to_dict(client), "policies": policies})


# ── Create / Update / Delete ───────────────────────────────────────

@router.post("", status_code=status.HTTP_201_CREATED)
def create_client(
    payload: ClientCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    data = payload.model_dump()
    if data.get("email") and _email_taken(db, current_user.agency_id, data["email"]):
        raise HTTPException(status_code=409, detail=DUPLICATE_EMAIL)

    client = Client(agency_id=current_user.agency_id, **data)
    db.add(client)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=DUPLICATE_EMAIL)
    db.refresh(client)
    logger.info(f"Client {client.id} created by {current_user.email}")
    return ok(client_to_dict(client), "Client created successfully")


@router.put("/{client_id}")
def update_client(
    client_id: str,
    payload: ClientUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    client = get_owned_or_404(db, Client, client_id, current_user.agency_id, "Client")
    data = payload.model_dump(exclude_unset=True)

    if data.get("email") and _email_taken(db, current_user.agency_id, data["email"], exclude_id=client.id):
        raise HTTPException(status_code=409, detail=DUPLICATE_EMAIL)

    for field, value in data.items():
        setattr(client, field, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=DUPLICATE_EMAIL)
    db.refresh(client)
    return ok(client_to_dict(client), "Client updated successfully")


@router.delete("/{client_id}")
def delete_client(
    client_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    client = get_owned_or_404(db, Client, client_id, current_user.agency_id, "Client")
    _delete_client(db, client)
    return ok(message="Client deleted successfully")
