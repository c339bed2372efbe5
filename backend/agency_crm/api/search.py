"""Global search across clients, policies and activities."""
import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_

from agency_crm.api.deps import ok
from agency_crm.api.serializers import client_name
from agency_crm.core.database import get_db
from agency_crm.core.security import get_current_user
from agency_crm.models.user import User
from agency_crm.models.activity import Activity
from agency_crm.models.client import Client
from agency_crm.models.policy import Policy
from agency_crm.services.search import like_pattern, merge_unique

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/search", tags=["search"])

MIN_QUERY_LENGTH = 2
MAX_RESULTS = 10
DEFAULT_LIMIT = 5


@router.get("")
def global_search(
    q: str = Query("", description="Search term"),
    limit: int = Query(DEFAULT_LIMIT, description="0 means the default"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Keyword search; each section returns at most `limit` rows (max 10)."""
    term = (q or "").strip()
    limit = min(max(limit or DEFAULT_LIMIT, 1), MAX_RESULTS)
    if len(term) < MIN_QUERY_LENGTH:
        return ok({"clients": [], "policies": [], "activities": []})

    agency_id = current_user.agency_id
    pattern = like_pattern(term)

    def ilike(column):
        return column.ilike(pattern, escape="\\")

    clients = (
        db.query(Client)
        .filter(
            Client.agency_id == agency_id,
            or_(ilike(Client.first_name), ilike(Client.last_name), ilike(Client.email), ilike(Client.phone)),
        )
        .order_by(Client.last_name, Client.first_name, Client.id)
        .limit(limit)
        .all()
    )

    # Policies match on their own fields or on the owning client's name;
    # the two result sets overlap, so merge by id.
    policy_base = db.query(Policy).options(joinedload(Policy.client)).filter(Policy.agency_id == agency_id)
    by_fields = (
        policy_base
        .filter(or_(ilike(Policy.policy_number), ilike(Policy.carrier)))
        .order_by(Policy.policy_number, Policy.id)
        .limit(limit)
        .all()
    )
    by_client_name = (
        policy_base
        .join(Client, Client.id == Policy.client_id)
        .filter(or_(ilike(Client.first_name), ilike(Client.last_name)))
        .order_by(Policy.policy_number, Policy.id)
        .limit(limit)
        .all()
    )
    policies = merge_unique(by_fields, by_client_name, key=lambda p: p.id, limit=limit)

    activities = (
        db.query(Activity)
        .options(joinedload(Activity.client))
        .filter(Activity.agency_id == agency_id, ilike(Activity.description))
        .order_by(Activity.created_at.desc(), Activity.id)
        .limit(limit)
        .all()
    )

    return ok({
        "clients": [
            {"id": c.id, "first_name": c.first_name, "last_name": c.last_name, "email": c.email}
            for c in clients
        ],
        "policies": [
            {
                "id": p.id,
                "policy_number": p.policy_number,
                "carrier": p.carrier,
                "type": p.type,
                "client_id": p.client_id,
                "client_name": client_name(p.client),
            }
            for p in policies
        ],
        "activities": [
            {
                "id": a.id,
                "type": a.type,
                "description": a.description,
                "client_id": a.client_id,
                "client_name": client_name(a.client),
            }
            for a in activities
        ],
    })
