"""Activities API: calls, emails, tasks, meetings and notes on the agency calendar."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, joinedload

from agency_crm.api.deps import (
    ok, clamp_limit, is_ascending, sort_column, ordered, paginate,
    get_owned_or_404, require_uuid, MAX_WINDOW_DAYS,
)
from agency_crm.api.serializers import activity_to_dict, client_name
from agency_crm.core.database import get_db
from agency_crm.core.security import get_current_user
from agency_crm.models.user import User
from agency_crm.models.activity import Activity
from agency_crm.models.client import Client
from agency_crm.models.policy import Policy
from agency_crm.schemas.activity import ActivityCreate, ActivityUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/activities", tags=["activities"])

SORTABLE = {
    "due_date": Activity.due_date,
    "created_at": Activity.created_at,
    "type": Activity.type,
    "completed": Activity.completed,
}


def _with_client_name(a: Activity) -> dict:
    """Flatten the joined client into a display name."""
    return {**activity_to_dict(a), "client_name": client_name(a.client)}


def _check_links(db: Session, agency_id: str, data: dict) -> None:
    """Linked client/policy must exist in the caller's agency."""
    if data.get("client_id"):
        found = db.query(Client.id).filter(
            Client.id == data["client_id"], Client.agency_id == agency_id
        ).first()
        if not found:
            raise HTTPException(status_code=404, detail="Client not found")
    if data.get("policy_id"):
        found = db.query(Policy.id).filter(
            Policy.id == data["policy_id"], Policy.agency_id == agency_id
        ).first()
        if not found:
            raise HTTPException(status_code=404, detail="Policy not found")


@router.get("")
def list_activities(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    client_id: Optional[str] = None,
    policy_id: Optional[str] = None,
    type_filter: Optional[str] = Query(None, alias="type"),
    completed: Optional[str] = Query(None, description="'true' or 'false'"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query("asc", alias="sortOrder"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    limit = clamp_limit(limit)
    query = (
        db.query(Activity)
        .options(joinedload(Activity.client))
        .filter(Activity.agency_id == current_user.agency_id)
    )
    if client_id:
        client_id = require_uuid(client_id, "client")
        query = query.filter(Activity.client_id == client_id)
    if policy_id:
        policy_id = require_uuid(policy_id, "policy")
        query = query.filter(Activity.policy_id == policy_id)
    if type_filter:
        query = query.filter(Activity.type == type_filter)
    if completed is not None:
        query = query.filter(Activity.completed == (completed.lower() == "true"))

    column = sort_column(sort_by, SORTABLE, "due_date")
    query = query.order_by(ordered(column, is_ascending(sort_order), nulls_last=True), Activity.id)
    return ok(paginate(query, page, limit, _with_client_name))


@router.get("/upcoming")
def upcoming_activities(
    days: int = Query(7, ge=0, le=MAX_WINDOW_DAYS),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Open activities due within the next N days, including overdue ones."""
    horizon = datetime.now(timezone.utc) + timedelta(days=days)
    activities = (
        db.query(Activity)
        .options(joinedload(Activity.client))
        .filter(
            Activity.agency_id == current_user.agency_id,
            Activity.completed.is_(False),
            Activity.due_date <= horizon,
        )
        .order_by(Activity.due_date.asc().nulls_last(), Activity.id)
        .all()
    )
    return ok([_with_client_name(a) for a in activities])


@router.get("/{activity_id}")
def get_activity(
    activity_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    activity = get_owned_or_404(db, Activity, activity_id, current_user.agency_id, "Activity")
    return ok(activity_to_dict(activity))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_activity(
    payload: ActivityCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    data = payload.model_dump()
    _check_links(db, current_user.agency_id, data)

    activity = Activity(agency_id=current_user.agency_id, **data)
    db.add(activity)
    db.commit()
    db.refresh(activity)
    return ok(activity_to_dict(activity), "Activity created successfully")


@router.put("/{activity_id}")
def update_activity(
    activity_id: str,
    payload: ActivityUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    activity = get_owned_or_404(db, Activity, activity_id, current_user.agency_id, "Activity")
    data = payload.model_dump(exclude_unset=True)
    if data.get("type") is None:
        data.pop("type", None)
    _check_links(db, current_user.agency_id, data)

    # Completion stamps/clears completed_at
    if data.get("completed") is True:
        data["completed_at"] = datetime.now(timezone.utc)
    elif data.get("completed") is False:
        data["completed_at"] = None
    elif "completed" in data:
        data.pop("completed")

    for field, value in data.items():
        setattr(activity, field, value)
    db.commit()
    db.refresh(activity)
    return ok(activity_to_dict(activity), "Activity updated successfully")


@router.delete("/{activity_id}")
def delete_activity(
    activity_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    activity = get_owned_or_404(db, Activity, activity_id, current_user.agency_id, "Activity")
    db.delete(activity)
    db.commit()
    return ok(message="Activity deleted successfully")
