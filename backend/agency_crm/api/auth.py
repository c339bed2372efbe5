"""Auth API: token login, current user, and staff accounts."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from sqlalchemy import func

from agency_crm.api.deps import ok, iso
from agency_crm.core.database import get_db
from agency_crm.core.security import (
    create_access_token, get_current_user, get_password_hash, require_admin, verify_password,
)
from agency_crm.models.user import User
from agency_crm.schemas.user import Token, UserCreate, UserOut

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_to_dict(user: User) -> dict:
    data = UserOut.model_validate(user).model_dump()
    data["created_at"] = iso(user.created_at)
    return data


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """Exchange email + password for a bearer token."""
    user = db.query(User).filter(func.lower(User.email) == form_data.username.strip().lower()).first()
    if not user or not verify_password(form_data.password, user.hashed_password):
        logger.info(f"Failed login for {form_data.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is disabled")

    return {"access_token": create_access_token(user), "token_type": "bearer"}


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    agency = current_user.agency
    return ok({
        **_user_to_dict(current_user),
        "agency": {"id": agency.id, "name": agency.name, "timezone": agency.timezone},
    })


@router.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Add a staff account to the admin's own agency."""
    email = payload.email.lower()
    if db.query(User.id).filter(func.lower(User.email) == email).first():
        raise HTTPException(status_code=409, detail="A user with this email already exists")

    user = User(
        agency_id=current_user.agency_id,
        email=email,
        full_name=payload.full_name,
        role=payload.role,
        hashed_password=get_password_hash(payload.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"User {user.email} created in agency {user.agency_id} by {current_user.email}")
    return ok(_user_to_dict(user), "User created successfully")
