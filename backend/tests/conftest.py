import os

# Must be set before agency_crm is imported: settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["API_URL"] = "http://testserver"

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agency_crm.core.config import settings
from agency_crm.core.database import Base, get_db
from agency_crm.core.security import create_access_token, get_password_hash
from agency_crm.main import app
from agency_crm.models import Agency, User, UserRole, Client, Policy, Activity, Document, ClientNote
from agency_crm.services.renewals import agency_today
from agency_crm.services.storage import DocumentStorage, get_storage


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(tmp_path):
    return DocumentStorage(
        root=str(tmp_path / "uploads"),
        bucket=settings.STORAGE_BUCKET,
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        base_url=settings.API_URL,
    )


@pytest.fixture
def client(engine, storage):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = Session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ── Tenants and users ─────────────────────────────────────────────

def _make_agency(db, name):
    agency = Agency(name=name, timezone="UTC")
    db.add(agency)
    db.commit()
    return agency


def _make_user(db, agency, email, role=UserRole.ADMIN.value, password="password123"):
    user = User(
        agency_id=agency.id,
        email=email,
        full_name=email.split("@")[0].title(),
        hashed_password=get_password_hash(password),
        role=role,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def agency(db):
    return _make_agency(db, "Lone Star Insurance")


@pytest.fixture
def other_agency(db):
    return _make_agency(db, "Rival Insurance")


@pytest.fixture
def user(db, agency):
    return _make_user(db, agency, "admin@lonestar.com")


@pytest.fixture
def agent(db, agency):
    return _make_user(db, agency, "agent@lonestar.com", role=UserRole.AGENT.value)


@pytest.fixture
def other_user(db, other_agency):
    return _make_user(db, other_agency, "admin@rival.com")


def bearer(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def auth_headers(user):
    return bearer(user)


@pytest.fixture
def other_headers(other_user):
    return bearer(other_user)


# ── Row factories ─────────────────────────────────────────────────

def make_client(db, agency, first_name="John", last_name="Martinez", **kw):
    c = Client(agency_id=agency.id, first_name=first_name, last_name=last_name, **kw)
    db.add(c)
    db.commit()
    return c


def make_policy(db, client, days_to_expiry=60, **kw):
    today = agency_today("UTC")
    values = dict(
        carrier="State Farm",
        policy_number="AUT-100001",
        type="auto",
        status="active",
        premium=Decimal("1200.00"),
        effective_date=today + timedelta(days=days_to_expiry) - timedelta(days=365),
        expiration_date=today + timedelta(days=days_to_expiry),
    )
    values.update(kw)
    p = Policy(agency_id=client.agency_id, client_id=client.id, **values)
    db.add(p)
    db.commit()
    return p


def make_activity(db, agency, description="Call about renewal", **kw):
    values = dict(type="call", completed=False)
    values.update(kw)
    a = Activity(agency_id=agency.id, description=description, **values)
    db.add(a)
    db.commit()
    return a


def make_document(db, agency, file_path="general/1-file.pdf", **kw):
    d = Document(agency_id=agency.id, file_name=file_path.rsplit("/", 1)[-1], file_path=file_path, **kw)
    db.add(d)
    db.commit()
    return d


def make_note(db, client, content="Called about quote", **kw):
    n = ClientNote(agency_id=client.agency_id, client_id=client.id, content=content, **kw)
    db.add(n)
    db.commit()
    return n


def utc_in(days=0, hours=0):
    return datetime.now(timezone.utc) + timedelta(days=days, hours=hours)
