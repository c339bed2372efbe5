import logging
import time
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from agency_crm.core.config import settings
from agency_crm.api import auth, clients, policies, activities, documents, notes, dashboard, search
from agency_crm.api import storage as storage_api

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def init_database():
    """Create missing tables and, on an empty database, the first agency + admin."""
    from agency_crm.core.database import engine, Base, SessionLocal
    from agency_crm.core.security import get_password_hash
    from agency_crm.models import Agency, User, UserRole  # registers every model on Base

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created successfully")

    if not (settings.BOOTSTRAP_ADMIN_EMAIL and settings.BOOTSTRAP_ADMIN_PASSWORD):
        return

    db = SessionLocal()
    try:
        if db.query(Agency).first() is None:
            agency = Agency(name=settings.BOOTSTRAP_AGENCY_NAME, timezone=settings.DEFAULT_TIMEZONE)
            db.add(agency)
            db.flush()
            db.add(User(
                agency_id=agency.id,
                email=settings.BOOTSTRAP_ADMIN_EMAIL.lower(),
                full_name="Agency Administrator",
                hashed_password=get_password_hash(settings.BOOTSTRAP_ADMIN_PASSWORD),
                role=UserRole.ADMIN.value,
            ))
            db.commit()
            logger.info(f"Bootstrap agency '{agency.name}' and admin {settings.BOOTSTRAP_ADMIN_EMAIL} created")
    except Exception as e:
        logger.error(f"Error bootstrapping admin: {e}")
        db.rollback()
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run database init on startup."""
    init_database()
    yield


# Disable API docs in production
docs_url = "/docs" if not settings.is_production else None
redoc_url = "/redoc" if not settings.is_production else None

app = FastAPI(
    title=settings.APP_NAME,
    description="Insurance agency CRM - clients, policies, activities, documents and renewals",
    version=VERSION,
    lifespan=lifespan,
    docs_url=docs_url,
    redoc_url=redoc_url,
)


# ── Error envelope: always {"success": false, "error": "..."} ────────

def _error(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}\n{traceback.format_exc()}")
    return _error(500, str(exc) if settings.DEBUG else "Internal Server Error")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == 404 and message == "Not Found":
        message = f"Route {request.url.path} not found"
    return _error(exc.status_code, str(message), headers=getattr(exc, "headers", None))


def format_validation_errors(errors) -> str:
    messages = []
    for err in errors:
        msg = err.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            messages.append(msg[len("Value error, "):])
            continue
        field = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "header"))
        messages.append(f"{field}: {msg}" if field else msg)
    return ", ".join(messages) or "Validation failed"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error(400, format_validation_errors(exc.errors()))


# ── Request logging ──────────────────────────────────────────────────

@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)")
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.get("/health")
def health_check():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/")
def root():
    return {"message": f"{settings.APP_NAME} API", "version": VERSION, "docs": docs_url}


# Include routers
app.include_router(auth.router)
app.include_router(clients.router)
app.include_router(policies.router)
app.include_router(activities.router)
app.include_router(documents.router)
app.include_router(notes.router)
app.include_router(dashboard.router)
app.include_router(search.router)
app.include_router(storage_api.router)
