from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from agency_crm.core.config import settings


def normalize_database_url(url: str) -> str:
    """Hosted Postgres hands out postgres:// but SQLAlchemy + psycopg3 needs postgresql+psycopg://"""
    if url.startswith("postgres://"):
        return "postgresql+psycopg://" + url[len("postgres://"):]
    if url.startswith("postgresql://") and "+psycopg" not in url:
        return "postgresql+psycopg://" + url[len("postgresql://"):]
    return url


db_url = normalize_database_url(settings.DATABASE_URL)

if db_url.startswith("sqlite"):
    # Local dev / tests
    engine = create_engine(
        db_url,
        connect_args={"check_same_thread": False},
        echo=False,
    )
else:
    engine = create_engine(
        db_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        echo=False,
    )

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


# Dependency for FastAPI routes
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
