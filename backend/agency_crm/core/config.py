from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Agency CRM"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "postgresql://crm_user:crm_pass@db:5432/agency_crm"

    # Security
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 hours

    # First agency + admin, created on startup when the database is empty
    BOOTSTRAP_AGENCY_NAME: str = "My Agency"
    BOOTSTRAP_ADMIN_EMAIL: Optional[str] = None
    BOOTSTRAP_ADMIN_PASSWORD: Optional[str] = None

    # CORS (comma-separated list of origins)
    CORS_ORIGIN: str = "http://localhost:3000"

    # Public base URL of this API, used to build signed storage links
    API_URL: str = "http://localhost:8000"

    # Document storage
    UPLOAD_DIR: str = "/app/uploads"
    STORAGE_BUCKET: str = "documents"
    MAX_UPLOAD_SIZE: int = 50 * 1024 * 1024  # 50MB
    SIGNED_URL_EXPIRES_IN: int = 3600
    SIGNED_UPLOAD_EXPIRES_IN: int = 2 * 3600
    MAX_SIGNED_URL_EXPIRES_IN: int = 7 * 24 * 3600

    # Renewal windows are computed in the agency's local date
    DEFAULT_TIMEZONE: str = "America/Chicago"

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGIN.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
