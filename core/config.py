from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Tenantry API"
    ENV: str = "development"

    # -------------------------------------------------
    # Frontend Domains (CORS)
    # -------------------------------------------------
    FRONTEND_ORIGINS: str = Field(
        "",
        description="Comma-separated list of allowed frontend origins",
    )
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Primary DB & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # -------------------------------------------------
    # Authorization
    # -------------------------------------------------
    SUPER_USER_EMAILS: str = Field(
        "",
        description="Comma-separated email allowlist that bypasses permission checks",
    )

    # Deadline applied to every permission / context lookup
    STORAGE_TIMEOUT_SECONDS: float = Field(5.0, gt=0)

    AUDIT_LOG_DEFAULT_LIMIT: int = Field(100, ge=1, le=500)

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


def split_csv(raw: Optional[str]) -> List[str]:
    """Split a comma-separated env value, dropping blanks."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list after loading settings
# -------------------------------------------------
cors_origins = []
for origin in split_csv(settings.FRONTEND_ORIGINS):
    if not origin.startswith("http"):
        origin = f"https://{origin}"
    cors_origins.append(origin.rstrip("/"))

settings.BACKEND_CORS_ORIGINS = sorted(set(cors_origins))
