"""
Application configuration from environment variables.
Settings class using pydantic-settings with optional validation.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from backend root so it loads when running from backend/ or project root
_BACKEND_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _BACKEND_ROOT / ".env"

DEFAULT_SESSION_SECRET = "change-me-in-production-use-env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment and .env.
    All fields have defaults for local dev; validate for production.
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    ENVIRONMENT: str = "development"
    # Store as string so env never triggers json.loads; parsed in cors_origins_list.
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated origins or JSON array",
        validation_alias="CORS_ORIGINS",
    )

    # Storage
    STORAGE_BACKEND: Literal["sqlite", "supabase"] = "sqlite"
    DATABASE_PATH: str = Field(
        default=str(_BACKEND_ROOT / "data" / "weathercraft.db"),
        description="SQLite database file (sqlite backend)",
    )
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_KEY: str = ""

    # Sessions
    SESSION_SECRET_KEY: str = DEFAULT_SESSION_SECRET
    SESSION_ALGORITHM: str = "HS256"
    SESSION_TTL_DAYS: int = Field(default=30, ge=1)
    SESSION_COOKIE_NAME: str = "session"
    SESSION_COOKIE_SECURE: bool = True
    # "none" lets the cookie survive the cross-site flow back from the game server page.
    SESSION_COOKIE_SAMESITE: Literal["lax", "strict", "none"] = "none"

    # Verification
    CODE_TTL_SECONDS: int = Field(default=600, ge=1)
    VERIFY_WEBHOOK_SECRET: str = Field(
        default="",
        description="If set, POST /verify requires a matching X-Webhook-Secret header",
    )

    # Name directory (Mojang)
    MOJANG_API_URL: str = "https://api.mojang.com"
    LOOKUP_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)
    AVATAR_URL_TEMPLATE: str = "https://crafatar.com/avatars/{external_id}?size=100&overlay"

    # Uploads
    UPLOADS_DIR: str = str(_BACKEND_ROOT / "uploads")
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    @field_validator("cors_origins", mode="before")
    @classmethod
    def normalize_cors_origins(cls, v: object) -> str:
        """Ensure we always have a string (avoid empty env causing json.loads in pydantic-settings)."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return "http://localhost:3000"
        if isinstance(v, list):
            return ",".join(str(x).strip() for x in v if str(x).strip())
        return str(v).strip()

    @field_validator("MOJANG_API_URL", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS_ORIGINS from comma-separated or JSON array string."""
        raw = (self.cors_origins or "").strip()
        if not raw:
            return ["http://localhost:3000"]
        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
                if isinstance(parsed, list):
                    return [x.strip() for x in parsed if isinstance(x, str) and x.strip()]
            except ValueError:
                pass
        return [x.strip() for x in raw.split(",") if x.strip()] or ["http://localhost:3000"]

    def validate_for_production(self) -> None:
        """
        Call to validate that required env vars are set (e.g. on startup in production).
        Raises ValueError with missing keys.
        """
        missing: List[str] = []
        if self.SESSION_SECRET_KEY == DEFAULT_SESSION_SECRET:
            missing.append("SESSION_SECRET_KEY")
        if self.STORAGE_BACKEND == "supabase":
            if not self.SUPABASE_URL:
                missing.append("SUPABASE_URL")
            if not self.SUPABASE_SERVICE_KEY:
                missing.append("SUPABASE_SERVICE_KEY")
        if missing:
            raise ValueError(f"Missing required environment variables: {', '.join(missing)}")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
