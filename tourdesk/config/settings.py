"""
Configuration settings for the Tourdesk backend
Handles environment variables and application settings
"""
from datetime import datetime
from typing import Annotated, Optional, List
from pydantic_settings import BaseSettings, NoDecode
from pydantic import field_validator


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "tourdesk"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Supabase (hosted record store)
    SUPABASE_URL: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # File fallback storage
    DATA_DIR: str = "data"
    SETTINGS_FILE: str = "data/site_settings.json"  # data/settings.json is the fallback store's settings table

    # PayHere (highest priority source of the credential cascade)
    PAYHERE_MERCHANT_ID: Optional[str] = None
    PAYHERE_MERCHANT_SECRET: Optional[str] = None
    PAYHERE_SANDBOX: Optional[bool] = None
    NEXT_PUBLIC_BASE_URL: Optional[str] = None

    # Session cookie
    SESSION_SECRET: str = "change-this-in-production"
    SESSION_ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "admin_session"
    SESSION_MAX_AGE_SECONDS: int = 60 * 60 * 24 * 7  # 7 days

    # Login throttling
    LOGIN_RATE_LIMIT: int = 10           # attempts per window
    LOGIN_RATE_WINDOW_SECONDS: int = 900

    # Logins for users without a stored password hash are accepted until this instant
    MIGRATION_MODE_UNTIL: Optional[datetime] = None

    # SendGrid
    SENDGRID_API_KEY: Optional[str] = None
    SENDGRID_FROM_EMAIL: Optional[str] = None
    SENDGRID_FROM_NAME: str = "Tourdesk"
    ADMIN_EMAILS: Annotated[List[str], NoDecode] = []

    # CORS
    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = [
        "http://localhost:3000",
    ]

    # Peers allowed to report the client address through X-Forwarded-For
    TRUSTED_PROXIES: Annotated[List[str], NoDecode] = []

    @field_validator("ALLOWED_ORIGINS", "ADMIN_EMAILS", "TRUSTED_PROXIES", mode="before")
    @classmethod
    def split_csv(cls, v):
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator(
        "PAYHERE_MERCHANT_ID", "PAYHERE_MERCHANT_SECRET", "PAYHERE_SANDBOX", "NEXT_PUBLIC_BASE_URL",
        mode="before",
    )
    @classmethod
    def blank_as_unset(cls, v):
        # PAYHERE_SANDBOX= in .env means "not configured here"
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def supabase_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_SERVICE_ROLE_KEY)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields from .env file


# Create settings instance
settings = Settings()


# Environment-specific overrides
if settings.ENVIRONMENT == "development":
    settings.DEBUG = True


# Validation
def validate_settings(s: Settings = settings):
    """Validate critical settings"""
    issues = []

    if s.SESSION_SECRET == "change-this-in-production":
        issues.append("SESSION_SECRET must be set in production")

    if s.is_production and not s.supabase_configured:
        issues.append("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in production")

    if issues:
        raise ValueError(f"Configuration issues: {', '.join(issues)}")


# Auto-validate on import in production
if settings.is_production:
    validate_settings()
