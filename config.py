"""
Application settings

Every environment-derived option the API recognizes lives on ``Settings``.
It is built once at process start (``Settings.from_env()``) and handed to
the components that need it; nothing else reads the environment.
"""
import os
import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

API_VERSION_RE = re.compile(r"^v?\d{4}-\d{2}-\d{2}$")


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    environment: str = "development"
    log_level: str = "INFO"
    frontend_url: str = "*"

    # Content store
    sanity_project_id: str = Field(..., min_length=1)
    sanity_dataset: str = "production"
    sanity_api_version: str = "2024-01-01"
    sanity_api_token: Optional[str] = None
    sanity_use_cdn: bool = False

    # Email
    resend_api_key: Optional[str] = None
    email_from: str = "Equity by Design <hello@equitybydesign.com>"
    notifications_from: str = "Contact Form <notifications@equitybydesign.com>"
    internal_notification_email: str = "team@equitybydesign.com"

    # Marketing platform
    convertkit_api_key: Optional[str] = None
    convertkit_api_secret: Optional[str] = None
    convertkit_form_id: Optional[str] = None

    site_url: str = "https://equitybydesign.com"
    confirmation_secret: str = Field("dev-confirmation-secret-change", min_length=8)
    jwt_secret: str = Field("dev-secret-change", min_length=8)

    # MongoDB
    database_url: str = "mongodb://localhost:27017"
    database_name: str = "equitybydesign"

    rate_limit_max: int = Field(3, ge=1)
    rate_limit_window_seconds: int = Field(3600, ge=1)

    @field_validator("sanity_api_version")
    @classmethod
    def check_api_version(cls, v: str) -> str:
        if not API_VERSION_RE.match(v):
            raise ValueError("API version must be a date like 2024-01-01")
        return v.lstrip("v")

    @field_validator("site_url")
    @classmethod
    def check_site_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("SITE_URL must be an absolute http(s) URL")
        return v.rstrip("/")

    @model_validator(mode="after")
    def check_production_secrets(self) -> "Settings":
        if self.environment == "production" and (
            self.confirmation_secret.startswith("dev-") or self.jwt_secret.startswith("dev-")
        ):
            raise ValueError("CONFIRMATION_SECRET and JWT_SECRET must be set in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        environment = os.getenv("ENVIRONMENT", "development")
        values = {
            "environment": environment,
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "frontend_url": os.getenv("FRONTEND_URL", "*"),
            "sanity_project_id": os.getenv("SANITY_PROJECT_ID", ""),
            "sanity_dataset": os.getenv("SANITY_DATASET", "production"),
            "sanity_api_version": os.getenv("SANITY_API_VERSION", "2024-01-01"),
            "sanity_api_token": os.getenv("SANITY_API_TOKEN") or None,
            "sanity_use_cdn": _env_flag("SANITY_USE_CDN", environment == "production"),
            "resend_api_key": os.getenv("RESEND_API_KEY") or None,
            "internal_notification_email": os.getenv(
                "INTERNAL_NOTIFICATION_EMAIL", "team@equitybydesign.com"
            ),
            "convertkit_api_key": os.getenv("CONVERTKIT_API_KEY") or None,
            "convertkit_api_secret": os.getenv("CONVERTKIT_API_SECRET") or None,
            "convertkit_form_id": os.getenv("CONVERTKIT_FORM_ID") or None,
            "site_url": os.getenv("SITE_URL", "https://equitybydesign.com"),
            "database_url": os.getenv("DATABASE_URL", "mongodb://localhost:27017"),
            "database_name": os.getenv("DATABASE_NAME", "equitybydesign"),
        }
        # Only override defaults that are actually set
        optional = {
            "email_from": "EMAIL_FROM",
            "notifications_from": "NOTIFICATIONS_FROM",
            "confirmation_secret": "CONFIRMATION_SECRET",
            "jwt_secret": "JWT_SECRET",
            "rate_limit_max": "RATE_LIMIT_MAX",
            "rate_limit_window_seconds": "RATE_LIMIT_WINDOW_SECONDS",
        }
        for field, var in optional.items():
            if os.getenv(var):
                values[field] = os.getenv(var)
        return cls(**values)
