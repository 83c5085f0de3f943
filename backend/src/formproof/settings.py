"""Application settings and configuration."""

import sys

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_JWT_DEFAULTS = {"change-me-in-production", "secret", "your_jwt_secret_key_here_at_least_32_characters"}


class Settings(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "formproof"
    env: str = "development"
    log_level: str = "INFO"
    log_format: str = "console"  # console or json
    allowed_origins: str = "http://localhost:3000"

    # JWT
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"

    # Database
    database_url: str = "sqlite:///./formproof.db"
    transaction_max_attempts: int = 5

    # Clarifai OCR
    clarifai_pat: str | None = None
    clarifai_ocr_url: str = "https://api.clarifai.com/v2/models/ocr-scene-english/outputs"
    deploy_config_path: str | None = Field(
        default=None,
        validation_alias=AliasChoices("deploy_config_path", "FORMPROOF_DEPLOY_CONFIG"),
    )

    # HTTP Client
    request_timeout_seconds: float = 30.0

    # Rate limits (slowapi syntax)
    rate_limit_default: str = "200/minute"
    referral_visit_rate_limit: str = "60/minute"


# Global settings instance
settings = Settings()

# ── Security validation ──────────────────────────────────────────────
if settings.env == "production":
    if settings.jwt_secret_key in _INSECURE_JWT_DEFAULTS or len(settings.jwt_secret_key) < 32:
        print(
            "\n❌  FATAL: JWT_SECRET_KEY is insecure or too short (min 32 chars).\n"
            "   Set a strong random value:  openssl rand -hex 32\n",
            file=sys.stderr,
        )
        sys.exit(1)
