from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Load .env early for local development
load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True)

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./app.db")

    # Security
    app_secret_key: str = os.getenv("APP_SECRET_KEY", "dev-secret-change-me")
    access_token_exp_minutes: int = int(os.getenv("ACCESS_TOKEN_EXP_MINUTES", str(60 * 24)))

    # Image uploads
    uploads_dir: str = os.getenv("UPLOADS_DIR", "./uploads")
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))

    # Rating recompute reads reviews in pages of this many rows
    rating_page_size: int = Field(default=int(os.getenv("RATING_PAGE_SIZE", "500")), gt=0)

    # Rate limits (requests per window, per client)
    auth_rate_limit: int = int(os.getenv("AUTH_RATE_LIMIT", "10"))
    review_rate_limit: int = int(os.getenv("REVIEW_RATE_LIMIT", "30"))
    rate_limit_window_seconds: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_dir: str = os.getenv("LOG_DIR", "./logs")
    log_file: str = os.getenv("LOG_FILE", "rooms.log")


settings = Settings()
