"""Configuration settings for Clip Portal."""

import os
import secrets
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./clip_portal.db")

    # JWT (admin session)
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", secrets.token_urlsafe(32))
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", "1440"))

    # Admin credentials
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")
    ADMIN_PASSWORD_HASH: str = os.getenv("ADMIN_PASSWORD_HASH", "")

    # Object storage
    AWS_ACCESS_KEY_ID: str = os.getenv("AWS_ACCESS_KEY_ID", "")
    AWS_SECRET_ACCESS_KEY: str = os.getenv("AWS_SECRET_ACCESS_KEY", "")
    AWS_REGION: str = os.getenv("AWS_REGION", "")
    S3_BUCKET_NAME: str = os.getenv("S3_BUCKET_NAME", "")
    CORS_ALLOWED_ORIGINS: list[str] = [
        o.strip() for o in os.getenv("CORS_ALLOWED_ORIGINS", "*").split(",") if o.strip()
    ]

    # Expiry
    EXPIRY_WINDOW_DAYS: int = int(os.getenv("EXPIRY_WINDOW_DAYS", "7"))
    UPLOAD_URL_EXPIRE_SECONDS: int = int(os.getenv("UPLOAD_URL_EXPIRE_SECONDS", "300"))
    VIEW_URL_EXPIRE_SECONDS: int = int(os.getenv("VIEW_URL_EXPIRE_SECONDS", "3600"))

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if not self.ADMIN_EMAIL or not (self.ADMIN_PASSWORD or self.ADMIN_PASSWORD_HASH):
            errors.append("ADMIN_EMAIL / ADMIN_PASSWORD are not set - admin login is disabled")
        for name in ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_REGION", "S3_BUCKET_NAME"):
            if not getattr(self, name):
                errors.append(f"{name} is not set - uploads will fail")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
