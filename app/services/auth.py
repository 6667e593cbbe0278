"""Admin authentication service."""

import hmac
import logging

import bcrypt

from app.config import get_settings
from app.services.result import ErrorKind, ServiceResult

logger = logging.getLogger("clip_portal")

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """Checks the single admin's credentials."""

    def authenticate(self, email: str, password: str) -> ServiceResult:
        """Authenticate the admin by email and password. Value is the admin email."""
        settings = get_settings()
        if not settings.ADMIN_EMAIL or not (settings.ADMIN_PASSWORD or settings.ADMIN_PASSWORD_HASH):
            logger.error("Admin login attempted but admin credentials are not configured")
            return ServiceResult.fail(ErrorKind.CONFIGURATION, "Admin credentials are not configured")

        email_ok = hmac.compare_digest(
            email.strip().lower().encode("utf-8"), settings.ADMIN_EMAIL.strip().lower().encode("utf-8")
        )
        if settings.ADMIN_PASSWORD_HASH:
            password_ok = bcrypt.checkpw(password.encode("utf-8"), settings.ADMIN_PASSWORD_HASH.encode("utf-8"))
        else:
            password_ok = hmac.compare_digest(password.encode("utf-8"), settings.ADMIN_PASSWORD.encode("utf-8"))

        if not (email_ok and password_ok):
            return ServiceResult.fail(ErrorKind.AUTHORIZATION, INVALID_CREDENTIALS)

        return ServiceResult.ok(settings.ADMIN_EMAIL)


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
