"""Admin session dependencies for FastAPI routes."""

from dataclasses import dataclass

from fastapi import HTTPException, Request, Response

from app.services.jwt import ADMIN_ROLE, get_jwt_service

AUTH_COOKIE_NAME = "cp_session"
COOKIE_MAX_AGE = 24 * 60 * 60  # 24 hours


@dataclass
class AdminSession:
    """Authenticated admin context."""

    email: str


def _token_from_request(request: Request) -> str | None:
    # Authorization header first, cookie as fallback
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]
    return request.cookies.get(AUTH_COOKIE_NAME)


def get_admin_session(request: Request) -> AdminSession | None:
    """Return the admin session if the request carries a valid one, else None."""
    token = _token_from_request(request)
    if not token:
        return None

    payload = get_jwt_service().decode_token(token)
    if not payload or payload.get("role") != ADMIN_ROLE:
        return None
    return AdminSession(email=payload.get("email", ""))


def require_admin(request: Request) -> AdminSession:
    """Guard for admin-only routes. Raises a generic 401 otherwise."""
    session = get_admin_session(request)
    if session is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return session


def set_auth_cookie(response: Response, token: str) -> None:
    """Set the admin session cookie."""
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=False,
        max_age=COOKIE_MAX_AGE,
    )


def clear_auth_cookie(response: Response) -> None:
    """Clear the admin session cookie."""
    response.delete_cookie(key=AUTH_COOKIE_NAME)
