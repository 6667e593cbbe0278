"""Admin authentication API endpoints."""

from fastapi import APIRouter, HTTPException, Request, Response

from app.dependencies import clear_auth_cookie, set_auth_cookie
from app.errors import raise_for_result
from app.rate_limit import limiter
from app.schemas.auth import LoginRequest, TokenResponse
from app.services.auth import get_auth_service
from app.services.jwt import get_jwt_service

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
@limiter.limit("10/minute")
def login(request: Request, response: Response, body: LoginRequest) -> TokenResponse:
    """Authenticate as admin. Returns a token and sets the session cookie."""
    result = get_auth_service().authenticate(body.email, body.password)
    raise_for_result(result, expose_detail=True)

    token = get_jwt_service().create_token(email=result.value)
    set_auth_cookie(response, token)
    return TokenResponse(token=token, email=result.value)


@router.post("/logout")
def logout(response: Response) -> dict:
    """Clear the admin session cookie."""
    clear_auth_cookie(response)
    return {"detail": "Logged out"}


@router.get("/verify")
def verify_token(token: str) -> dict:
    """Check whether a token is a valid admin session."""
    if not get_jwt_service().is_admin_token(token):
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return {"valid": True}
