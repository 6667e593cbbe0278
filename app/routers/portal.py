"""Portal link API endpoints."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import AdminSession, require_admin
from app.errors import raise_for_result
from app.rate_limit import limiter
from app.schemas.portal import PortalAccessResponse, PortalStatusResponse
from app.services.portal import get_portal_service

router = APIRouter(prefix="/api/v1/portal", tags=["Portal"])


def portal_path(slug: str | None) -> str | None:
    return f"/record/{slug}" if slug else None


@router.get("/access", response_model=PortalAccessResponse)
@limiter.limit("30/minute")
def check_access(request: Request, slug: str | None = None, db: Session = Depends(get_db)) -> PortalAccessResponse:
    """Check a portal link. Never reveals the active slug."""
    access = get_portal_service().check_access(db, slug)
    return PortalAccessResponse(allowed=access.allowed, expires_at=access.expires_at)


@router.get("", response_model=PortalStatusResponse)
def portal_status(
    admin: AdminSession = Depends(require_admin),
    db: Session = Depends(get_db),
) -> PortalStatusResponse:
    """Current portal link and whether it is still open."""
    access = get_portal_service().check_access(db)
    return PortalStatusResponse(
        allowed=access.allowed,
        slug=access.active_slug,
        expires_at=access.expires_at,
        portal_path=portal_path(access.active_slug),
    )


@router.post("/rotate", response_model=PortalStatusResponse)
def rotate_portal(
    admin: AdminSession = Depends(require_admin),
    db: Session = Depends(get_db),
) -> PortalStatusResponse:
    """Generate a new portal link, invalidating the previous one."""
    result = get_portal_service().rotate(db)
    raise_for_result(result, expose_detail=True)
    state = result.value
    return PortalStatusResponse(
        allowed=True,
        slug=state.slug,
        expires_at=state.expires_at,
        portal_path=portal_path(state.slug),
    )
