"""API routers."""

from app.routers.auth import router as auth_router
from app.routers.portal import router as portal_router
from app.routers.recordings import router as recordings_router
from app.routers.uploads import router as uploads_router

__all__ = ["auth_router", "portal_router", "recordings_router", "uploads_router"]
