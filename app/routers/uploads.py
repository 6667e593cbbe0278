"""Upload hand-off API endpoints used by the portal page."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import raise_for_result
from app.rate_limit import limiter
from app.schemas.upload import CommitRequest, UploadTargetRequest, UploadTargetResponse
from app.services.portal import get_portal_service
from app.services.upload import get_upload_service

router = APIRouter(prefix="/api/v1/uploads", tags=["Uploads"])


def require_open_portal(db: Session, slug: str) -> None:
    """Reject requests that do not come through the active, unexpired portal link."""
    if not get_portal_service().check_access(db, slug).allowed:
        raise HTTPException(status_code=403, detail="Portal link is invalid or expired")


@router.post("/target", response_model=UploadTargetResponse)
@limiter.limit("10/minute")
def request_upload_target(
    request: Request,
    body: UploadTargetRequest,
    db: Session = Depends(get_db),
) -> UploadTargetResponse:
    """Issue a presigned PUT URL the browser uploads the video to directly."""
    require_open_portal(db, body.slug)
    result = get_upload_service().request_upload_target(body.name, body.content_type)
    raise_for_result(result)
    return UploadTargetResponse.model_validate(result.value)


@router.post("/commit")
@limiter.limit("10/minute")
def commit_upload(request: Request, body: CommitRequest, db: Session = Depends(get_db)) -> dict:
    """Record a completed upload so it shows up for the admin."""
    require_open_portal(db, body.slug)
    result = get_upload_service().commit_metadata(db, body.name, body.object_key)
    raise_for_result(result)
    return {"detail": "Recording saved", "id": result.value.id}
