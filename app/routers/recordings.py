"""Recording API endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import AdminSession, require_admin
from app.errors import raise_for_result
from app.schemas.recording import RecordingListResponse, RecordingResponse
from app.services.recording import get_recording_service
from app.services.result import ErrorKind

router = APIRouter(prefix="/api/v1/recordings", tags=["Recordings"])


@router.get("/", response_model=RecordingListResponse)
def list_recordings(
    admin: AdminSession = Depends(require_admin),
    db: Session = Depends(get_db),
) -> RecordingListResponse:
    """List all recordings, newest first."""
    result = get_recording_service().list_recordings(db)
    raise_for_result(result, expose_detail=True)
    return RecordingListResponse(
        items=[RecordingResponse.model_validate(v) for v in result.value],
        total=len(result.value),
    )


@router.get("/{recording_id}", response_model=RecordingResponse)
def get_recording(recording_id: int, db: Session = Depends(get_db)):
    """Get a recording with a short-lived view URL. Expired recordings expose only their name."""
    result = get_recording_service().get_recording(db, recording_id)
    if result.kind is ErrorKind.EXPIRED:
        return JSONResponse(
            status_code=410,
            content={"error": ErrorKind.EXPIRED.value, "data": {"name": result.value.name}},
        )
    raise_for_result(result)
    return RecordingResponse.model_validate(result.value)


@router.post("/{recording_id}/renew", response_model=RecordingResponse)
def renew_recording(
    recording_id: int,
    admin: AdminSession = Depends(require_admin),
    db: Session = Depends(get_db),
) -> RecordingResponse:
    """Start a fresh expiry window for a recording. The renewed recording has a new id."""
    result = get_recording_service().renew(db, recording_id)
    raise_for_result(result, expose_detail=True)
    return RecordingResponse.model_validate(result.value)


@router.delete("/{recording_id}")
def delete_recording(
    recording_id: int,
    admin: AdminSession = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    """Delete a recording and its stored video."""
    result = get_recording_service().delete(db, recording_id)
    raise_for_result(result, expose_detail=True)
    return {"detail": "Recording deleted"}
