"""Translate service results into HTTP responses."""

from fastapi import HTTPException

from app.services.result import ErrorKind, ServiceResult

STATUS_BY_KIND = {
    ErrorKind.CONFIGURATION: 500,
    ErrorKind.AUTHORIZATION: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.EXPIRED: 410,
    ErrorKind.VALIDATION: 400,
    ErrorKind.UPSTREAM: 502,
}

# Shown to respondents in place of configuration and upstream details
PUBLIC_MESSAGES = {
    ErrorKind.CONFIGURATION: "Service unavailable",
    ErrorKind.UPSTREAM: "Request failed. Please try again.",
}


def raise_for_result(result: ServiceResult, expose_detail: bool = False) -> None:
    """Raise an HTTPException for a failed result; do nothing on success.

    Admin routes pass ``expose_detail=True`` to surface configuration and
    upstream messages verbatim.
    """
    if result.success:
        return
    kind = result.kind or ErrorKind.UPSTREAM
    detail = result.error or kind.value
    if not expose_detail and kind in PUBLIC_MESSAGES:
        detail = PUBLIC_MESSAGES[kind]
    if kind is ErrorKind.AUTHORIZATION and not expose_detail:
        detail = "Not authenticated"
    raise HTTPException(status_code=STATUS_BY_KIND[kind], detail=detail)
