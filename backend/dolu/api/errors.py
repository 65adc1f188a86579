"""
Translate service-layer errors into HTTP errors.
"""
from fastapi import HTTPException

from dolu.services.errors import (
    DoluError, NotFoundError, ConflictError, ValidationFailedError, QuoteRejectedError,
    InvalidSettingError, TrackingIdExhaustedError, TrackingIdUnavailableError,
)


def http_error(exc: DoluError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, QuoteRejectedError):
        return HTTPException(status_code=422, detail={"error": exc.error, "message": str(exc)})
    if isinstance(exc, (ValidationFailedError, InvalidSettingError)):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, (TrackingIdExhaustedError, TrackingIdUnavailableError)):
        return HTTPException(status_code=503, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))
