"""Translate engine errors into HTTP responses."""
from fastapi import HTTPException

from meetpoll.core.exceptions import InvalidState, NotFound, SchedulingError, ValidationError


def to_http_exception(exc: SchedulingError) -> HTTPException:
    """Map a scheduling error onto its HTTP status."""
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail=exc.errors)
    if isinstance(exc, NotFound):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, InvalidState):
        return HTTPException(status_code=409, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))
