"""Mapping of domain errors to HTTP responses.

Body shape: {"error": {"code", "message", "request_id"}}
"""

from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse

from linkpay.errors import (
    AuthorizationError,
    DuplicateOwner,
    ExternalDependencyError,
    NotFoundError,
    PaymentNotDue,
    PayrollError,
    ScheduleConflict,
)

# Most specific first
STATUS_BY_ERROR: list[tuple[type[PayrollError], int]] = [
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateOwner, status.HTTP_409_CONFLICT),
    (PaymentNotDue, status.HTTP_409_CONFLICT),
    (ScheduleConflict, status.HTTP_409_CONFLICT),
    (ExternalDependencyError, status.HTTP_502_BAD_GATEWAY),
]


def status_for(exc: PayrollError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_422_UNPROCESSABLE_ENTITY


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return str(request_id)
    return "unknown"


def error_response(request: Request, *, status_code: int, code: str, message: str) -> JSONResponse:
    payload = {
        "error": {
            "code": code,
            "message": message,
            "request_id": get_request_id(request),
        }
    }
    return JSONResponse(status_code=status_code, content=payload)
