"""
API exception types.

Every expected failure leaves the API as {"detail": ..., "error_code": ...}
through the APIException handler in main.py. The rollup and insight code
never raises these; only routers and dependencies do.
"""
from datetime import date
from fastapi import HTTPException, status
from typing import Optional, Dict, Any


class APIException(HTTPException):
    """HTTPException carrying a machine-readable error_code."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class NotFoundError(APIException):
    def __init__(self, resource: str, identifier: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found: {identifier}",
            error_code="NOT_FOUND"
        )


class EventNotFoundError(NotFoundError):
    """No event of this kind with this id for the caller."""

    def __init__(self, kind: str, event_id: str):
        super().__init__(f"{kind} event", event_id)


class ValidationError(APIException):
    """422 with error_code VALIDATION_ERROR or VALIDATION_ERROR_<FIELD>."""

    def __init__(self, detail: str, field: Optional[str] = None):
        error_code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code=error_code
        )


class DateRangeError(ValidationError):
    """A start/end query that is reversed or longer than allowed."""

    def __init__(self, start: date, end: date, max_days: Optional[int] = None):
        if max_days is None:
            super().__init__(f"end ({end}) must not be before start ({start})", field="end")
        else:
            super().__init__(
                f"range {start}..{end} must not exceed {max_days} days", field="range"
            )
        self.start = start
        self.end = end


class UnauthorizedError(APIException):
    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
        )


class ServiceUnavailableError(APIException):
    """An upstream collaborator (text estimation) is unavailable; manual entry still works."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            error_code="SERVICE_UNAVAILABLE"
        )
