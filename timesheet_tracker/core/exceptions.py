"""
Error taxonomy for timesheet operations.

Each error is an HTTPException carrying a stable ``code`` so the
presentation layer can branch on the failure kind instead of the message.
"""
from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse


class TimesheetError(HTTPException):
    """Base class for errors raised by the timesheet service."""

    code = "TimesheetError"
    status_code_default = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, status_code: Optional[int] = None) -> None:
        super().__init__(status_code=status_code or self.status_code_default, detail=detail)


class NotFoundError(TimesheetError):
    """A timesheet or entry id does not resolve."""

    code = "NotFound"
    status_code_default = status.HTTP_404_NOT_FOUND


class InvalidRangeError(TimesheetError):
    """An entry date falls outside its timesheet's start/end range."""

    code = "InvalidRange"


class InvalidRequestError(TimesheetError):
    """A required identifier is missing from the request."""

    code = "InvalidRequest"


async def timesheet_error_handler(request: Request, exc: TimesheetError) -> JSONResponse:
    """Render a TimesheetError as ``{"detail": ..., "code": ...}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
    )
