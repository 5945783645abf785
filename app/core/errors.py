"""
Central error handling for the Leave Ledger Backend

Domain errors subclass HTTPException so services can raise them directly and the
handlers below render them in the same envelope as every other error.
"""
import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException

logger = logging.getLogger(__name__)

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "*",
    "Access-Control-Allow-Headers": "*",
}


class LeaveError(HTTPException):
    """Base for leave-engine errors. `detail` carries code, message and field."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "leave_error"

    def __init__(self, message: str, field: Optional[str] = None, **extra: Any):
        self.message = message
        self.field = field
        detail: Dict[str, Any] = {"code": self.code, "message": message}
        if field is not None:
            detail["field"] = field
        detail.update(extra)
        super().__init__(status_code=self.status_code, detail=detail)


class LeaveValidationError(LeaveError):
    """Missing required fields, fractional elapsed hours, end not after start."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"


class InvalidTransitionError(LeaveError):
    """Event fired from a state outside its allowed source set."""

    status_code = status.HTTP_409_CONFLICT
    code = "invalid_transition"

    def __init__(self, event: str, current_status: str):
        self.event = event
        self.current_status = current_status
        super().__init__(
            f"Cannot {event} a leave application in status {current_status}",
            field="status",
            event=event,
            current_status=current_status,
        )


class LedgerInconsistencyError(LeaveError):
    """A reversal was requested but the application has no adjustment log."""

    status_code = status.HTTP_409_CONFLICT
    code = "ledger_inconsistency"


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle HTTPException (and domain LeaveError) with consistent JSON response format

    Args:
        request: FastAPI request object
        exc: HTTPException instance

    Returns:
        JSONResponse with error details
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "status_code": exc.status_code,
            "detail": exc.detail,
            "path": str(request.url.path)
        },
        headers=_CORS_HEADERS,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle RequestValidationError with consistent JSON response format

    Does not leak internal validation details in production.
    """
    from app.core.config import settings

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "status_code": 422,
                "detail": "Validation error: Invalid request data",
                "path": str(request.url.path)
            }
        )

    # ctx.error may hold a ValueError, which is not JSON serializable
    errors = []
    for e in exc.errors():
        err = dict(e)
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {
                k: (str(v) if not isinstance(v, (str, int, float, bool, type(None))) else v)
                for k, v in err["ctx"].items()
            }
        errors.append(err)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": True,
            "status_code": 422,
            "detail": "Validation error",
            "errors": errors,
            "path": str(request.url.path)
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions with consistent JSON response format

    Does not leak internal error details in production.
    """
    from app.core.config import settings

    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "status_code": 500,
                "detail": "Internal server error",
                "path": str(request.url.path)
            },
            headers=_CORS_HEADERS,
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": True,
            "status_code": 500,
            "detail": str(exc),
            "path": str(request.url.path),
            "traceback": traceback.format_exc() if settings.APP_ENV == "local" else None
        },
        headers=_CORS_HEADERS,
    )
