# app/exceptions.py
"""
Application exceptions and their FastAPI handlers.

ValidationError   — rejected before any write, with a specific reason.
QuotaExceeded     — carries the computed limit and current count.
NotFoundError     — referenced vehicle/driver/record no longer exists.
PersistenceError  — a write to the store failed.
"""

from datetime import date
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

from app.utils.logger import get_logger

logger = get_logger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500,
                 details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(AppException):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="ERR_VALIDATION_001",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"field": field} if field else None,
        )


class QuotaExceeded(AppException):
    """Raised when a day-off request would exceed the team's daily limit."""

    def __init__(self, day: date, team: str, limit: int, existing: Optional[int] = None, requested: int = 1):
        self.day = day
        self.team = team
        self.limit = limit
        self.existing = existing
        self.requested = requested
        if limit == 0:
            message = f"Day-off requests are not allowed for team {team} on {day.isoformat()} (limit 0)"
        else:
            message = (f"Day-off limit for team {team} on {day.isoformat()} exceeded: "
                       f"{existing} existing + {requested} requested > limit {limit}")
        super().__init__(
            message=message,
            error_code="ERR_QUOTA_001",
            status_code=status.HTTP_409_CONFLICT,
            details={"date": day.isoformat(), "team": team, "limit": limit,
                     "existing": existing, "requested": requested},
        )


class NotFoundError(AppException):
    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id},
        )


class PersistenceError(AppException):
    def __init__(self, operation: str, message: str = "Write to the record store failed"):
        super().__init__(
            message=f"{message} ({operation})",
            error_code="ERR_PERSIST_001",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"operation": operation},
        )


# ── Handlers ─────────────────────────────────────────────────────────────────

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details,
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )
