"""
Custom exception hierarchy for the push-up tracker.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class TrackerException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class StorageError(TrackerException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "STORAGE_ERROR"

    def __init__(self, message: str = "Record store is unavailable."):
        super().__init__(message=message)


class CorruptRecordError(TrackerException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "CORRUPT_RECORD"

    def __init__(self, bucket: str, key: str):
        super().__init__(
            message=f"Stored value at {bucket}/{key} is not valid JSON.",
            details={"bucket": bucket, "key": key},
        )


class InvalidOriginError(TrackerException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INVALID_ORIGIN"

    def __init__(self, value: str):
        super().__init__(
            message=f"Stored first day {value!r} is not a YYYY-MM-DD date.",
            details={"value": value},
        )


class ClockSkewError(TrackerException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "CLOCK_SKEW"

    def __init__(self, origin: date, today: date):
        super().__init__(
            message=f"First day {origin} is after today {today}.",
            details={"origin": str(origin), "today": str(today)},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def tracker_exception_handler(request: Request, exc: TrackerException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
