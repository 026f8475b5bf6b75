"""Custom exceptions and RFC 7807 Problem Detail error handlers."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

BASE_ERROR_URI = "https://vacations.local/errors"


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all application exceptions → RFC 7807 JSON."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        super().__init__(detail)


class NotFoundException(AppException):
    """404 — entity not found."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(
            status_code=404,
            error_type="not-found",
            title=f"{entity_type} Not Found",
            detail=f"{entity_type} with id '{entity_id}' does not exist.",
        )


class ForbiddenException(AppException):
    """403 — insufficient permissions."""

    def __init__(
        self,
        detail: str = "You do not have permission to perform this action.",
    ) -> None:
        super().__init__(
            status_code=403,
            error_type="forbidden",
            title="Forbidden",
            detail=detail,
        )


# ── Vacation domain errors ──────────────────────────────────────────

class InvalidRangeError(AppException):
    """422 — end date before start date."""

    def __init__(self, start: date, end: date) -> None:
        super().__init__(
            status_code=422,
            error_type="invalid-range",
            title="Invalid Date Range",
            detail="The end date must be on or after the start date.",
            errors={"end_date": [f"{end.isoformat()} is before {start.isoformat()}."]},
        )


class PastDateError(AppException):
    """422 — start date before today."""

    def __init__(self, start: date, today: date) -> None:
        super().__init__(
            status_code=422,
            error_type="past-date",
            title="Start Date In The Past",
            detail="Vacations cannot start before today.",
            errors={"start_date": [f"{start.isoformat()} is before {today.isoformat()}."]},
        )


class NoWorkingDaysError(AppException):
    """422 — the range only contains weekends and holidays."""

    def __init__(self, start: date, end: date) -> None:
        super().__init__(
            status_code=422,
            error_type="no-working-days",
            title="No Working Days",
            detail=(
                f"The range {start.isoformat()} – {end.isoformat()} contains no "
                "working days (all days are weekends or holidays)."
            ),
        )


class RoleCapacityExceededError(AppException):
    """409 — the role already has its maximum of people on vacation."""

    def __init__(self, role: str, capacity: int) -> None:
        super().__init__(
            status_code=409,
            error_type="role-capacity-exceeded",
            title="Role Capacity Exceeded",
            detail=(
                f"At most {capacity} people with role '{role}' can be on "
                "vacation on these dates."
            ),
        )
        self.role = role
        self.capacity = capacity


class InsufficientBalanceError(AppException):
    """409 — the user does not have enough vacation days left."""

    def __init__(self, available: int, requested: int) -> None:
        super().__init__(
            status_code=409,
            error_type="insufficient-balance",
            title="Insufficient Vacation Days",
            detail=(
                f"Not enough vacation days. Available: {available}, "
                f"requested: {requested}."
            ),
            errors={"balance": [f"available={available}", f"requested={requested}"]},
        )
        self.available = available
        self.requested = requested


class NotPendingError(AppException):
    """409 — only pending requests can be approved or rejected."""

    def __init__(self, status: str) -> None:
        super().__init__(
            status_code=409,
            error_type="not-pending",
            title="Request Not Pending",
            detail=f"Only pending requests can be approved or rejected (current: {status}).",
        )


class DuplicateHolidayError(AppException):
    """409 — a holiday already exists on that calendar date."""

    def __init__(self, day: date) -> None:
        super().__init__(
            status_code=409,
            error_type="duplicate-holiday",
            title="Duplicate Holiday",
            detail=f"A holiday already exists on {day.isoformat()}.",
            errors={"date": [f"'{day.isoformat()}' is already a holiday."]},
        )


# ── RFC 7807 builder ────────────────────────────────────────────────

def _build_problem_detail(exc: AppException, request: Request) -> dict[str, Any]:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{exc.error_type}",
        "title": exc.title,
        "status": exc.status_code,
        "detail": exc.detail,
        "instance": str(request.url.path),
    }
    if exc.errors:
        body["errors"] = exc.errors
    return body


# ── FastAPI handlers ────────────────────────────────────────────────

async def _handle_app_exception(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    logger.warning(
        "%s %s rejected: %s (%s)",
        request.method, request.url.path, exc.error_type, exc.detail,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_build_problem_detail(exc, request),
        media_type="application/problem+json",
    )


async def _handle_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        name = (
            ".".join(str(p) for p in loc[1:])
            if len(loc) > 1
            else str(loc[0]) if loc else "unknown"
        )
        field_errors.setdefault(name, []).append(err.get("msg", "Invalid value"))

    return JSONResponse(
        status_code=422,
        content={
            "type": f"{BASE_ERROR_URI}/validation-error",
            "title": "Validation Error",
            "status": 422,
            "detail": "Request validation failed.",
            "instance": str(request.url.path),
            "errors": field_errors,
        },
        media_type="application/problem+json",
    )


# ── Registration helper (called from main.py) ──────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""
    app.add_exception_handler(AppException, _handle_app_exception)          # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
